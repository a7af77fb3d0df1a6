from travelmarket.core.logging_config import redact_sensitive


def test_redact_password_fields():
    event = {"event": "user_registered", "username": "asha", "password": "Secret123"}
    out = redact_sensitive(None, None, event.copy())
    assert out["password"] == "REDACTED"
    assert out["username"] == "asha"


def test_redact_session_cookie_in_header_string():
    event = {"headers": "theme=dark; travelmarket.sid=abc123XYZ; lang=en"}
    out = redact_sensitive(None, None, event.copy())
    assert "abc123XYZ" not in out["headers"]
    assert "travelmarket.sid=REDACTED" in out["headers"]
    assert "theme=dark" in out["headers"]


def test_redact_nested():
    event = {"payload": {"user": {"password": "x", "email": "a@example.com"}, "items": [{"sid": "s1"}]}}
    out = redact_sensitive(None, None, event.copy())
    assert out["payload"]["user"]["password"] == "REDACTED"
    assert out["payload"]["user"]["email"] == "a@example.com"
    assert out["payload"]["items"][0]["sid"] == "REDACTED"


def test_none_values_left_alone():
    out = redact_sensitive(None, None, {"session_id": None})
    assert out["session_id"] is None


def test_request_id_header_is_echoed(client):
    response = client.get("/", headers={"X-Request-ID": "req-42"})
    assert response.headers["X-Request-ID"] == "req-42"
    assert client.get("/").headers["X-Request-ID"]
