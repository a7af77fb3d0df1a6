"""
Registration, login, logout and the session cookie
"""

from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from conftest import PASSWORD
from travelmarket.api.auth import AuthService
from travelmarket.api.schemas import RegisterRequest
from travelmarket.core.errors import ConstraintViolation, DuplicateUser
from travelmarket.core.rate_limiting import auth_limit, configure_rate_limiting, limiter
from travelmarket.main import create_app


def test_register_returns_user_without_password(client, register):
    user = register("asha", full_name="Asha Rao")

    assert user["username"] == "asha"
    assert user["fullName"] == "Asha Rao"
    assert user["role"] == "traveler"
    assert "password" not in user
    assert "id" in user and "createdAt" in user


def test_register_logs_the_user_in(client, register):
    register("asha")

    response = client.get("/api/user")
    assert response.status_code == 200
    assert response.json()["username"] == "asha"


def test_register_duplicate_username_rejected(client, register):
    register("asha")
    client.cookies.clear()

    response = client.post("/api/register", json={
        "username": "asha",
        "email": "different@example.com",
        "password": PASSWORD,
        "fullName": "Someone Else",
        "role": "traveler",
    })

    assert response.status_code == 400
    assert response.json() == {"message": "Username already exists"}


def test_register_duplicate_email_rejected(client, register):
    register("asha", email="shared@example.com")
    client.cookies.clear()

    response = client.post("/api/register", json={
        "username": "ravi",
        "email": "shared@example.com",
        "password": PASSWORD,
        "fullName": "Ravi",
        "role": "agency",
    })

    assert response.status_code == 400
    assert response.json()["message"] == "Email already exists"


def test_register_validation_errors_are_field_level(client):
    response = client.post("/api/register", json={
        "username": "ab",
        "email": "not-an-email",
        "password": "123",
        "fullName": "",
        "role": "pilot",
    })

    assert response.status_code == 400
    body = response.json()
    assert body["message"] == "Invalid request data"
    failed = {err["loc"][-1] for err in body["errors"]}
    assert {"username", "email", "password", "fullName", "role"} <= failed


def test_password_is_stored_hashed(client, register, app):
    register("asha")

    # The engine lives on the client's event loop
    user = client.portal.call(app.state.storage.get_user_by_username, "asha")
    stored = user.password
    assert stored != PASSWORD
    assert stored.startswith("$2")


def test_login_with_username_or_email(client, register, login_as):
    register("asha")

    assert login_as("asha")["username"] == "asha"

    client.cookies.clear()
    response = client.post("/api/login", json={"username": "asha@example.com", "password": PASSWORD})
    assert response.status_code == 200
    assert client.get("/api/user").json()["username"] == "asha"


def test_login_with_wrong_password(client, register):
    register("asha")
    client.cookies.clear()

    response = client.post("/api/login", json={"username": "asha", "password": "Wrong999"})

    assert response.status_code == 401
    assert response.json() == {"message": "Invalid username or password"}
    assert client.get("/api/user").status_code == 401


def test_login_unknown_user(client):
    response = client.post("/api/login", json={"username": "ghost", "password": PASSWORD})
    assert response.status_code == 401


def test_login_replaces_previous_session(client, register, app):
    register("asha")
    first_sid = client.cookies.get(app.state.settings.SESSION_COOKIE_NAME)

    response = client.post("/api/login", json={"username": "asha", "password": PASSWORD})
    assert response.status_code == 200

    second_sid = client.cookies.get(app.state.settings.SESSION_COOKIE_NAME)
    assert second_sid != first_sid
    assert app.state.sessions.get(first_sid) is None


def test_logout_destroys_session(client, register, app):
    register("asha")
    sid = client.cookies.get(app.state.settings.SESSION_COOKIE_NAME)

    response = client.post("/api/logout")

    assert response.status_code == 200
    assert app.state.sessions.get(sid) is None
    assert client.get("/api/user").status_code == 401


def test_unknown_session_cookie_is_unauthorized(client, app):
    client.cookies.set(app.state.settings.SESSION_COOKIE_NAME, "forged")
    response = client.get("/api/user")
    assert response.status_code == 401
    assert response.json() == {"message": "Unauthorized"}


def test_login_is_rate_limited(settings):
    limited = settings.model_copy(update={"ENABLE_RATE_LIMITING": True, "RATE_LIMIT_AUTH": "2/minute"})
    limiter.reset()
    try:
        with TestClient(create_app(limited)) as client:
            creds = {"username": "ghost", "password": PASSWORD}
            assert client.post("/api/login", json=creds).status_code == 401
            assert client.post("/api/login", json=creds).status_code == 401

            response = client.post("/api/login", json=creds)
            assert response.status_code == 429
            assert response.json()["message"].startswith("Too many requests")
    finally:
        limiter.reset()
        limiter.enabled = False


def test_login_with_mixed_case_email_used_at_registration(client, register):
    register("bob", email="Bob@Example.COM")
    client.cookies.clear()

    response = client.post("/api/login", json={"username": "Bob@Example.COM", "password": PASSWORD})
    assert response.status_code == 200
    assert response.json()["username"] == "bob"


def test_register_email_differing_only_in_case_is_duplicate(client, register):
    register("bob", email="bob@example.com")
    client.cookies.clear()

    response = client.post("/api/register", json={
        "username": "robert",
        "email": "BOB@example.com",
        "password": PASSWORD,
        "fullName": "Robert",
    })
    assert response.status_code == 400
    assert response.json()["message"] == "Email already exists"


@pytest.mark.asyncio
async def test_registration_race_reports_duplicate_user():
    storage = AsyncMock()
    # the pre-check sees nothing; the insert then loses to a concurrent registration
    storage.get_user_by_username.side_effect = [None, SimpleNamespace(id=1)]
    storage.get_user_by_email.return_value = None
    storage.create_user.side_effect = ConstraintViolation()
    service = AuthService(storage, sessions=None, settings=None)

    payload = RegisterRequest(
        username="asha", email="asha@example.com", password=PASSWORD, full_name="Asha",
    )
    with pytest.raises(DuplicateUser) as excinfo:
        await service.register_user(payload)
    assert excinfo.value.message == "Username already exists"


@pytest.mark.asyncio
async def test_registration_constraint_failure_without_duplicate_propagates():
    storage = AsyncMock()
    storage.get_user_by_username.return_value = None
    storage.get_user_by_email.return_value = None
    storage.create_user.side_effect = ConstraintViolation()
    service = AuthService(storage, sessions=None, settings=None)

    payload = RegisterRequest(
        username="asha", email="asha@example.com", password=PASSWORD, full_name="Asha",
    )
    with pytest.raises(ConstraintViolation) as excinfo:
        await service.register_user(payload)
    assert not isinstance(excinfo.value, DuplicateUser)


def test_rate_limiting_follows_app_settings(settings):
    configured = configure_rate_limiting(
        settings.model_copy(update={"ENABLE_RATE_LIMITING": True, "RATE_LIMIT_AUTH": "3/hour"})
    )
    try:
        assert configured is limiter
        assert limiter.enabled is True
        assert auth_limit() == "3/hour"

        app = create_app(settings)
        assert app.state.limiter is limiter
        assert limiter.enabled is False
        assert auth_limit() == settings.RATE_LIMIT_AUTH
    finally:
        configure_rate_limiting(settings)
