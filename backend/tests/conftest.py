"""
Shared fixtures: a throwaway SQLite database per test, the app, a client,
and helpers to register and switch between users.
"""

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from travelmarket.core.settings import Settings
from travelmarket.db.session import DatabaseManager
from travelmarket.db.storage import DatabaseStorage
from travelmarket.main import create_app

PASSWORD = "Secret123"


@pytest.fixture
def settings(tmp_path):
    return Settings(
        _env_file=None,
        DB_URL=f"sqlite:///{tmp_path / 'test.db'}",
        ENABLE_RATE_LIMITING=False,
        ENABLE_METRICS=False,
        LOG_JSON=False,
        LOG_LEVEL="WARNING",
    )


@pytest_asyncio.fixture
async def db(settings):
    manager = DatabaseManager(settings)
    await manager.initialize()
    await manager.init_db()
    yield manager
    await manager.close()


@pytest_asyncio.fixture
async def storage(db):
    return DatabaseStorage(db)


@pytest.fixture
def app(settings):
    return create_app(settings)


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def register(client):
    """Register a user; the client is left logged in as that user"""

    def _register(username, role="traveler", email=None, password=PASSWORD, full_name=None):
        client.cookies.clear()
        response = client.post("/api/register", json={
            "username": username,
            "email": email or f"{username}@example.com",
            "password": password,
            "fullName": full_name or username.title(),
            "role": role,
        })
        assert response.status_code == 201, response.text
        return response.json()

    return _register


@pytest.fixture
def login_as(client):
    """Switch the client's session to another user"""

    def _login_as(username, password=PASSWORD):
        client.cookies.clear()
        response = client.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()

    return _login_as


@pytest.fixture
def agency_user(client, register):
    """An agency-role user with an agency profile, logged in"""
    user = register("wanderlust", role="agency")
    response = client.post("/api/agencies", json={
        "companyName": "Wanderlust Tours",
        "description": "Curated trips across India",
    })
    assert response.status_code == 201, response.text
    return {"user": user, "agency": response.json()}
