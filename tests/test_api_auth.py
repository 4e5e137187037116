from typing import Any, Dict

import pytest
from httpx import AsyncClient

from eventhub.core.settings import settings

# Created by the admin_headers fixture
ADMIN_EMAIL = "admin@example.com"


async def test_signup_then_login(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/auth/signup", json={"email": "new@example.com", "password": "hunter22"}
    )
    assert response.status_code == 201
    assert response.json()["email"] == "new@example.com"
    assert "hashed_password" not in response.json()

    duplicate = await client.post(
        "/api/v1/auth/signup", json={"email": "new@example.com", "password": "hunter22"}
    )
    assert duplicate.status_code == 400

    login = await client.post(
        "/api/v1/auth/login", data={"username": "new@example.com", "password": "hunter22"}
    )
    assert login.status_code == 200
    assert login.json()["token_type"] == "bearer"


async def test_signup_short_password(client: AsyncClient) -> None:
    response = await client.post(
        "/api/v1/auth/signup", json={"email": "new@example.com", "password": "123"}
    )
    assert response.status_code == 422


async def test_signup_closed(client: AsyncClient, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings, "USERS_OPEN_REGISTRATION", False)
    response = await client.post(
        "/api/v1/auth/signup", json={"email": "new@example.com", "password": "hunter22"}
    )
    assert response.status_code == 403


async def test_login_wrong_password(client: AsyncClient, admin_headers: Dict[str, str]) -> None:
    response = await client.post(
        "/api/v1/auth/login", data={"username": ADMIN_EMAIL, "password": "wrong"}
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Incorrect email or password"


async def test_session_and_logout(
    client: AsyncClient, admin_headers: Dict[str, str], fake_redis: Any
) -> None:
    session = await client.get("/api/v1/auth/session", headers=admin_headers)
    assert session.status_code == 200
    assert session.json()["email"] == ADMIN_EMAIL
    assert session.json()["last_login"] is not None

    logout = await client.post("/api/v1/auth/logout", headers=admin_headers)
    assert logout.status_code == 200
    assert fake_redis.store == {}

    # The token is still well-formed but its session is gone
    after = await client.get("/api/v1/auth/session", headers=admin_headers)
    assert after.status_code == 401
