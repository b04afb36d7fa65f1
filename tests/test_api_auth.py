"""
Tests for the authentication HTTP routes.
"""

from unittest.mock import AsyncMock

import httpx
import pytest
from fastapi import FastAPI

from trainerhub.api.main import app, service_error_handler
from trainerhub.auth.dependencies import CurrentTenant
from trainerhub.auth.errors import ServiceError
from trainerhub.services.refresh_token import RefreshTokenStore

REGISTER = "/api/v1/auth/register"
LOGIN = "/api/v1/auth/login"
REFRESH = "/api/v1/auth/refresh"
LOGOUT = "/api/v1/auth/logout"
LOGOUT_ALL = "/api/v1/auth/logout-all"
ME = "/api/v1/auth/me"

SIGNUP = {
    "email": "a@b.com",
    "password": "secret123",
    "first_name": "Ana",
    "last_name": "Silva",
    "tenant_name": "Gym A",
}


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


async def signup(client) -> dict:
    response = await client.post(REGISTER, json=SIGNUP)
    assert response.status_code == 201
    return response.json()


class TestRegisterRoute:

    async def test_register(self, client):
        data = await signup(client)

        assert data["success"] is True
        assert data["user"]["role"] == "trainer"
        assert data["tenant"]["plan_type"] == "basic"
        assert data["token_type"] == "bearer"
        assert data["expires_in"] == 24 * 3600
        assert "password_hash" not in data["user"]

    async def test_duplicate_email(self, client):
        await signup(client)

        response = await client.post(REGISTER, json={**SIGNUP, "tenant_name": "Gym B"})

        assert response.status_code == 409
        assert response.json() == {
            "success": False,
            "message": "Email already in use",
            "error": "email_already_in_use",
        }

    async def test_invalid_payload(self, client):
        response = await client.post(REGISTER, json={**SIGNUP, "email": "not-an-email"})

        assert response.status_code == 422

    async def test_password_over_bcrypt_limit(self, client):
        response = await client.post(REGISTER, json={**SIGNUP, "password": "a" * 73})

        assert response.status_code == 422


class TestLoginRoute:

    async def test_login(self, client):
        await signup(client)

        response = await client.post(LOGIN, json={"email": "a@b.com", "password": "secret123"})

        assert response.status_code == 200
        assert response.json()["user"]["last_login_at"] is not None

    async def test_wrong_password(self, client):
        await signup(client)

        response = await client.post(LOGIN, json={"email": "a@b.com", "password": "wrong"})

        assert response.status_code == 401
        body = response.json()
        assert body["message"] == "Invalid credentials"
        assert "user" not in body


class TestTokenRoutes:

    async def test_refresh_rotates(self, client):
        data = await signup(client)

        first = await client.post(REFRESH, json={"refresh_token": data["refresh_token"]})
        replay = await client.post(REFRESH, json={"refresh_token": data["refresh_token"]})

        assert first.status_code == 200
        assert first.json()["refresh_token"] != data["refresh_token"]
        assert replay.status_code == 401
        assert replay.json()["message"] == "Invalid refresh token"

    async def test_refresh_garbage(self, client):
        response = await client.post(REFRESH, json={"refresh_token": "garbage"})

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid refresh token"

    async def test_logout_twice(self, client):
        data = await signup(client)

        for _ in range(2):
            response = await client.post(LOGOUT, json={"refresh_token": data["refresh_token"]})
            assert response.status_code == 200
            assert response.json()["success"] is True

        response = await client.post(REFRESH, json={"refresh_token": data["refresh_token"]})
        assert response.status_code == 401

    async def test_logout_all(self, client):
        data = await signup(client)
        login = await client.post(LOGIN, json={"email": "a@b.com", "password": "secret123"})

        response = await client.post(LOGOUT_ALL, headers=bearer(data["access_token"]))
        assert response.status_code == 200

        for token in (data["refresh_token"], login.json()["refresh_token"]):
            response = await client.post(REFRESH, json={"refresh_token": token})
            assert response.status_code == 401

    async def test_logout_all_storage_failure(self, client, monkeypatch):
        data = await signup(client)
        monkeypatch.setattr(
            RefreshTokenStore,
            "revoke_all_for_user",
            AsyncMock(side_effect=RuntimeError("boom")),
        )

        response = await client.post(LOGOUT_ALL, headers=bearer(data["access_token"]))

        assert response.status_code == 500
        assert response.json() == {
            "success": False,
            "message": "Internal error",
            "error": "internal_error",
        }


class TestMeRoute:

    async def test_requires_token(self, client):
        response = await client.get(ME)

        assert response.status_code == 401
        assert response.json()["message"] == "Access token required"

    async def test_invalid_token(self, client):
        response = await client.get(ME, headers=bearer("garbage"))

        assert response.status_code == 403
        assert response.json()["message"] == "Invalid token"

    async def test_profile(self, client):
        data = await signup(client)

        response = await client.get(ME, headers=bearer(data["access_token"]))

        assert response.status_code == 200
        body = response.json()
        assert body["user"]["id"] == data["user"]["id"]
        assert body["tenant"]["name"] == "Gym A"


class TestCurrentTenant:

    @pytest.fixture
    async def tenant_client(self, client):
        # A downstream route that only needs the caller's tenant
        tenant_app = FastAPI()

        @tenant_app.get("/tenant")
        async def read_tenant(tenant_id: CurrentTenant) -> dict[str, str]:
            return {"tenant_id": str(tenant_id)}

        tenant_app.dependency_overrides = app.dependency_overrides
        tenant_app.add_exception_handler(ServiceError, service_error_handler)

        transport = httpx.ASGITransport(app=tenant_app)
        async with httpx.AsyncClient(transport=transport, base_url="http://test") as tenant_client:
            yield tenant_client

    async def test_resolves_tenant(self, client, tenant_client):
        data = await signup(client)

        response = await tenant_client.get("/tenant", headers=bearer(data["access_token"]))

        assert response.status_code == 200
        assert response.json() == {"tenant_id": data["tenant"]["id"]}

    async def test_requires_token(self, tenant_client):
        response = await tenant_client.get("/tenant")

        assert response.status_code == 401
