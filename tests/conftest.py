"""
Shared fixtures: in-memory SQLite database, token issuer, HTTP client.
"""

import os

# Must be set before trainerhub.config is imported
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")

from uuid import uuid4

import httpx
import pytest
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.pool import StaticPool

from trainerhub.auth.jwt import TokenConfig, TokenIssuer, get_token_issuer
from trainerhub.auth.schemas import RegisterRequest
from trainerhub.db import Base, get_db, make_session_factory
from trainerhub.db import models  # noqa: F401
from trainerhub.services.auth import AuthService


@pytest.fixture
async def engine():
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def issuer() -> TokenIssuer:
    # Fresh secret per test
    return TokenIssuer(TokenConfig(secret_key=f"test-{uuid4().hex}"))


@pytest.fixture
def auth_service(db, issuer) -> AuthService:
    return AuthService(db, issuer)


@pytest.fixture
def register_request():
    def make(email: str = "a@b.com", password: str = "secret123", **overrides) -> RegisterRequest:
        data = {
            "email": email,
            "password": password,
            "first_name": "Ana",
            "last_name": "Silva",
            "tenant_name": "Gym A",
        }
        data.update(overrides)
        return RegisterRequest(**data)

    return make


@pytest.fixture
async def client(session_factory, issuer):
    from trainerhub.api.main import app

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_token_issuer] = lambda: issuer

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
