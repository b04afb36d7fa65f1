"""
Tests for the refresh token store.
"""

from datetime import timedelta

import pytest
from sqlalchemy import func, select

from trainerhub.auth.jwt import hash_refresh_secret
from trainerhub.db.models import RefreshToken, utcnow
from trainerhub.services.refresh_token import RefreshTokenStore
from trainerhub.services.tenant import TenantService


@pytest.fixture
async def user(db):
    _, user = await TenantService(db).create_with_user(
        name="Gym A",
        email="coach@gym.com",
        password_hash="unused",
        first_name="Ana",
        last_name="Silva",
    )
    return user


@pytest.fixture
def store(db):
    return RefreshTokenStore(db)


def later(days: int):
    """Clock that reads ``days`` into the future."""
    return lambda: utcnow() + timedelta(days=days)


async def count_rows(db) -> int:
    result = await db.execute(select(func.count()).select_from(RefreshToken))
    return result.scalar_one()


class TestCreate:

    async def test_returns_raw_secret_and_stores_hash(self, db, store, user):
        raw = await store.create(user.id)

        rows = (await db.execute(select(RefreshToken))).scalars().all()
        assert len(rows) == 1
        assert rows[0].token_hash == hash_refresh_secret(raw)
        assert rows[0].token_hash != raw
        assert rows[0].revoked is False

    async def test_secret_length(self, store, user):
        raw = await store.create(user.id)

        assert len(raw) == 128


class TestVerify:

    async def test_active_token(self, store, user):
        raw = await store.create(user.id)

        record = await store.verify(raw)

        assert record is not None
        assert record.user_id == user.id

    async def test_unknown_token(self, store, user):
        await store.create(user.id)

        assert await store.verify("garbage") is None

    async def test_expired_token(self, db, store, user):
        raw = await store.create(user.id, ttl_days=7)

        assert await RefreshTokenStore(db, clock=later(6)).verify(raw) is not None
        assert await RefreshTokenStore(db, clock=later(8)).verify(raw) is None

    async def test_revoked_token(self, store, user):
        raw = await store.create(user.id)
        await store.revoke(raw)

        assert await store.verify(raw) is None


class TestConsume:

    async def test_single_use(self, store, user):
        raw = await store.create(user.id)

        assert await store.consume(raw) == user.id
        assert await store.consume(raw) is None
        assert await store.verify(raw) is None

    async def test_expired_cannot_be_consumed(self, db, store, user):
        raw = await store.create(user.id, ttl_days=1)

        assert await RefreshTokenStore(db, clock=later(2)).consume(raw) is None


class TestRevoke:

    async def test_second_revoke_reports_not_found(self, store, user):
        raw = await store.create(user.id)

        assert await store.revoke(raw) is True
        assert await store.revoke(raw) is False

    async def test_revoke_unknown(self, store, user):
        assert await store.revoke("never-issued") is False

    async def test_revoke_all_for_user(self, store, user):
        first = await store.create(user.id)
        second = await store.create(user.id)
        await store.revoke(second)

        assert await store.revoke_all_for_user(user.id) == 1
        assert await store.verify(first) is None


class TestSweep:

    async def test_count_matches_sweep(self, db, store, user):
        await store.create(user.id, ttl_days=7)
        revoked = await store.create(user.id, ttl_days=7)
        await store.create(user.id, ttl_days=1)
        await store.revoke(revoked)
        future = RefreshTokenStore(db, clock=later(2))

        assert await future.count_expired() == 2
        assert await count_rows(db) == 3
        assert await future.sweep_expired() == 2
        assert await future.count_expired() == 0

    async def test_deletes_only_dead_rows(self, db, store, user):
        active = await store.create(user.id, ttl_days=7)
        revoked = await store.create(user.id, ttl_days=7)
        await store.create(user.id, ttl_days=1)
        await store.revoke(revoked)

        deleted = await RefreshTokenStore(db, clock=later(2)).sweep_expired()

        assert deleted == 2
        assert await count_rows(db) == 1
        assert await store.verify(active) is not None
