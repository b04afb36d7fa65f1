"""
Refresh token store.

Rows are keyed by the SHA-256 of the raw secret. "Active" means not revoked
and not yet expired; callers never learn which of the two made a token
inactive.
"""

from collections.abc import Callable
from datetime import datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from trainerhub.auth.jwt import generate_refresh_secret, hash_refresh_secret
from trainerhub.config import settings
from trainerhub.db.models import RefreshToken, utcnow

logger = structlog.get_logger()


class RefreshTokenStore:
    """Persistence and rotation of refresh tokens."""

    def __init__(
        self,
        db: AsyncSession,
        clock: Callable[[], datetime] = utcnow,
        secret_bytes: int | None = None,
    ):
        self.db = db
        self.clock = clock
        self.secret_bytes = secret_bytes or settings.refresh_token_bytes

    def _active(self, token_hash: str):
        return (
            RefreshToken.token_hash == token_hash,
            RefreshToken.revoked.is_(False),
            RefreshToken.expires_at > self.clock(),
        )

    async def create(self, user_id: UUID, ttl_days: int | None = None) -> str:
        """
        Persist a new refresh token for ``user_id``.

        Returns:
            The raw secret. It exists only in this return value.
        """
        if ttl_days is None:
            ttl_days = settings.refresh_token_expire_days

        raw_secret = generate_refresh_secret(self.secret_bytes)
        expires_at = self.clock() + timedelta(days=ttl_days)

        self.db.add(
            RefreshToken(
                user_id=user_id,
                token_hash=hash_refresh_secret(raw_secret),
                expires_at=expires_at,
                created_at=self.clock(),
            )
        )
        await self.db.flush()

        logger.debug("Refresh token created", user_id=str(user_id), expires_at=expires_at.isoformat())
        return raw_secret

    async def verify(self, raw_secret: str) -> RefreshToken | None:
        """Return the token row if it is active, else None."""
        result = await self.db.execute(
            select(RefreshToken).where(*self._active(hash_refresh_secret(raw_secret)))
        )
        return result.scalar_one_or_none()

    async def consume(self, raw_secret: str) -> UUID | None:
        """
        Revoke the token only if it is still active, in one statement.

        Concurrent callers presenting the same secret serialize on the row;
        exactly one gets the owner's id back, the rest get None.
        """
        result = await self.db.execute(
            update(RefreshToken)
            .where(*self._active(hash_refresh_secret(raw_secret)))
            .values(revoked=True)
            .returning(RefreshToken.user_id)
            .execution_options(synchronize_session=False)
        )
        return result.scalar_one_or_none()

    async def revoke(self, raw_secret: str) -> bool:
        """
        Mark a token revoked.

        Matches only non-revoked rows, so a second call for the same secret
        returns False. Expired rows can still be revoked.
        """
        result = await self.db.execute(
            update(RefreshToken)
            .where(
                RefreshToken.token_hash == hash_refresh_secret(raw_secret),
                RefreshToken.revoked.is_(False),
            )
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount > 0

    async def revoke_all_for_user(self, user_id: UUID) -> int:
        """Revoke every outstanding token of a user. Returns rows touched."""
        result = await self.db.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id, RefreshToken.revoked.is_(False))
            .values(revoked=True)
            .execution_options(synchronize_session=False)
        )
        logger.info("Refresh tokens revoked for user", user_id=str(user_id), count=result.rowcount)
        return result.rowcount

    def _dead(self):
        return or_(RefreshToken.expires_at <= self.clock(), RefreshToken.revoked.is_(True))

    async def count_expired(self) -> int:
        """Rows ``sweep_expired`` would delete right now."""
        result = await self.db.execute(
            select(func.count()).select_from(RefreshToken).where(self._dead())
        )
        return result.scalar_one()

    async def sweep_expired(self) -> int:
        """Delete rows that are expired or revoked. Returns rows deleted."""
        result = await self.db.execute(
            delete(RefreshToken)
            .where(self._dead())
            .execution_options(synchronize_session=False)
        )
        logger.info("Refresh tokens swept", count=result.rowcount)
        return result.rowcount
