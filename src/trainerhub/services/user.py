"""
User store.

Lookups are scoped to active users unless stated otherwise.
"""

from uuid import UUID

import structlog
from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from trainerhub.db.models import User, UserRole, utcnow

logger = structlog.get_logger()


def normalize_email(email: str) -> str:
    return email.strip().lower()


class UserService:
    """Service for user persistence used by the auth core."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        tenant_id: UUID,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.TRAINER,
    ) -> User:
        """
        Create a user inside an existing tenant.

        The unique constraint on ``email`` is authoritative; a duplicate
        surfaces as ``IntegrityError`` at flush.
        """
        user = User(
            tenant_id=tenant_id,
            email=normalize_email(email),
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        self.db.add(user)
        await self.db.flush()

        logger.info("User created", user_id=str(user.id), tenant_id=str(tenant_id))
        return user

    async def get(self, user_id: UUID) -> User | None:
        """Get active user by ID."""
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        """Get active user by email."""
        result = await self.db.execute(
            select(User).where(
                User.email == normalize_email(email),
                User.is_active.is_(True),
            )
        )
        return result.scalar_one_or_none()

    async def exists_by_email(self, email: str) -> bool:
        """True if any user, active or not, owns this email."""
        result = await self.db.execute(
            select(exists().where(User.email == normalize_email(email)))
        )
        return bool(result.scalar())

    async def get_password_hash(self, user_id: UUID) -> str | None:
        """Fetch the stored hash on its own; it is never part of ``User`` loads."""
        result = await self.db.execute(
            select(User.password_hash).where(User.id == user_id)
        )
        return result.scalar_one_or_none()

    async def touch_last_login(self, user_id: UUID) -> None:
        """Record a successful login."""
        user = await self.db.get(User, user_id)
        if user:
            user.last_login_at = utcnow()
            await self.db.flush()

    async def deactivate(self, user_id: UUID) -> bool:
        """
        Soft delete a user (set is_active=False).

        Outstanding access tokens stop working at the next request.

        Returns:
            True if deactivated, False if not found
        """
        user = await self.db.get(User, user_id)
        if not user:
            return False

        user.is_active = False
        await self.db.flush()
        logger.info("User deactivated", user_id=str(user_id))
        return True
