"""
Tenant store.
"""

from uuid import UUID

import structlog
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from trainerhub.db.models import PlanType, Tenant, User, UserRole
from trainerhub.services.user import UserService

logger = structlog.get_logger()


class TenantService:
    """Service for tenant persistence used by the auth core."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create(
        self,
        name: str,
        email: str,
        plan_type: PlanType = PlanType.BASIC,
        phone: str | None = None,
    ) -> Tenant:
        """
        Create a new tenant.

        Args:
            name: Business display name
            email: Contact email
            plan_type: Subscription tier
            phone: Optional contact phone

        Returns:
            Created tenant
        """
        tenant = Tenant(name=name, email=email, plan_type=plan_type, phone=phone)
        self.db.add(tenant)
        await self.db.flush()

        logger.info("Tenant created", tenant_id=str(tenant.id), plan_type=tenant.plan_type.value)
        return tenant

    async def create_with_user(
        self,
        name: str,
        email: str,
        password_hash: str,
        first_name: str,
        last_name: str,
        role: UserRole = UserRole.TRAINER,
        plan_type: PlanType = PlanType.BASIC,
    ) -> tuple[Tenant, User]:
        """
        Create a tenant and its first user in the current transaction.

        Nothing is committed here. If either insert fails the exception
        propagates and the caller must roll the session back, which removes
        both rows.

        Returns:
            Tuple of (tenant, user)
        """
        tenant = await self.create(name=name, email=email, plan_type=plan_type)
        user = await UserService(self.db).create(
            tenant_id=tenant.id,
            email=email,
            password_hash=password_hash,
            first_name=first_name,
            last_name=last_name,
            role=role,
        )
        return tenant, user

    async def get(self, tenant_id: UUID) -> Tenant | None:
        """Get active tenant by ID."""
        result = await self.db.execute(
            select(Tenant).where(Tenant.id == tenant_id, Tenant.is_active.is_(True))
        )
        return result.scalar_one_or_none()

    async def deactivate(self, tenant_id: UUID) -> bool:
        """
        Soft delete a tenant (set is_active=False).

        Returns:
            True if deactivated, False if not found
        """
        tenant = await self.db.get(Tenant, tenant_id)
        if not tenant:
            return False

        tenant.is_active = False
        await self.db.flush()
        logger.info("Tenant deactivated", tenant_id=str(tenant_id))
        return True
