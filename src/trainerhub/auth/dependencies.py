"""
Request gate and FastAPI dependencies for authentication.

Every protected call re-reads the user and tenant named in the access token.
The token's embedded user snapshot is never trusted for authorization, so a
deactivated account stops working at its next request.
"""

from dataclasses import dataclass
from typing import Annotated
from uuid import UUID

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from trainerhub.auth.errors import AuthenticationError, AuthorizationError
from trainerhub.auth.jwt import TokenError, TokenIssuer, get_token_issuer
from trainerhub.auth.schemas import UserResponse
from trainerhub.db import get_db
from trainerhub.services.tenant import TenantService
from trainerhub.services.user import UserService

logger = structlog.get_logger()

# HTTP Bearer token extractor
bearer_scheme = HTTPBearer(auto_error=False)

TOKEN_REQUIRED = "Access token required"
INVALID_TOKEN = "Invalid token"
USER_INACTIVE = "User inactive or not found"
TENANT_INACTIVE = "Tenant inactive or not found"


@dataclass(frozen=True)
class AuthContext:
    """Identity attached to an authenticated request."""
    user: UserResponse
    tenant_id: UUID


class RequestGate:
    """Validates a bearer token and confirms the account is still live."""

    def __init__(self, db: AsyncSession, issuer: TokenIssuer):
        self.issuer = issuer
        self.user_service = UserService(db)
        self.tenant_service = TenantService(db)

    async def authenticate(self, token: str | None) -> AuthContext:
        """
        Resolve a raw bearer token to a fresh identity.

        Raises:
            AuthenticationError: Missing token (401) or invalid token (403)
            AuthorizationError: User or tenant missing or inactive (403)
        """
        if not token:
            raise AuthenticationError(TOKEN_REQUIRED, error_code="token_required")

        try:
            claims = self.issuer.verify_access_token(token)
        except TokenError:
            raise AuthenticationError(INVALID_TOKEN, status_code=403, error_code="invalid_token")

        user = await self.user_service.get(claims.sub)
        if not user or user.tenant_id != claims.tenant_id:
            logger.info("Rejected token for inactive user", user_id=str(claims.sub))
            raise AuthorizationError(USER_INACTIVE, error_code="user_inactive")

        tenant = await self.tenant_service.get(claims.tenant_id)
        if not tenant:
            logger.info("Rejected token for inactive tenant", tenant_id=str(claims.tenant_id))
            raise AuthorizationError(TENANT_INACTIVE, error_code="tenant_inactive")

        return AuthContext(user=UserResponse.model_validate(user), tenant_id=tenant.id)


async def get_auth_context(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    db: Annotated[AsyncSession, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthContext:
    """
    Authenticate the current request.

    Usage:
        @router.get("/clients")
        async def list_clients(auth: CurrentUser):
            return await clients.list(auth.tenant_id)

    The identity is also stored on ``request.state.user`` and
    ``request.state.tenant_id``.
    """
    token = credentials.credentials if credentials else None
    context = await RequestGate(db, issuer).authenticate(token)

    request.state.user = context.user
    request.state.tenant_id = context.tenant_id

    logger.debug(
        "User authenticated",
        user_id=str(context.user.id),
        tenant_id=str(context.tenant_id),
    )
    return context


async def get_current_tenant(
    context: Annotated[AuthContext, Depends(get_auth_context)],
) -> UUID:
    """
    Tenant of the authenticated request.

    Usage:
        @router.get("/plan")
        async def get_plan(tenant_id: CurrentTenant):
            ...
    """
    return context.tenant_id


# Type aliases for cleaner route signatures
CurrentUser = Annotated[AuthContext, Depends(get_auth_context)]
CurrentTenant = Annotated[UUID, Depends(get_current_tenant)]
