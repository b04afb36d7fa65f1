"""
Authentication service.

Handles registration, login, token refresh with rotation, logout and
profile lookup. Public methods return tagged results; expected failures are
never raised. Unexpected storage errors roll the session back and come out
as ``AuthErrorCode.INTERNAL_ERROR``.
"""

from uuid import UUID

import structlog
from fastapi.concurrency import run_in_threadpool
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from trainerhub.auth.errors import AuthErrorCode
from trainerhub.auth.jwt import TokenIssuer, get_token_issuer
from trainerhub.auth.password import dummy_verify, hash_password, verify_password
from trainerhub.auth.schemas import (
    AuthResult,
    LoginRequest,
    ProfileResult,
    RegisterRequest,
    ServiceResult,
    TenantResponse,
    TokenResult,
    UserResponse,
)
from trainerhub.db.models import PlanType, Tenant, User
from trainerhub.services.refresh_token import RefreshTokenStore
from trainerhub.services.tenant import TenantService
from trainerhub.services.user import UserService

logger = structlog.get_logger()


class AuthService:
    """Service for authentication operations."""

    def __init__(
        self,
        db: AsyncSession,
        issuer: TokenIssuer | None = None,
        refresh_tokens: RefreshTokenStore | None = None,
    ):
        self.db = db
        self.issuer = issuer or get_token_issuer()
        self.user_service = UserService(db)
        self.tenant_service = TenantService(db)
        self.refresh_tokens = refresh_tokens or RefreshTokenStore(
            db, secret_bytes=self.issuer.config.refresh_token_bytes
        )

    async def register(self, data: RegisterRequest) -> AuthResult:
        """
        Create a tenant with its first user, then sign them in.

        The email pre-check is a fast path; the unique constraint decides
        races, and a conflict there rolls back the tenant as well.
        """
        try:
            if await self.user_service.exists_by_email(data.email):
                return AuthResult.fail(AuthErrorCode.EMAIL_ALREADY_IN_USE)

            password_hash = await run_in_threadpool(hash_password, data.password)

            try:
                tenant, user = await self.tenant_service.create_with_user(
                    name=data.tenant_name,
                    email=data.email,
                    password_hash=password_hash,
                    first_name=data.first_name,
                    last_name=data.last_name,
                    role=data.role,
                    plan_type=PlanType.BASIC,
                )
            except IntegrityError:
                await self.db.rollback()
                logger.info("Registration lost email uniqueness race")
                return AuthResult.fail(AuthErrorCode.EMAIL_ALREADY_IN_USE)

            result = await self._sign_in(user, tenant)

            logger.info(
                "User registered",
                user_id=str(user.id),
                tenant_id=str(tenant.id),
            )
            return result

        except Exception:
            await self._abort("register")
            return AuthResult.fail(AuthErrorCode.INTERNAL_ERROR)

    async def login(self, credentials: LoginRequest) -> AuthResult:
        """
        Authenticate by email and password.

        Unknown email, inactive user and wrong password all produce the same
        ``INVALID_CREDENTIALS`` result.
        """
        try:
            user = await self.user_service.get_by_email(credentials.email)
            if not user:
                await run_in_threadpool(dummy_verify)
                logger.info("Login failed", reason="unknown or inactive user")
                return AuthResult.fail(AuthErrorCode.INVALID_CREDENTIALS)

            password_hash = await self.user_service.get_password_hash(user.id)
            if not password_hash or not await run_in_threadpool(
                verify_password, credentials.password, password_hash
            ):
                logger.info("Login failed", reason="bad password", user_id=str(user.id))
                return AuthResult.fail(AuthErrorCode.INVALID_CREDENTIALS)

            tenant = await self.tenant_service.get(user.tenant_id)
            if not tenant:
                logger.warning("Login for inactive tenant", user_id=str(user.id))
                return AuthResult.fail(AuthErrorCode.TENANT_NOT_FOUND)

            await self.user_service.touch_last_login(user.id)
            result = await self._sign_in(user, tenant)

            logger.info("User logged in", user_id=str(user.id), tenant_id=str(tenant.id))
            return result

        except Exception:
            await self._abort("login")
            return AuthResult.fail(AuthErrorCode.INTERNAL_ERROR)

    async def refresh(self, raw_refresh_token: str) -> TokenResult:
        """
        Exchange a refresh token for a new token pair.

        The presented token is revoked by a single conditional update, so it
        can be used at most once even under concurrent requests.
        """
        try:
            record = await self.refresh_tokens.verify(raw_refresh_token)
            if not record:
                return TokenResult.fail(AuthErrorCode.INVALID_REFRESH_TOKEN)

            user = await self.user_service.get(record.user_id)
            if not user:
                logger.info("Refresh for inactive user", user_id=str(record.user_id))
                return TokenResult.fail(AuthErrorCode.USER_NOT_FOUND)

            if await self.refresh_tokens.consume(raw_refresh_token) != user.id:
                logger.warning("Refresh token reused concurrently", user_id=str(user.id))
                return TokenResult.fail(AuthErrorCode.INVALID_REFRESH_TOKEN)

            access_token = self.issuer.issue_access_token(user, user.tenant_id)
            refresh_token = await self.refresh_tokens.create(
                user.id, self.issuer.config.refresh_token_ttl_days
            )

            logger.info("Token refreshed", user_id=str(user.id))
            return TokenResult(
                success=True,
                access_token=access_token,
                refresh_token=refresh_token,
            )

        except Exception:
            await self._abort("refresh")
            return TokenResult.fail(AuthErrorCode.INTERNAL_ERROR)

    async def logout(self, raw_refresh_token: str) -> None:
        """Revoke one refresh token. Always succeeds from the caller's view."""
        try:
            revoked = await self.refresh_tokens.revoke(raw_refresh_token)
            logger.info("User logged out", token_found=revoked)
        except Exception:
            await self._abort("logout")

    async def logout_all(self, user_id: UUID) -> ServiceResult:
        """Revoke every refresh token owned by ``user_id``."""
        try:
            count = await self.refresh_tokens.revoke_all_for_user(user_id)
            logger.info("User logged out everywhere", user_id=str(user_id), sessions=count)
            return ServiceResult(success=True, message="Logged out from all devices")

        except Exception:
            await self._abort("logout_all")
            return ServiceResult.fail(AuthErrorCode.INTERNAL_ERROR)

    async def get_profile(self, user_id: UUID, tenant_id: UUID) -> ProfileResult:
        """Current user and tenant, both re-read from storage."""
        try:
            user = await self.user_service.get(user_id)
            if not user:
                return ProfileResult.fail(AuthErrorCode.USER_NOT_FOUND)

            tenant = await self.tenant_service.get(tenant_id)
            if not tenant:
                return ProfileResult.fail(AuthErrorCode.TENANT_NOT_FOUND)

            return ProfileResult(
                success=True,
                user=UserResponse.model_validate(user),
                tenant=TenantResponse.model_validate(tenant),
            )

        except Exception:
            await self._abort("profile")
            return ProfileResult.fail(AuthErrorCode.INTERNAL_ERROR)

    async def _sign_in(self, user: User, tenant: Tenant) -> AuthResult:
        """Issue an access token and a fresh refresh token for the user."""
        access_token = self.issuer.issue_access_token(user, tenant.id)
        refresh_token = await self.refresh_tokens.create(
            user.id, self.issuer.config.refresh_token_ttl_days
        )
        return AuthResult(
            success=True,
            user=UserResponse.model_validate(user),
            tenant=TenantResponse.model_validate(tenant),
            access_token=access_token,
            refresh_token=refresh_token,
        )

    async def _abort(self, operation: str) -> None:
        """Log the in-flight exception and discard the unit of work."""
        logger.exception("Auth operation failed", operation=operation)
        await self.db.rollback()
