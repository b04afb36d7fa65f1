"""
Authentication API routes.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from trainerhub.auth.dependencies import CurrentUser
from trainerhub.auth.jwt import TokenIssuer, get_token_issuer
from trainerhub.auth.schemas import (
    AuthResponse,
    AuthResult,
    LoginRequest,
    MessageResponse,
    ProfileResponse,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
)
from trainerhub.db import get_db
from trainerhub.services.auth import AuthService

logger = structlog.get_logger()

router = APIRouter(prefix="/auth", tags=["Authentication"])


async def get_auth_service(
    db: Annotated[AsyncSession, Depends(get_db)],
    issuer: Annotated[TokenIssuer, Depends(get_token_issuer)],
) -> AuthService:
    return AuthService(db, issuer)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]


def _auth_response(result: AuthResult, service: AuthService) -> AuthResponse:
    if not result.success:
        raise result.to_error()
    return AuthResponse(
        user=result.user,
        tenant=result.tenant,
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=service.issuer.access_token_ttl_seconds,
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(request: RegisterRequest, service: AuthServiceDep) -> AuthResponse:
    """
    Register a new business: creates the tenant and its first user.
    """
    return _auth_response(await service.register(request), service)


@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, service: AuthServiceDep) -> AuthResponse:
    """
    Authenticate user and get tokens.
    """
    return _auth_response(await service.login(request), service)


@router.post("/refresh", response_model=TokenResponse)
async def refresh_token(request: RefreshRequest, service: AuthServiceDep) -> TokenResponse:
    """
    Rotate a refresh token into a new token pair.
    """
    result = await service.refresh(request.refresh_token)
    if not result.success:
        raise result.to_error()

    return TokenResponse(
        access_token=result.access_token,
        refresh_token=result.refresh_token,
        expires_in=service.issuer.access_token_ttl_seconds,
    )


@router.post("/logout", response_model=MessageResponse)
async def logout(request: RefreshRequest, service: AuthServiceDep) -> MessageResponse:
    """
    Revoke a refresh token. Succeeds even if the token was already invalid.
    """
    await service.logout(request.refresh_token)
    return MessageResponse(message="Logged out")


@router.post("/logout-all", response_model=MessageResponse)
async def logout_all(current_user: CurrentUser, service: AuthServiceDep) -> MessageResponse:
    """
    Revoke every refresh token of the current user.
    """
    result = await service.logout_all(current_user.user.id)
    if not result.success:
        raise result.to_error()

    return MessageResponse(message=result.message)


@router.get("/me", response_model=ProfileResponse)
async def get_current_user_info(
    current_user: CurrentUser,
    service: AuthServiceDep,
) -> ProfileResponse:
    """
    Get current authenticated user and tenant.
    """
    result = await service.get_profile(current_user.user.id, current_user.tenant_id)
    if not result.success:
        raise result.to_error()

    return ProfileResponse(user=result.user, tenant=result.tenant)
