"""
Pydantic schemas for authentication.
"""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, EmailStr, Field, field_validator

from trainerhub.auth.errors import AuthErrorCode, ServiceError
from trainerhub.auth.password import BCRYPT_MAX_BYTES, password_fits
from trainerhub.db.models import PlanType, UserRole


# =============================================================================
# Public projections
# =============================================================================

class UserResponse(BaseModel):
    """User response (no sensitive data)."""
    model_config = {"from_attributes": True}

    id: UUID
    tenant_id: UUID
    email: str
    first_name: str
    last_name: str
    role: UserRole
    is_active: bool
    last_login_at: datetime | None = None
    created_at: datetime
    updated_at: datetime


class TenantResponse(BaseModel):
    """Tenant response."""
    model_config = {"from_attributes": True}

    id: UUID
    name: str
    email: str
    phone: str | None = None
    plan_type: PlanType
    is_active: bool
    created_at: datetime
    updated_at: datetime


# =============================================================================
# Requests
# =============================================================================

class RegisterRequest(BaseModel):
    """Business signup: creates the tenant and its first user."""
    email: EmailStr
    password: str = Field(min_length=6, max_length=100)
    first_name: str = Field(min_length=1, max_length=100)
    last_name: str = Field(min_length=1, max_length=100)
    tenant_name: str = Field(min_length=2, max_length=100)
    role: UserRole = UserRole.TRAINER

    @field_validator("password")
    @classmethod
    def password_within_bcrypt_limit(cls, v: str) -> str:
        if not password_fits(v):
            raise ValueError(f"Password must be at most {BCRYPT_MAX_BYTES} bytes")
        return v


class LoginRequest(BaseModel):
    """User login request."""
    email: EmailStr
    password: str = Field(min_length=1)


class RefreshRequest(BaseModel):
    """Token refresh / logout request."""
    refresh_token: str = Field(min_length=1)


# =============================================================================
# Orchestrator results
# =============================================================================

class ServiceResult(BaseModel):
    """Tagged result: ``success`` plus either a payload or a short message."""
    success: bool
    error: AuthErrorCode | None = None
    message: str | None = None

    @classmethod
    def fail(cls, error: AuthErrorCode):
        return cls(success=False, error=error, message=error.message)

    def to_error(self) -> ServiceError:
        """Exception for a failed result, for the HTTP layer to raise."""
        return (self.error or AuthErrorCode.INTERNAL_ERROR).to_error(self.message)


class AuthResult(ServiceResult):
    """Outcome of register and login."""
    user: UserResponse | None = None
    tenant: TenantResponse | None = None
    access_token: str | None = None
    refresh_token: str | None = None


class TokenResult(ServiceResult):
    """Outcome of a refresh: a brand-new token pair."""
    access_token: str | None = None
    refresh_token: str | None = None


class ProfileResult(ServiceResult):
    """Current user together with their tenant."""
    user: UserResponse | None = None
    tenant: TenantResponse | None = None


# =============================================================================
# HTTP responses
# =============================================================================

class AuthResponse(BaseModel):
    """Register/login response body."""
    success: bool = True
    user: UserResponse
    tenant: TenantResponse
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(description="Access token lifetime in seconds")


class TokenResponse(BaseModel):
    """Access and refresh token pair."""
    success: bool = True
    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int


class ProfileResponse(BaseModel):
    success: bool = True
    user: UserResponse
    tenant: TenantResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str
