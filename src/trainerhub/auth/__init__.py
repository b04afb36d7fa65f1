"""
Authentication and authorization module.

Password hashing, access token issuance and the request gate for the
multi-tenant API.
"""

from trainerhub.auth.errors import (
    AuthErrorCode,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InternalError,
    ServiceError,
    ValidationError,
)
from trainerhub.auth.jwt import (
    AccessTokenClaims,
    TokenConfig,
    TokenError,
    TokenIssuer,
    get_token_issuer,
)
from trainerhub.auth.password import hash_password, verify_password
from trainerhub.auth.dependencies import (
    AuthContext,
    CurrentTenant,
    CurrentUser,
    RequestGate,
    get_auth_context,
    get_current_tenant,
)

__all__ = [
    # Errors
    "AuthErrorCode",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InternalError",
    "ServiceError",
    "ValidationError",
    # Tokens
    "AccessTokenClaims",
    "TokenConfig",
    "TokenError",
    "TokenIssuer",
    "get_token_issuer",
    # Passwords
    "hash_password",
    "verify_password",
    # Request gate
    "AuthContext",
    "CurrentTenant",
    "CurrentUser",
    "RequestGate",
    "get_auth_context",
    "get_current_tenant",
]
