"""
Business logic services.
"""

from trainerhub.services.tenant import TenantService
from trainerhub.services.user import UserService
from trainerhub.services.refresh_token import RefreshTokenStore
from trainerhub.services.auth import AuthService

__all__ = [
    "TenantService",
    "UserService",
    "RefreshTokenStore",
    "AuthService",
]
