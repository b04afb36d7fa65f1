"""
API routes module.
"""

from trainerhub.api.routes.auth import router as auth_router

__all__ = [
    "auth_router",
]
