"""
Token issuance.

Access tokens are short-lived HS256 JWTs carrying a snapshot of the user and
the tenant id. Refresh tokens are opaque random secrets; only their SHA-256
digest is ever stored (see ``trainerhub.services.refresh_token``).
"""

import hashlib
import secrets
from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import Any
from uuid import UUID

import structlog
from jose import JWTError, jwt
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from trainerhub.auth.schemas import UserResponse
from trainerhub.config import Settings, settings

logger = structlog.get_logger()

ACCESS_TOKEN_TYPE = "access"


class TokenError(Exception):
    """Access token rejected.

    ``str(error)`` is always the generic public message; ``reason`` is for
    logs only.
    """

    public_message = "Invalid token"

    def __init__(self, reason: str):
        super().__init__(self.public_message)
        self.reason = reason


class TokenConfig(BaseModel):
    """Immutable signing configuration injected into ``TokenIssuer``."""
    model_config = ConfigDict(frozen=True)

    secret_key: str = Field(min_length=1)
    algorithm: str = "HS256"
    access_token_ttl: timedelta = timedelta(hours=24)
    refresh_token_ttl_days: int = 7
    refresh_token_bytes: int = Field(default=64, ge=32)

    @classmethod
    def from_settings(cls, config: Settings) -> "TokenConfig":
        return cls(
            secret_key=config.jwt_secret_key,
            algorithm=config.jwt_algorithm,
            access_token_ttl=timedelta(minutes=config.access_token_expire_minutes),
            refresh_token_ttl_days=config.refresh_token_expire_days,
            refresh_token_bytes=config.refresh_token_bytes,
        )


class AccessTokenClaims(BaseModel):
    """Decoded access token."""
    sub: UUID  # User ID
    tenant_id: UUID
    user: dict[str, Any]  # Snapshot at issuance; not for authorization
    iat: datetime
    exp: datetime
    token_type: str = ACCESS_TOKEN_TYPE


def generate_refresh_secret(num_bytes: int = 64) -> str:
    """Random hex secret; ``num_bytes`` of entropy."""
    return secrets.token_hex(num_bytes)


def hash_refresh_secret(raw_secret: str) -> str:
    """One-way digest used as the refresh token lookup key."""
    return hashlib.sha256(raw_secret.encode("utf-8", errors="surrogatepass")).hexdigest()


class TokenIssuer:
    """Mints and verifies access tokens with an injected ``TokenConfig``."""

    def __init__(self, config: TokenConfig):
        self.config = config

    @property
    def access_token_ttl_seconds(self) -> int:
        return int(self.config.access_token_ttl.total_seconds())

    def issue_access_token(
        self,
        user: Any,
        tenant_id: UUID,
        expires_delta: timedelta | None = None,
    ) -> str:
        """
        Create a signed access token.

        Args:
            user: ORM user or ``UserResponse`` to snapshot into the claims
            tenant_id: Tenant the session belongs to
            expires_delta: Custom lifetime, defaults to the configured TTL

        Returns:
            Encoded JWT
        """
        snapshot = UserResponse.model_validate(user)
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta if expires_delta is not None else self.config.access_token_ttl)

        payload = {
            "sub": str(snapshot.id),
            "user": snapshot.model_dump(mode="json"),
            "tenant_id": str(tenant_id),
            "iat": now,
            "exp": expire,
            "token_type": ACCESS_TOKEN_TYPE,
        }

        token = jwt.encode(payload, self.config.secret_key, algorithm=self.config.algorithm)

        logger.debug(
            "Access token created",
            user_id=str(snapshot.id),
            tenant_id=str(tenant_id),
            expires_at=expire.isoformat(),
        )
        return token

    def verify_access_token(self, token: str) -> AccessTokenClaims:
        """
        Decode and validate an access token.

        Raises:
            TokenError: On bad signature, expiry, missing claims or wrong type.
                The caller only ever sees "Invalid token".
        """
        try:
            payload = jwt.decode(
                token,
                self.config.secret_key,
                algorithms=[self.config.algorithm],
                options={"require_exp": True, "require_iat": True, "require_sub": True},
            )
        except JWTError as e:
            logger.info("Access token rejected", reason=str(e))
            raise TokenError(str(e)) from e

        if payload.get("token_type") != ACCESS_TOKEN_TYPE:
            logger.info("Access token rejected", reason="wrong token type")
            raise TokenError("wrong token type")

        try:
            return AccessTokenClaims.model_validate(payload)
        except PydanticValidationError as e:
            logger.info("Access token rejected", reason="malformed claims")
            raise TokenError("malformed claims") from e

    def generate_refresh_secret(self) -> str:
        return generate_refresh_secret(self.config.refresh_token_bytes)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Process-wide issuer built from settings."""
    return TokenIssuer(TokenConfig.from_settings(settings))
