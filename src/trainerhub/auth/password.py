"""
Password hashing and verification.

Uses bcrypt through passlib for secure password storage. bcrypt only reads
the first 72 bytes of a password, so longer inputs are refused rather than
truncated.
"""

import structlog
from passlib.context import CryptContext

from trainerhub.config import settings

logger = structlog.get_logger()

BCRYPT_MAX_BYTES = 72

# Configure password hashing
pwd_context = CryptContext(
    schemes=["bcrypt"],
    deprecated="auto",
    bcrypt__rounds=settings.bcrypt_rounds,
    bcrypt__truncate_error=True,
)


def password_fits(password: str) -> bool:
    """True if bcrypt would hash every byte of ``password``."""
    return len(password.encode("utf-8", errors="surrogatepass")) <= BCRYPT_MAX_BYTES


def hash_password(password: str) -> str:
    """
    Hash a password for storage.

    Args:
        password: Plain text password, at most 72 UTF-8 bytes

    Returns:
        Salted bcrypt hash

    Raises:
        passlib.exc.PasswordTruncateError: Password longer than 72 bytes.
        Other backend failures are never swallowed either.
    """
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a password against its hash.

    A stored value that is not a recognisable hash counts as a mismatch, and
    so does a password too long to have been hashed.

    Args:
        plain_password: Plain text password to check
        hashed_password: Stored password hash

    Returns:
        True if password matches
    """
    if not password_fits(plain_password):
        return False
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except (ValueError, TypeError) as e:
        logger.warning("Password hash could not be verified", error=type(e).__name__)
        return False


def dummy_verify() -> None:
    """Spend one verification's worth of time for unknown accounts."""
    pwd_context.dummy_verify()
