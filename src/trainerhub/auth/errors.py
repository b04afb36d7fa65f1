"""
Error taxonomy for the auth core.

``ServiceError`` subclasses carry an HTTP status and a stable error code and
are rendered by the API exception handler. The session orchestrator reports
expected failures as ``AuthErrorCode`` values inside its results; each code
maps onto one of the exception classes below.
"""

import enum


class ServiceError(Exception):
    """Base class for errors surfaced to API callers.

    The message is always safe to show to the caller. Internal detail goes to
    the log, never into the message.
    """

    status_code: int = 400
    error_code: str = "validation_error"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        error_code: str | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code
        if error_code is not None:
            self.error_code = error_code


class ValidationError(ServiceError):
    """Malformed input (400)."""
    status_code = 400
    error_code = "validation_error"


class AuthenticationError(ServiceError):
    """Bad credentials or token (401 unless overridden)."""
    status_code = 401
    error_code = "unauthorized"


class AuthorizationError(ServiceError):
    """Valid identity, but the account or tenant may not proceed (403)."""
    status_code = 403
    error_code = "forbidden"


class ConflictError(ServiceError):
    """Duplicate resource, e.g. an email already registered (409)."""
    status_code = 409
    error_code = "conflict"


class InternalError(ServiceError):
    """Unexpected storage or signing failure (500)."""
    status_code = 500
    error_code = "server_error"


class AuthErrorCode(str, enum.Enum):
    """Failure tags returned by the session orchestrator."""

    INVALID_CREDENTIALS = "invalid_credentials"
    EMAIL_ALREADY_IN_USE = "email_already_in_use"
    INVALID_REFRESH_TOKEN = "invalid_refresh_token"
    USER_NOT_FOUND = "user_not_found"
    TENANT_NOT_FOUND = "tenant_not_found"
    INTERNAL_ERROR = "internal_error"

    @property
    def message(self) -> str:
        return _MESSAGES[self]

    def to_error(self, message: str | None = None) -> ServiceError:
        """Build the matching exception for this code."""
        error_cls = _ERROR_CLASSES[self]
        return error_cls(message or self.message, error_code=self.value)


_MESSAGES = {
    AuthErrorCode.INVALID_CREDENTIALS: "Invalid credentials",
    AuthErrorCode.EMAIL_ALREADY_IN_USE: "Email already in use",
    AuthErrorCode.INVALID_REFRESH_TOKEN: "Invalid refresh token",
    AuthErrorCode.USER_NOT_FOUND: "User not found",
    AuthErrorCode.TENANT_NOT_FOUND: "Tenant not found",
    AuthErrorCode.INTERNAL_ERROR: "Internal error",
}

_ERROR_CLASSES: dict[AuthErrorCode, type[ServiceError]] = {
    AuthErrorCode.INVALID_CREDENTIALS: AuthenticationError,
    AuthErrorCode.EMAIL_ALREADY_IN_USE: ConflictError,
    AuthErrorCode.INVALID_REFRESH_TOKEN: AuthenticationError,
    AuthErrorCode.USER_NOT_FOUND: AuthorizationError,
    AuthErrorCode.TENANT_NOT_FOUND: AuthorizationError,
    AuthErrorCode.INTERNAL_ERROR: InternalError,
}


__all__ = [
    "ServiceError",
    "ValidationError",
    "AuthenticationError",
    "AuthorizationError",
    "ConflictError",
    "InternalError",
    "AuthErrorCode",
]
