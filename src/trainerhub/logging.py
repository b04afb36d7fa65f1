"""
Structured logging setup.

Configures structlog once at application start-up. Modules keep using
``structlog.get_logger()`` directly.
"""

import logging
from typing import Any

import structlog

from trainerhub.config import Settings

# Keys whose values must never reach a log sink
REDACTED_KEYS = frozenset({
    "password",
    "password_hash",
    "access_token",
    "refresh_token",
    "token",
    "token_hash",
    "authorization",
})


def redact_secrets(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Replace secret-bearing values with a fixed marker."""
    for key in event_dict:
        if key.lower() in REDACTED_KEYS:
            event_dict[key] = "[redacted]"
    return event_dict


def configure_logging(settings: Settings) -> None:
    """
    Configure structlog processors for the given settings.

    Development gets the pretty console renderer, everything else JSON.
    """
    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        redact_secrets,
        structlog.processors.StackInfoRenderer(),
    ]

    if settings.log_json or not settings.is_development:
        processors = shared_processors + [
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = shared_processors + [
            structlog.dev.ConsoleRenderer(),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, settings.log_level, logging.INFO)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )
