"""
Structured logging for the formation portal.

Sets up structlog on top of the standard library logger with:
- JSON formatting for production, pretty console for development
- Redaction of credentials, tokens and verification codes
- Email masking helper for log context

Call configure_logging() once at startup (create_app does this); modules
obtain loggers with get_logger(__name__) and log snake_case events:

    >>> log = get_logger(__name__)
    >>> log.info("login_success", user_id="123", backend="supabase")
"""

from __future__ import annotations

import logging
import sys
from datetime import datetime, timezone
from typing import Optional

import structlog
from structlog.stdlib import BoundLogger
from structlog.types import EventDict, Processor

# Sensitive fields to redact from logs
REDACTED_FIELDS = {
    "password",
    "new_password",
    "confirm_password",
    "password_hash",
    "token",
    "access_token",
    "refresh_token",
    "api_key",
    "authorization",
    "cookie",
    "secret",
    "code",
    "verification_code",
    "ssn_itin",
    "owner_ssn_itin",
}

_SENSITIVE_SUBSTRINGS = ("password", "token", "secret", "ssn")
_RESERVED_KEYS = {"level", "event", "timestamp", "logger"}


def get_logger(name: str) -> BoundLogger:
    """Return a structlog logger bound to *name* (typically ``__name__``)."""
    return structlog.get_logger(name)


def mask_email(email: Optional[str]) -> Optional[str]:
    """Mask the local part of an email address for log output.

    ``"jane.doe@example.com"`` becomes ``"j****e@example.com"``; short local
    parts keep only their first character.
    """
    if not email:
        return email
    local, sep, domain = email.partition("@")
    if not sep:
        return "****"
    if len(local) <= 2:
        masked = local[:1] + "****"
    else:
        masked = local[0] + "****" + local[-1]
    return f"{masked}@{domain}"


def add_timestamp(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Add ISO format timestamp to event dict."""
    event_dict["timestamp"] = datetime.now(timezone.utc).isoformat()
    return event_dict


def redact_sensitive_fields(
    logger: logging.Logger, method_name: str, event_dict: EventDict
) -> EventDict:
    """Redact sensitive fields from logs."""
    for key in list(event_dict.keys()):
        if key in _RESERVED_KEYS:
            continue
        lowered = key.lower()
        if lowered in REDACTED_FIELDS or any(
            sensitive in lowered for sensitive in _SENSITIVE_SUBSTRINGS
        ):
            event_dict[key] = "***REDACTED***"
    return event_dict


def configure_structlog(log_format: str = "console") -> None:
    """Configure structlog processors for the chosen output format."""
    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_timestamp,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        redact_sensitive_fields,
        structlog.processors.format_exc_info,
    ]

    if log_format == "json":
        renderer: Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(
            colors=True,
            pad_event=15,
            sort_keys=False,
        )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def configure_stdlib_logging(log_level: str = "INFO") -> None:
    """Route stdlib logging to stdout and quiet noisy third-party loggers."""
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, log_level.upper(), logging.INFO),
    )

    for noisy in ("httpx", "httpcore", "pymongo", "uvicorn.access"):
        logging.getLogger(noisy).setLevel(logging.WARNING)


def configure_logging(
    log_level: str = "INFO", log_format: str = "console", env: str = "development"
) -> None:
    """Initialize logging for the application.

    Should be called early in application startup (create_app).
    """
    configure_stdlib_logging(log_level)
    configure_structlog(log_format)

    get_logger(__name__).info(
        "logging_initialized",
        env=env,
        log_level=log_level,
        log_format=log_format,
    )
