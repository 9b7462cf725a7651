"""
Structured logging with PII sanitization.

Auth, OTP and cleanup code paths log through structlog so that email
addresses, bearer tokens and one-time codes are redacted before anything
reaches a handler. Events are rendered by structlog and handed to the stdlib
root logger, which owns the console and file handlers.

Examples
--------
>>> from app.monitoring import get_logger
>>> logger = get_logger("app.services.auth")
>>> logger.info("User registered", user_id=123)
"""

from re import Pattern
from re import compile as re_compile
from typing import Any

from structlog import configure, is_configured
from structlog import get_logger as struct_logger
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars
from structlog.dev import ConsoleRenderer
from structlog.processors import (
    JSONRenderer,
    StackInfoRenderer,
    TimeStamper,
    UnicodeDecoder,
    add_log_level,
    format_exc_info,
)
from structlog.stdlib import (
    BoundLogger,
    LoggerFactory,
    PositionalArgumentsFormatter,
    add_logger_name,
    filter_by_level,
)
from structlog.types import EventDict, Processor, WrappedLogger

from app.configs.settings import settings

REDACTED = "[REDACTED]"

SENSITIVE_HEADERS: frozenset[str] = frozenset({"authorization", "cookie", "set-cookie", "x-api-key"})

# Event keys whose values are never logged
SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"password", "password_hash", "otp", "otp_hash", "token", "access_token"},
)

# JWTs contain dots, so they are matched before emails
PII_PATTERNS: list[tuple[Pattern, str]] = [
    (re_compile(r"(?i)bearer\s+[a-z0-9._~+/=-]+"), "Bearer [REDACTED_TOKEN]"),
    (re_compile(r"eyJ[a-zA-Z0-9_-]*\.eyJ[a-zA-Z0-9_-]*\.[a-zA-Z0-9_-]*"), "[REDACTED_JWT]"),
    (re_compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}"), "[REDACTED_EMAIL]"),
]

CONTROL_CHARS = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t", "\x00": ""})


def sanitize_log_message(message: str) -> str:
    r"""
    Escape line breaks and drop NUL bytes so one event stays one line.

    Examples
    --------
    >>> sanitize_log_message("Hello\nWorld")
    'Hello\\nWorld'
    """
    return message.translate(CONTROL_CHARS)


def sanitize_headers(headers: dict[str, Any]) -> dict[str, Any]:
    return {k: REDACTED if k.lower() in SENSITIVE_HEADERS else v for k, v in headers.items()}


def redact_pii(message: str) -> str:
    """
    Redact tokens and email addresses.

    Examples
    --------
    >>> redact_pii("OTP sent to user@example.com")
    'OTP sent to [REDACTED_EMAIL]'
    """
    for pattern, replacement in PII_PATTERNS:
        message = pattern.sub(replacement, message)
    return message


def sanitize_event_dict(
    logger: WrappedLogger,
    method_name: str,
    event_dict: EventDict,
) -> EventDict:
    """
    Redact sensitive keys, PII inside strings, and credential headers.

    Args:
        logger: The wrapped logger instance.
        method_name: The name of the logging method being called.
        event_dict: The event dictionary being built.

    Returns:
        Sanitized event dictionary.
    """
    for key, value in event_dict.items():
        lowered = key.lower()
        if lowered in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        elif isinstance(value, str):
            event_dict[key] = redact_pii(sanitize_log_message(value))
        elif lowered == "headers" and isinstance(value, dict):
            event_dict[key] = sanitize_headers(value)
    return event_dict


def get_processors(*, colors: bool = True) -> list[Processor]:
    """
    Build the processor chain; console rendering outside production.

    Args:
        colors: Whether the console renderer emits ANSI colors.

    Returns:
        List of processors for structlog configuration.
    """
    processors: list[Processor] = [
        filter_by_level,
        merge_contextvars,
        add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso", utc=True),
        PositionalArgumentsFormatter(),
        StackInfoRenderer(),
        format_exc_info,
        UnicodeDecoder(),
        sanitize_event_dict,
    ]

    if settings.ENVIRONMENT in ("development", "testing"):
        processors.append(ConsoleRenderer(colors=colors, pad_level=False))
    else:
        processors.append(JSONRenderer())
    return processors


def configure_logging() -> None:
    """Configure structlog once; later calls are no-ops."""
    if is_configured():
        return

    configure(
        processors=get_processors(colors=settings.ENVIRONMENT == "development"),
        context_class=dict,
        logger_factory=LoggerFactory(),
        wrapper_class=BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> BoundLogger:
    return struct_logger(name)


def bind_request_id(request_id: str) -> None:
    """Attach ``request_id`` to every event logged during this request."""
    bind_contextvars(request_id=request_id)


def clear_context() -> None:
    clear_contextvars()
