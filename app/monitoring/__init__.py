"""
Structured logging for auth, OTP and background jobs.

Usage
-----
>>> from app.monitoring import get_logger
>>> logger = get_logger(__name__)
"""

from app.monitoring.logging import (
    bind_request_id,
    clear_context,
    configure_logging,
    get_logger,
    redact_pii,
    sanitize_headers,
    sanitize_log_message,
)

__all__ = [
    "bind_request_id",
    "clear_context",
    "configure_logging",
    "get_logger",
    "redact_pii",
    "sanitize_headers",
    "sanitize_log_message",
]
