from collections.abc import Awaitable, Callable
from logging import Logger
from typing import Any

from fastapi import Request
from fastapi.responses import ORJSONResponse
from pydantic.alias_generators import to_camel
from starlette.status import HTTP_500_INTERNAL_SERVER_ERROR

from app.utils.helpers import host

BASE_EXCEPTION = (
    OSError,
    PermissionError,
    MemoryError,
    RuntimeError,
    ConnectionError,
    TimeoutError,
)


class BaseAppError(Exception):
    """Base exception class for application errors."""

    def __init__(
        self,
        detail: str = "Internal server error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        self.detail = detail
        self.status_code = status_code

    def __str__(self) -> str:
        return self.detail


def error_envelope(detail: str, **extra: Any) -> dict[str, Any]:
    """Build the failure envelope, camel-casing any extra attributes."""
    content: dict[str, Any] = {"success": False, "error": detail}
    content.update({to_camel(k): v for k, v in extra.items()})
    return content


def create_exception_handler(
    logger: Logger,
) -> Callable[[Request, Exception], Awaitable[ORJSONResponse]]:
    """
    Create a standardized exception handler for the application.

    Args:
        logger: Logger instance to use for logging exceptions.

    Returns:
        A callable exception handler.
    """

    async def handler(request: Request, exc: Exception) -> ORJSONResponse:
        status_code = getattr(exc, "status_code", HTTP_500_INTERNAL_SERVER_ERROR)
        detail = getattr(exc, "detail", "Internal server error")

        if status_code >= HTTP_500_INTERNAL_SERVER_ERROR:
            logger.error(f"{detail} for ip: {host(request)} for endpoint {request.url.path}")
            # Infrastructure details stay in the logs
            if not getattr(exc, "expose", False):
                detail = "Internal server error"
        else:
            logger.warning(f"{detail} for ip: {host(request)} for endpoint {request.url.path}")

        extra = {k: v for k, v in exc.__dict__.items() if k not in ("status_code", "detail")}
        return ORJSONResponse(content=error_envelope(detail, **extra), status_code=status_code)

    return handler
