"""Envelope handlers for framework-level and unexpected exceptions."""

from logging import getLogger
from typing import cast

from fastapi import Request
from fastapi.responses import ORJSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.status import HTTP_404_NOT_FOUND, HTTP_500_INTERNAL_SERVER_ERROR

from app.configs import file_logger
from app.configs.settings import DEFAULT_ERROR_MESSAGE
from app.errors.base import error_envelope
from app.utils.helpers import host

logger = file_logger(getLogger(__name__))


async def http_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    """Render ``HTTPException`` (including unknown routes) as an envelope."""
    http_exc = cast(StarletteHTTPException, exc)
    detail = http_exc.detail
    if http_exc.status_code == HTTP_404_NOT_FOUND and detail == "Not Found":
        detail = "Route not found"

    logger.warning(f"{http_exc.status_code} {detail} for ip: {host(request)} at {request.url.path}")
    return ORJSONResponse(
        content=error_envelope(str(detail)),
        status_code=http_exc.status_code,
        headers=getattr(http_exc, "headers", None),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> ORJSONResponse:
    logger.error(
        f"Unhandled {type(exc).__name__} for ip: {host(request)} at {request.url.path}",
        exc_info=exc,
    )
    return ORJSONResponse(
        content=error_envelope(DEFAULT_ERROR_MESSAGE),
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
    )
