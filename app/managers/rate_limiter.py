# app/managers/rate_limiter.py

"""Rate limiter configuration using slowapi."""

from collections.abc import Callable
from logging import getLogger
from typing import cast

from fastapi import Request
from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from app.configs import LimiterConfig, file_logger
from app.errors import error_envelope
from app.utils.helpers import host

logger = file_logger(getLogger(__name__))


def get_identifier(request: Request) -> str:
    """
    Get unique identifier for rate limiting.

    Uses API key from header if available, otherwise falls back to IP address.

    Args:
        request: FastAPI request object.

    Returns:
        Unique identifier string.
    """
    if api_key := request.headers.get("X-API-Key"):
        return f"apikey:{api_key}"
    return f"ip:{get_remote_address(request)}"


def tiered(identified: str, anonymous: str) -> Callable[[str], str]:
    """Higher limit for callers that send an API key."""
    return lambda key: identified if key.startswith("apikey:") else anonymous


limiter = Limiter(**LimiterConfig().model_dump(), key_func=get_identifier)


async def close_limiter() -> None:
    """Reset in-process limiter storage on shutdown."""
    limiter.reset()
    logger.info("Rate limiter shutdown complete")


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle rate limit exceeded exceptions.

    Args:
        request: FastAPI request object.
        exc: RateLimitExceeded exception.

    Returns:
        JSON envelope with the breached limit.
    """
    http_exc = cast(RateLimitExceeded, exc)
    logger.warning(f"Rate limit {http_exc.detail} exceeded by ip: {host(request)}")
    return ORJSONResponse(
        status_code=HTTP_429_TOO_MANY_REQUESTS,
        content=error_envelope("Rate limit exceeded", allowed_requests=http_exc.detail),
    )
