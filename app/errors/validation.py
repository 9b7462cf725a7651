"""Custom validation error handling for FastAPI."""

from logging import getLogger
from typing import Any, cast

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_400_BAD_REQUEST

from app.configs import file_logger
from app.errors.base import error_envelope
from app.utils.helpers import host

logger = file_logger(getLogger(__name__))


def format_validation_errors(exc: RequestValidationError) -> list[dict[str, Any]]:
    formatted_errors = []
    for error in exc.errors():
        formatted_error = {
            # Skip the 'body' / 'query' / 'path' prefix
            "field": ".".join(str(loc) for loc in error.get("loc", [])[1:]),
            "message": error.get("msg", "Invalid value"),
            "type": error.get("type", "validation_error"),
        }
        if "ctx" in error:
            formatted_error["context"] = {
                key: str(value) if isinstance(value, Exception) else value
                for key, value in error["ctx"].items()
            }
        formatted_errors.append(formatted_error)
    return formatted_errors


def summarize(errors: list[dict[str, Any]]) -> str:
    """Collapse formatted errors into the single ``error`` string of the envelope."""
    if not errors:
        return "Validation failed"
    parts = []
    for error in errors:
        message = error["message"].removeprefix("Value error, ")
        parts.append(f"{error['field']}: {message}" if error["field"] else message)
    return "; ".join(parts)


async def validation_exception_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle Pydantic validation errors as a 400 envelope.

    Args:
        request: The incoming request.
        exc: The RequestValidationError exception.

    Returns:
        ORJSONResponse with formatted validation errors.
    """
    formatted_errors = format_validation_errors(cast(RequestValidationError, exc))

    logger.warning(
        f"Validation error for ip: {host(request)} at endpoint {request.url.path}: {formatted_errors}",
    )

    return ORJSONResponse(
        status_code=HTTP_400_BAD_REQUEST,
        content=error_envelope(summarize(formatted_errors), errors=formatted_errors),
    )
