# tests/errors/test_error_handlers.py
"""Tests for the error envelope and exception handlers."""

from collections.abc import AsyncGenerator

import pytest
from fastapi import FastAPI
from httpx import ASGITransport, AsyncClient
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.errors import (
    BaseAppError,
    OTPDeliveryError,
    RecordNotFoundError,
    TransactionError,
    VerificationRequiredError,
    app_exception_handler,
    error_envelope,
)
from app.errors.handlers import http_exception_handler, unhandled_exception_handler


@pytest.fixture
async def error_client() -> AsyncGenerator[AsyncClient]:
    app = FastAPI()
    app.add_exception_handler(BaseAppError, app_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)

    @app.get("/missing")
    async def missing() -> None:
        raise RecordNotFoundError("Blog not found")

    @app.get("/database")
    async def database() -> None:
        raise TransactionError("deadlock detected on blogs")

    @app.get("/email")
    async def email() -> None:
        raise OTPDeliveryError

    @app.get("/unverified")
    async def unverified() -> None:
        raise VerificationRequiredError

    @app.get("/boom")
    async def boom() -> None:
        raise ZeroDivisionError

    transport = ASGITransport(app=app, raise_app_exceptions=False)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


def test_error_envelope_camel_cases_extras() -> None:
    assert error_envelope("Nope", requires_verification=True) == {
        "success": False,
        "error": "Nope",
        "requiresVerification": True,
    }


@pytest.mark.asyncio
async def test_client_error_keeps_detail(error_client: AsyncClient) -> None:
    response = await error_client.get("/missing")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Blog not found"}


@pytest.mark.asyncio
async def test_server_error_detail_is_masked(error_client: AsyncClient) -> None:
    response = await error_client.get("/database")
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}


@pytest.mark.asyncio
async def test_exposed_server_error_keeps_detail(error_client: AsyncClient) -> None:
    response = await error_client.get("/email")
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Failed to send OTP email"}


@pytest.mark.asyncio
async def test_instance_attributes_become_extras(error_client: AsyncClient) -> None:
    response = await error_client.get("/unverified")
    assert response.status_code == 403
    assert response.json()["requiresVerification"] is True


@pytest.mark.asyncio
async def test_unknown_route(error_client: AsyncClient) -> None:
    response = await error_client.get("/nowhere")
    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Route not found"}


@pytest.mark.asyncio
async def test_unhandled_exception(error_client: AsyncClient) -> None:
    response = await error_client.get("/boom")
    assert response.status_code == 500
    assert response.json() == {"success": False, "error": "Internal server error"}
