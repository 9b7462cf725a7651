# app/middleware/middleware.py
"""
Middleware components for the blog backend.

This module contains middleware for security headers, request logging and
CORS handling, plus the lifespan handler that creates the cache manager and
the cleanup scheduler on startup and shuts them down on exit.
"""

from asyncio import get_event_loop
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from logging import basicConfig, getLogger
from pathlib import Path
from time import perf_counter

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from pythonjsonlogger.json import JsonFormatter
from rich.logging import RichHandler
from rich.traceback import install
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from uvloop import Loop

from app.configs import file_logger, settings
from app.db import close_db, init_db
from app.managers.cache_manager import CacheManager
from app.managers.rate_limiter import close_limiter
from app.middleware.context import REQUEST_ID_HEADER
from app.monitoring import configure_logging
from app.services.cleanup import CleanupScheduler
from app.utils.helpers import get_summary, host

SLOW_REQUEST_SECONDS = 1.0
SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "DENY",
    "Referrer-Policy": "strict-origin-when-cross-origin",
}

if log_to_file := settings.LOG_TO_FILE:
    Path(settings.LOG_FILE).parent.mkdir(parents=True, exist_ok=True)

# Console through rich, file handler (if any) as JSON lines
basicConfig(
    level=settings.LOG_LEVEL,
    format="%(message)s",
    datefmt="%X",
    handlers=[RichHandler(rich_tracebacks=True)],
)
logger = file_logger(getLogger("rich"))
for handler in logger.handlers:
    handler.setFormatter(JsonFormatter())

install()


@dataclass
class Services:
    """Long-lived objects created at startup and torn down on exit."""

    cache_manager: CacheManager
    cleanup: CleanupScheduler


async def start_services(app: FastAPI) -> Services:
    """Open the database, the cache and the cleanup sweep, in that order."""
    await init_db()

    cache_manager = CacheManager()
    await cache_manager.initialize()
    app.state.cache_manager = cache_manager
    logger.info(f"Blog cache ready on {cache_manager.backend} backend")

    cleanup = CleanupScheduler()
    app.state.cleanup_scheduler = cleanup
    if settings.CLEANUP_ENABLED:
        await cleanup.start()
    else:
        logger.info("Cleanup sweep disabled")

    return Services(cache_manager=cache_manager, cleanup=cleanup)


async def stop_services(services: Services) -> None:
    """Release everything ``start_services`` opened, newest first."""
    await services.cleanup.stop()
    await services.cache_manager.shutdown()
    await close_limiter()
    await close_db()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """Run ``start_services`` before serving and ``stop_services`` afterwards."""
    logger.info(f"Starting {app.title} ({settings.ENVIRONMENT})")
    configure_logging()
    if log_to_file:
        logger.info(f"Writing JSON logs to {settings.LOG_FILE}")

    try:
        services = await start_services(app)
    except Exception:
        logger.exception(f"{app.title} failed to start")
        raise

    logger.info(f"Event loop is uvloop: {type(get_event_loop()) is Loop}")
    logger.info(f"{app.title} ready, docs at /docs")

    yield

    logger.info(f"Stopping {app.title}")
    try:
        await stop_services(services)
    except Exception:
        logger.exception("Shutdown did not complete cleanly")
    else:
        logger.info("All services stopped")


def configure_cors(app: FastAPI) -> None:
    """Allow the blog frontends to call the API with credentials."""
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.FRONTEND_URLS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-API-Key", REQUEST_ID_HEADER],
        expose_headers=[REQUEST_ID_HEADER],
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log with one line per request and one per response."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        started = perf_counter()
        route = get_summary(request) or f"{request.method} {request.url.path}"
        logger.info(f"--> {route} from {host(request)}")

        response = await call_next(request)

        elapsed = perf_counter() - started
        line = f"<-- {response.status_code} {request.method} {request.url.path} {elapsed:.3f}s"
        if elapsed >= SLOW_REQUEST_SECONDS:
            logger.warning(f"{line} (slow)")
        else:
            logger.info(line)
        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Static hardening headers; HSTS only in production."""

    async def dispatch(
        self,
        request: Request,
        call_next: RequestResponseEndpoint,
    ) -> Response:
        response = await call_next(request)
        response.headers.update(SECURITY_HEADERS)
        if settings.ENVIRONMENT == "production":
            response.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"
        return response
