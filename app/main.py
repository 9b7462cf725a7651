# app/main.py

"""Blog Platform Backend - blogging REST API with response caching over Redis."""

from typing import Any

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from starlette.exceptions import HTTPException as StarletteHTTPException
from uvicorn.middleware.proxy_headers import ProxyHeadersMiddleware

from app.configs import settings
from app.errors import BaseAppError, app_exception_handler
from app.errors.handlers import http_exception_handler, unhandled_exception_handler
from app.errors.validation import validation_exception_handler
from app.managers import CacheManager, limiter, rate_limit_exceeded_handler
from app.middleware import (
    ContextMiddleware,
    LoggingMiddleware,
    SecurityHeadersMiddleware,
    configure_cors,
    lifespan,
)
from app.routes import auth_router, blog_router, comment_router
from app.utils.helpers import today_str

app = FastAPI(
    title=settings.APP_NAME,
    description="Blog posts, comments and accounts with email verification",
    version="1.0.0",
    lifespan=lifespan,
    default_response_class=ORJSONResponse,
    swagger_ui_parameters={
        "docExpansion": "none",
        "operationsSorter": "method",
    },
)

configure_cors(app)

app.add_middleware(LoggingMiddleware)
app.add_middleware(SecurityHeadersMiddleware)
app.add_middleware(ContextMiddleware)
app.add_middleware(GZipMiddleware, minimum_size=1000)
# Behind a reverse proxy in production
app.add_middleware(ProxyHeadersMiddleware, trusted_hosts="*")


routes = [
    auth_router,
    blog_router,
    comment_router,
]

_ = [app.include_router(router) for router in routes]

errors = [
    (BaseAppError, app_exception_handler),
    (RateLimitExceeded, rate_limit_exceeded_handler),
    (RequestValidationError, validation_exception_handler),
    (StarletteHTTPException, http_exception_handler),
    (Exception, unhandled_exception_handler),
]

_ = [app.add_exception_handler(exc_type, handler) for exc_type, handler in errors]

app.state.limiter = limiter
limiter: Limiter = app.state.limiter


@app.get(
    "/health",
    tags=["🩺 Health"],
    summary="Health check endpoint",
    response_class=ORJSONResponse,
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "version": "1.0.0",
                            "status": "ok",
                            "timestamp": "2025-01-01",
                            "cache": {"backend": "redis", "status": "healthy"},
                        },
                    },
                },
            },
        },
    },
    operation_id="health_check",
)
@limiter.exempt
async def health_check(request: Request) -> dict[str, Any]:
    """
    Health check endpoint.

    Parameters
    ----------
    request : Request
        Current request context.

    Returns
    -------
    dict
        Envelope with version, date and cache backend health.

    Examples
    --------
    Request
        GET /health
    Response
        200 OK
        {"success": true, "data": {"version": "1.0.0", "status": "ok", "cache": { ... }}}
    """
    cache_manager: CacheManager | None = getattr(request.app.state, "cache_manager", None)
    cache_health = (
        await cache_manager.health_check() if cache_manager else {"status": "not_initialized"}
    )
    return {
        "success": True,
        "data": {
            "version": app.version,
            "status": "ok",
            "timestamp": today_str(),
            "cache": cache_health,
        },
    }
