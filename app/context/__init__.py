# app/context/__init__.py
"""
Request-scoped context variables.

``cache_manager_ctx`` carries the application's cache manager into the
``cached`` and ``cache_busting`` decorators, which wrap endpoint functions
and never see the ``Request``.
"""

from contextvars import ContextVar

from app.managers.cache_manager import CacheManager

# Bound by ContextMiddleware for the duration of each request
cache_manager_ctx: ContextVar[CacheManager | None] = ContextVar("cache_manager", default=None)

__all__ = ["cache_manager_ctx"]
