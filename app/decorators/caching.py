# app/decorators/caching.py
"""Response caching and cache-busting decorators for FastAPI endpoints."""

from collections.abc import Awaitable, Callable
from functools import wraps
from logging import getLogger
from typing import TYPE_CHECKING, Any

from app.configs import file_logger
from app.context import cache_manager_ctx
from app.errors import BASE_EXCEPTION, CacheExceptionError

if TYPE_CHECKING:
    from app.managers.cache_manager import CacheManager

logger = file_logger(getLogger(__name__))

exceptions = (CacheExceptionError, *BASE_EXCEPTION)

type Endpoint = Callable[..., Awaitable[Any]]


def _resolve(cache_manager: "CacheManager | None") -> "CacheManager | None":
    return cache_manager if cache_manager is not None else cache_manager_ctx.get()


def cached(
    ttl: int | None = None,
    namespace: str | None = None,
    key_builder: Callable[..., str] | None = None,
    cache_manager: "CacheManager | None" = None,
) -> Callable[[Endpoint], Endpoint]:
    """
    Cache an endpoint's JSON-ready result.

    On a hit the stored payload is returned verbatim and the endpoint body is
    never run. On a miss the endpoint runs and its result is stored with
    ``ttl``. Cache failures are logged and fall through to the endpoint.

    Args:
        ttl: Time to live in seconds.
        namespace: Cache namespace.
        key_builder: Builds the key from the endpoint's keyword arguments.
        cache_manager: Explicit manager; defaults to the one bound to the request.

    Example:
        @router.get("/{blog_id}")
        @cached(ttl=600, namespace="blogs", key_builder=lambda blog_id, **kw: blog_id_key(blog_id))
        async def get_blog(blog_id: int, ...) -> dict: ...
    """

    def decorator(func: Endpoint) -> Endpoint:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            manager = _resolve(cache_manager)
            if manager is None:
                return await func(*args, **kwargs)

            cache_key = key_builder(**kwargs) if key_builder else func.__name__

            try:
                cached_value = await manager.get(cache_key, namespace)
            except exceptions as e:
                logger.warning(f"Cache retrieval failed for {cache_key}: {e}")
                cached_value = None

            if cached_value is not None:
                logger.debug(f"Cache hit for key: {cache_key}")
                return cached_value

            result = await func(*args, **kwargs)

            try:
                await manager.set(cache_key, result, ttl=ttl, namespace=namespace)
                logger.debug(f"Cached result for key: {cache_key}")
            except exceptions as e:
                logger.warning(f"Cache store failed for {cache_key}: {e}")

            return result

        return wrapper

    return decorator


def cache_busting(
    keys: list[str] | None = None,
    patterns: list[str] | None = None,
    namespace: str | None = None,
    key_builder: Callable[..., list[str]] | None = None,
    cache_manager: "CacheManager | None" = None,
) -> Callable[[Endpoint], Endpoint]:
    """
    Invalidate cache entries after a mutating endpoint succeeds.

    The endpoint commits before returning, so invalidation always runs after
    the write is durable. Nothing is invalidated when the endpoint raises.
    Invalidation failures are logged and never change the response.

    Args:
        keys: Fixed keys to delete.
        patterns: Glob patterns whose matching keys are deleted.
        namespace: Cache namespace.
        key_builder: Builds extra keys from the endpoint's keyword arguments.
        cache_manager: Explicit manager; defaults to the one bound to the request.
    """

    def decorator(func: Endpoint) -> Endpoint:
        @wraps(func)
        async def wrapper(*args: Any, **kwargs: Any) -> Any:
            result = await func(*args, **kwargs)

            manager = _resolve(cache_manager)
            if manager is None:
                return result

            keys_to_bust = [*(keys or []), *(key_builder(**kwargs) if key_builder else [])]
            try:
                deleted = await manager.delete(*keys_to_bust, namespace=namespace)
                for pattern in patterns or []:
                    deleted += await manager.delete_pattern(pattern, namespace=namespace)
                logger.debug(f"Cache busted {deleted} keys: {keys_to_bust} {patterns or []}")
            except exceptions as e:
                logger.warning(f"Cache busting failed: {e}")

            return result

        return wrapper

    return decorator
