"""Protocol definitions for cache client implementations."""

from collections.abc import AsyncIterator, Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheClientProtocol(Protocol):
    """
    Protocol for cache client implementations.

    Both RedisClient and MemoryClient conform to this protocol, which is the
    subset of Redis commands the cache manager relies on.
    """

    def get(self, key: str) -> Awaitable[str | None]: ...

    def set(self, key: str, value: str, ex: int | None = None) -> Awaitable[bool]: ...

    def delete(self, *keys: str) -> Awaitable[int]: ...

    def exists(self, *keys: str) -> Awaitable[int]: ...

    def ttl(self, key: str) -> Awaitable[int]: ...

    def ping(self) -> Awaitable[bool]: ...

    def info(self) -> Awaitable[dict[str, Any]]: ...

    def scan_iter(self, pattern: str, count: int = 100) -> AsyncIterator[str]:
        """Yield keys matching a glob-style pattern."""
        ...

    def close(self) -> Awaitable[None]: ...
