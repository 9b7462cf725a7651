"""In-memory cache client for fallback when Redis is not available."""

from asyncio import CancelledError, Lock, Task, create_task
from asyncio import sleep as asyncio_sleep
from collections import OrderedDict
from collections.abc import AsyncGenerator
from contextlib import suppress
from fnmatch import fnmatchcase
from logging import getLogger
from time import monotonic

from app.configs import file_logger

logger = file_logger(getLogger(__name__))


class MemoryClient:
    """
    An asynchronous in-memory cache client that mimics RedisClient.

    Features:
        - Lazy expiration on read plus a periodic sweep
        - Entry count limit with LRU eviction
        - Glob-style key scanning, matching Redis SCAN MATCH semantics
    """

    DEFAULT_MAX_ENTRIES: int = 10_000
    DEFAULT_CLEANUP_INTERVAL: int = 60  # seconds

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL,
    ) -> None:
        self._cache: OrderedDict[str, str] = OrderedDict()
        self._expires_at: dict[str, float] = {}
        self._max_entries = max_entries
        self._cleanup_interval = cleanup_interval
        self._cleanup_task: Task[None] | None = None
        self._lock = Lock()
        self.is_connected: bool = True

    async def start_lifecycle(self) -> None:
        """Start the background expiry sweep."""
        async with self._lock:
            if self._cleanup_task is None:
                self.is_connected = True
                self._cleanup_task = create_task(self._cleanup_loop())
                logger.info("MemoryClient expiry sweep started.")

    async def _cleanup_loop(self) -> None:
        while self.is_connected:
            try:
                await asyncio_sleep(self._cleanup_interval)
                removed = await self.purge_expired()
                if removed:
                    logger.debug("Memory cleanup: removed %d expired keys.", removed)
            except CancelledError:
                break
            except Exception:
                logger.exception("Error in memory cleanup loop")

    async def purge_expired(self) -> int:
        async with self._lock:
            now = monotonic()
            expired = [k for k, at in self._expires_at.items() if at <= now]
            return self._drop(*expired)

    def _expired(self, key: str) -> bool:
        at = self._expires_at.get(key)
        return at is not None and at <= monotonic()

    def _drop(self, *keys: str) -> int:
        count = 0
        for key in keys:
            self._expires_at.pop(key, None)
            if self._cache.pop(key, None) is not None:
                count += 1
        return count

    async def get(self, key: str) -> str | None:
        async with self._lock:
            if self._expired(key):
                self._drop(key)
                return None
            value = self._cache.get(key)
            if value is not None:
                self._cache.move_to_end(key)
            return value

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        async with self._lock:
            if key not in self._cache:
                while len(self._cache) >= self._max_entries:
                    oldest, _ = self._cache.popitem(last=False)
                    self._expires_at.pop(oldest, None)

            self._cache[key] = value
            self._cache.move_to_end(key)

            if ex:
                self._expires_at[key] = monotonic() + ex
            else:
                # Plain SET clears any previous TTL, as in Redis
                self._expires_at.pop(key, None)
            return True

    async def delete(self, *keys: str) -> int:
        async with self._lock:
            return self._drop(*keys)

    async def exists(self, *keys: str) -> int:
        async with self._lock:
            return sum(1 for key in keys if key in self._cache and not self._expired(key))

    async def ttl(self, key: str) -> int:
        """Remaining TTL in seconds; -2 when missing, -1 when persistent."""
        async with self._lock:
            if key not in self._cache or self._expired(key):
                self._drop(key)
                return -2
            if key not in self._expires_at:
                return -1
            return int(self._expires_at[key] - monotonic())

    async def ping(self) -> bool:
        return self.is_connected

    async def info(self) -> dict[str, str | int]:
        async with self._lock:
            return {
                "server": "In-Memory Cache",
                "total_keys": len(self._cache),
                "keys_with_ttl": len(self._expires_at),
                "max_entries": self._max_entries,
            }

    async def scan_iter(
        self,
        pattern: str,
        count: int = 100,  # noqa: ARG002 - same signature as RedisClient.scan_iter
    ) -> AsyncGenerator[str]:
        async with self._lock:
            keys = [k for k in self._cache if not self._expired(k)]

        for key in keys:
            if fnmatchcase(key, pattern):
                yield key

    async def close(self) -> None:
        """Stop the sweep and drop every entry."""
        async with self._lock:
            self.is_connected = False
            task, self._cleanup_task = self._cleanup_task, None
            self._cache.clear()
            self._expires_at.clear()
        if task is not None:
            task.cancel()
            with suppress(CancelledError):
                await task
