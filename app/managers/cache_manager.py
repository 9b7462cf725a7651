# app/managers/cache_manager.py
"""Cache manager wrapping Redis with an in-memory fallback."""

from logging import DEBUG, getLogger
from typing import Any

from app.clients.memory_client import MemoryClient
from app.clients.protocols import CacheClientProtocol
from app.clients.redis_client import RedisClient
from app.configs import CacheConfig, file_logger, settings
from app.data import CacheStatistics
from app.errors import (
    BASE_EXCEPTION,
    CacheConnectionError,
    CacheDeserializationError,
    CacheKeyError,
    CacheSerializationError,
)
from app.utils.cache_serializer import deserialize, serialize

logger = file_logger(getLogger(__name__))

# Keys deleted per round trip during pattern invalidation
DELETE_BATCH_SIZE = 1000


class CacheManager:
    """
    Namespaced JSON cache over Redis or an in-memory client.

    Created once in the application lifespan, stored on ``app.state`` and
    shut down on exit. Values are serialized with orjson, so a cached payload
    is always an exact copy of what was stored.
    """

    def __init__(
        self,
        redis_client: RedisClient | None = None,
        memory_client: MemoryClient | None = None,
        cache_config: CacheConfig | None = None,
    ) -> None:
        self.cache_config = cache_config or CacheConfig()
        self.redis_client = redis_client or RedisClient()
        self.memory_client = memory_client or MemoryClient(
            max_entries=self.cache_config.max_memory_entries,
            cleanup_interval=self.cache_config.cleanup_interval,
        )
        self._client: CacheClientProtocol = self.memory_client
        self.is_redis_available = False
        self.statistics = CacheStatistics()

    async def initialize(self) -> None:
        """
        Connect to Redis when enabled.

        If Redis is disabled or unreachable the in-memory client is used.
        """
        if settings.REDIS_ENABLED:
            try:
                await self.redis_client.connect()
            except CacheConnectionError as e:
                logger.warning(f"Redis connection failed: {e}. Falling back to in-memory cache.")
            else:
                self._client = self.redis_client
                self.is_redis_available = True
                logger.info("Cache manager initialized with Redis.")
                return
        else:
            logger.info("Redis disabled. Using in-memory cache.")

        self._client = self.memory_client
        self.is_redis_available = False
        await self.memory_client.start_lifecycle()
        logger.info("Cache manager initialized with in-memory cache.")

    async def shutdown(self) -> None:
        """Close every client connection."""
        if self.is_redis_available:
            await self.redis_client.close()
        await self.memory_client.close()
        logger.info("Cache manager shutdown successfully.")

    @property
    def backend(self) -> str:
        return "redis" if self.is_redis_available else "in-memory"

    def _build_key(self, key: str, namespace: str | None = None) -> str:
        """Build full cache key with prefix and namespace."""
        prefix = self.cache_config.key_prefix
        return f"{prefix}:{namespace}:{key}" if namespace else f"{prefix}:{key}"

    async def get(self, key: str, namespace: str | None = None) -> Any:
        """Return the deserialized value, or ``None`` on a miss."""
        full_key = self._build_key(key, namespace)
        try:
            if logger.isEnabledFor(DEBUG):
                logger.debug("Getting from cache: %s", full_key)
            cached_value = await self._client.get(full_key)
            if cached_value is None:
                self.statistics.record_miss()
                return None

            value = deserialize(cached_value)
            self.statistics.record_hit(len(cached_value.encode("utf-8")))
        except (*BASE_EXCEPTION, CacheConnectionError, CacheDeserializationError) as e:
            self.statistics.record_error()
            mssg = f"Cache get failed for key {key}: {e}"
            raise CacheKeyError(mssg) from e
        return value

    async def set(
        self,
        key: str,
        value: object,
        ttl: int | None = None,
        namespace: str | None = None,
    ) -> bool:
        """Store ``value`` under ``key`` for ``ttl`` seconds (capped at ``max_ttl``)."""
        full_key = self._build_key(key, namespace)
        try:
            serialized = serialize(value)
            ex = ttl if ttl is not None else self.cache_config.default_ttl
            ex = min(ex, self.cache_config.max_ttl)
            success = await self._client.set(full_key, serialized, ex=ex)
            self.statistics.record_set(len(serialized.encode("utf-8")))
        except (*BASE_EXCEPTION, CacheConnectionError, CacheSerializationError) as e:
            self.statistics.record_error()
            mssg = f"Cache set failed for key {key}: {e}"
            raise CacheKeyError(mssg) from e
        return success

    async def delete(self, *keys: str, namespace: str | None = None) -> int:
        """Delete exact keys from cache."""
        if not keys:
            return 0
        try:
            full_keys = [self._build_key(key, namespace) for key in keys]
            deleted_count = await self._client.delete(*full_keys)
        except (*BASE_EXCEPTION, CacheConnectionError) as e:
            self.statistics.record_error()
            mssg = f"Cache delete failed for keys {keys}: {e}"
            raise CacheKeyError(mssg) from e
        if deleted_count:
            self.statistics.record_delete(deleted_count)
        return deleted_count

    async def delete_pattern(self, pattern: str, namespace: str | None = None) -> int:
        """
        Delete every key matching a glob ``pattern`` within ``namespace``.

        Keys are collected with SCAN and deleted in batches.

        Returns:
            Number of keys deleted.
        """
        full_pattern = self._build_key(pattern, namespace)
        deleted_total = 0
        keys_batch: list[str] = []
        try:
            async for key in self._client.scan_iter(full_pattern):
                keys_batch.append(key)
                if len(keys_batch) >= DELETE_BATCH_SIZE:
                    deleted_total += await self._client.delete(*keys_batch)
                    keys_batch = []

            if keys_batch:
                deleted_total += await self._client.delete(*keys_batch)
        except (*BASE_EXCEPTION, CacheConnectionError) as e:
            self.statistics.record_error()
            mssg = f"Cache pattern delete failed for {full_pattern}: {e}"
            raise CacheKeyError(mssg) from e

        if deleted_total:
            self.statistics.record_delete(deleted_total)
            logger.info("Invalidated %d keys for pattern '%s'.", deleted_total, full_pattern)
        return deleted_total

    async def clear(self, namespace: str | None = None) -> int:
        """Clear all cache entries, optionally for a namespace."""
        return await self.delete_pattern("*", namespace)

    async def exists(self, *keys: str, namespace: str | None = None) -> int:
        try:
            full_keys = [self._build_key(key, namespace) for key in keys]
            return await self._client.exists(*full_keys)
        except (*BASE_EXCEPTION, CacheConnectionError) as e:
            self.statistics.record_error()
            mssg = f"Cache exists check failed for keys {keys}: {e}"
            raise CacheKeyError(mssg) from e

    async def ttl(self, key: str, namespace: str | None = None) -> int:
        try:
            return await self._client.ttl(self._build_key(key, namespace))
        except (*BASE_EXCEPTION, CacheConnectionError) as e:
            self.statistics.record_error()
            mssg = f"Cache ttl check failed for key {key}: {e}"
            raise CacheKeyError(mssg) from e

    async def ping(self) -> bool:
        try:
            return await self._client.ping()
        except (*BASE_EXCEPTION, CacheConnectionError):
            logger.exception("Cache ping failed")
            return False

    async def health_check(self) -> dict[str, Any]:
        """
        Report backend, reachability and traffic counters.

        Returns:
            Dictionary with health status and details.
        """
        result: dict[str, Any] = {
            "backend": self.backend,
            "statistics": self.statistics.to_dict(),
        }
        healthy = await self.ping()
        result["status"] = "healthy" if healthy else "unhealthy"
        return result
