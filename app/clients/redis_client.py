# app/clients/redis_client.py
"""Redis backend for the blog cache."""

from collections.abc import AsyncGenerator, Generator
from contextlib import contextmanager
from logging import getLogger
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.exceptions import RedisError

from app.configs import file_logger, pool_kwargs
from app.errors import CacheConnectionError

logger = file_logger(getLogger(__name__))


@contextmanager
def _translate(operation: str, target: object = "") -> Generator[None]:
    """Re-raise redis-py failures as ``CacheConnectionError``."""
    try:
        yield
    except RedisError as e:
        mssg = f"Redis {operation} failed {target}: {e}".replace("  ", " ")
        raise CacheConnectionError(mssg) from e


class RedisClient:
    """Pooled ``redis.asyncio`` connection exposing the commands the cache manager uses."""

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self.config = config or pool_kwargs
        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None

    @property
    def address(self) -> str:
        return f"{self.config.get('host')}:{self.config.get('port')}"

    async def connect(self) -> None:
        """
        Open the pool and ping once.

        Raises:
            CacheConnectionError: If the server is unreachable or the ping fails.
        """
        try:
            self._pool = ConnectionPool(**self.config)
            self._redis = Redis(connection_pool=self._pool)
            alive = await self._redis.ping()
        except (ConnectionError, TimeoutError, RedisError) as e:
            logger.warning(f"Redis unreachable at {self.address}")
            mssg = f"Cannot connect to Redis at {self.address}"
            raise CacheConnectionError(mssg) from e

        if not alive:
            mssg = f"Redis at {self.address} did not answer PING"
            raise CacheConnectionError(mssg)
        logger.info(f"Connected to Redis at {self.address}")

    async def close(self) -> None:
        if self._redis is None:
            return
        await self._redis.aclose()
        self._redis = None
        self._pool = None
        logger.info("Redis connection closed")

    @property
    def client(self) -> Redis:
        if self._redis is None:
            mssg = "Redis client used before connect()"
            raise CacheConnectionError(mssg)
        return self._redis

    async def get(self, key: str) -> str | None:
        with _translate("GET", key):
            return await self.client.get(key)

    async def set(self, key: str, value: str, ex: int | None = None) -> bool:
        with _translate("SET", key):
            return bool(await self.client.set(key, value, ex=ex))

    async def delete(self, *keys: str) -> int:
        if not keys:
            return 0
        with _translate("DEL", keys):
            return await self.client.delete(*keys)

    async def exists(self, *keys: str) -> int:
        with _translate("EXISTS", keys):
            return await self.client.exists(*keys)

    async def ttl(self, key: str) -> int:
        with _translate("TTL", key):
            return await self.client.ttl(key)

    async def ping(self) -> bool:
        with _translate("PING"):
            return bool(await self.client.ping())

    async def info(self) -> dict[str, Any]:
        with _translate("INFO"):
            info = await self.client.info()
        return info if isinstance(info, dict) else {}

    async def scan_iter(self, pattern: str, count: int = 100) -> AsyncGenerator[str]:
        """
        Yield keys matching ``pattern`` with cursor-based SCAN.

        KEYS is never issued; the cursor is followed until Redis returns 0.
        """
        cursor = 0
        while True:
            with _translate("SCAN", pattern):
                cursor, keys = await self.client.scan(cursor, match=pattern, count=count)
            for key in keys:
                yield key.decode("utf-8") if isinstance(key, bytes) else key
            if cursor == 0:
                break
