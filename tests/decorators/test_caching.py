# tests/decorators/test_caching.py
"""Tests for app/decorators/caching.py module."""

from typing import Any
from unittest.mock import AsyncMock

import pytest

from app.context import cache_manager_ctx
from app.decorators.caching import cache_busting, cached
from app.errors import CacheKeyError
from app.managers.cache_manager import CacheManager


class TestCached:
    """Tests for the cached decorator."""

    @pytest.mark.asyncio
    async def test_second_call_is_served_from_cache(self, cache_manager: CacheManager) -> None:
        calls = 0

        @cached(ttl=60, namespace="test", cache_manager=cache_manager)
        async def endpoint() -> dict[str, Any]:
            nonlocal calls
            calls += 1
            return {"success": True, "data": calls}

        assert await endpoint() == {"success": True, "data": 1}
        assert await endpoint() == {"success": True, "data": 1}
        assert calls == 1

    @pytest.mark.asyncio
    async def test_key_builder_receives_kwargs(self, cache_manager: CacheManager) -> None:
        @cached(
            ttl=60,
            namespace="test",
            key_builder=lambda item_id, **kw: f"item_{item_id}",
            cache_manager=cache_manager,
        )
        async def endpoint(item_id: int, other: str = "") -> dict[str, Any]:
            return {"id": item_id}

        await endpoint(item_id=1, other="x")
        await endpoint(item_id=2)

        assert await cache_manager.get("item_1", namespace="test") == {"id": 1}
        assert await cache_manager.get("item_2", namespace="test") == {"id": 2}

    @pytest.mark.asyncio
    async def test_uses_context_manager(self, cache_manager: CacheManager) -> None:
        @cached(ttl=60, namespace="ctx")
        async def endpoint() -> int:
            return 42

        token = cache_manager_ctx.set(cache_manager)
        try:
            await endpoint()
        finally:
            cache_manager_ctx.reset(token)

        assert await cache_manager.get("endpoint", namespace="ctx") == 42

    @pytest.mark.asyncio
    async def test_without_manager_calls_through(self) -> None:
        @cached(ttl=60)
        async def endpoint() -> str:
            return "fresh"

        assert await endpoint() == "fresh"

    @pytest.mark.asyncio
    async def test_cache_errors_fall_through(self, cache_manager: CacheManager) -> None:
        cache_manager.get = AsyncMock(side_effect=CacheKeyError("down"))
        cache_manager.set = AsyncMock(side_effect=CacheKeyError("down"))

        @cached(ttl=60, cache_manager=cache_manager)
        async def endpoint() -> str:
            return "fresh"

        assert await endpoint() == "fresh"

    @pytest.mark.asyncio
    async def test_endpoint_errors_are_not_cached(self, cache_manager: CacheManager) -> None:
        @cached(ttl=60, namespace="err", cache_manager=cache_manager)
        async def endpoint() -> str:
            raise ValueError("nope")

        with pytest.raises(ValueError, match="nope"):
            await endpoint()
        assert await cache_manager.exists("endpoint", namespace="err") == 0


class TestCacheBusting:
    """Tests for the cache_busting decorator."""

    @pytest.mark.asyncio
    async def test_busts_keys_and_patterns_after_success(
        self,
        cache_manager: CacheManager,
    ) -> None:
        for key in ("stats", "detail_1", "list_1", "list_2", "keep"):
            await cache_manager.set(key, 1, namespace="b")

        @cache_busting(
            keys=["stats"],
            patterns=["list_*"],
            namespace="b",
            key_builder=lambda item_id, **kw: [f"detail_{item_id}"],
            cache_manager=cache_manager,
        )
        async def endpoint(item_id: int) -> str:
            return "ok"

        assert await endpoint(item_id=1) == "ok"
        assert await cache_manager.exists("stats", "detail_1", "list_1", "list_2", namespace="b") == 0
        assert await cache_manager.exists("keep", namespace="b") == 1

    @pytest.mark.asyncio
    async def test_nothing_busted_when_endpoint_raises(self, cache_manager: CacheManager) -> None:
        await cache_manager.set("stats", 1, namespace="b")

        @cache_busting(keys=["stats"], namespace="b", cache_manager=cache_manager)
        async def endpoint() -> None:
            raise RuntimeError("write failed")

        with pytest.raises(RuntimeError):
            await endpoint()
        assert await cache_manager.exists("stats", namespace="b") == 1

    @pytest.mark.asyncio
    async def test_busting_failure_keeps_result(self, cache_manager: CacheManager) -> None:
        cache_manager.delete = AsyncMock(side_effect=CacheKeyError("down"))

        @cache_busting(keys=["stats"], cache_manager=cache_manager)
        async def endpoint() -> str:
            return "written"

        assert await endpoint() == "written"
