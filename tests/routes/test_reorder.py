# tests/routes/test_reorder.py
"""Tests for the manual ordering endpoints."""

import pytest
from httpx import AsyncClient

from app.models import UserDB
from app.repositories import BlogRepository


async def _ordered_ids(client: AsyncClient, headers: dict) -> list[int]:
    response = await client.get("/api/blogs/reorder", headers=headers)
    assert response.status_code == 200
    return [blog["id"] for blog in response.json()["data"]]


class TestOrderedList:
    """Tests for GET /api/blogs/reorder."""

    @pytest.mark.asyncio
    async def test_owner_only(self, client: AsyncClient, reader_headers: dict) -> None:
        assert (await client.get("/api/blogs/reorder")).status_code == 401
        assert (await client.get("/api/blogs/reorder", headers=reader_headers)).status_code == 403

    @pytest.mark.asyncio
    async def test_follows_creation_order(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
    ) -> None:
        blogs = [await blog_factory(owner, title=f"P{i}") for i in range(3)]
        assert await _ordered_ids(client, owner_headers) == [blog.id for blog in blogs]

        item = (await client.get("/api/blogs/reorder", headers=owner_headers)).json()["data"][0]
        assert set(item) == {"id", "title", "orderId"}


class TestReorder:
    """Tests for POST /api/blogs/reorder."""

    @pytest.mark.asyncio
    async def test_reorder_applies_batch(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
    ) -> None:
        a, b, c = [await blog_factory(owner, title=t) for t in "abc"]

        response = await client.post(
            "/api/blogs/reorder",
            json=[
                {"id": a.id, "newOrder": 3},
                {"id": b.id, "newOrder": 1},
                {"id": c.id, "newOrder": 2},
            ],
            headers=owner_headers,
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Blogs reordered successfully"
        assert sorted(body["data"]["updated"]) == sorted([a.id, b.id, c.id])
        assert body["data"]["failed"] == []

        assert await _ordered_ids(client, owner_headers) == [b.id, c.id, a.id]

    @pytest.mark.asyncio
    async def test_accepts_wrapped_payload(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
    ) -> None:
        a, b = [await blog_factory(owner, title=t) for t in "ab"]
        response = await client.post(
            "/api/blogs/reorder",
            json={"data": [{"id": a.id, "newOrder": 2}, {"id": b.id, "newOrder": 1}]},
            headers=owner_headers,
        )
        assert response.status_code == 200
        assert await _ordered_ids(client, owner_headers) == [b.id, a.id]

    @pytest.mark.asyncio
    async def test_unknown_id_rejects_whole_batch(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
    ) -> None:
        a, b = [await blog_factory(owner, title=t) for t in "ab"]

        response = await client.post(
            "/api/blogs/reorder",
            json=[{"id": a.id, "newOrder": 9}, {"id": 999, "newOrder": 1}],
            headers=owner_headers,
        )
        assert response.status_code == 404
        assert response.json() == {"success": False, "error": "Blog not found: 999"}
        assert await _ordered_ids(client, owner_headers) == [a.id, b.id]

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("field", "value"),
        [("newOrder", 2**70), ("newOrder", 2**31), ("newOrder", -(2**31) - 1), ("id", 2**31)],
    )
    async def test_out_of_range_integer_rejects_whole_batch(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
        field: str,
        value: int,
    ) -> None:
        a, b = [await blog_factory(owner, title=t) for t in "ab"]
        before = (await client.get("/api/blogs/reorder", headers=owner_headers)).json()["data"]

        response = await client.post(
            "/api/blogs/reorder",
            json=[{"id": a.id, "newOrder": 50}, {"id": b.id, "newOrder": 1, field: value}],
            headers=owner_headers,
        )
        assert response.status_code == 400
        assert response.json()["success"] is False

        after = (await client.get("/api/blogs/reorder", headers=owner_headers)).json()["data"]
        assert after == before

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "payload",
        [
            [],
            [{"id": 1, "newOrder": 1}, {"id": 1, "newOrder": 2}],
            [{"id": 1, "newOrder": "first"}],
            [{"id": 1}],
            {"items": []},
        ],
    )
    async def test_malformed_batch_is_400(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
        payload: object,
    ) -> None:
        await blog_factory(owner)
        response = await client.post("/api/blogs/reorder", json=payload, headers=owner_headers)
        assert response.status_code == 400
        assert response.json()["success"] is False

    @pytest.mark.asyncio
    async def test_duplicate_message(self, client: AsyncClient, owner_headers: dict) -> None:
        response = await client.post(
            "/api/blogs/reorder",
            json=[{"id": 1, "newOrder": 1}, {"id": 1, "newOrder": 2}],
            headers=owner_headers,
        )
        assert "Duplicate blog IDs in reorder request" in response.json()["error"]

    @pytest.mark.asyncio
    async def test_requires_owner(self, client: AsyncClient, reader_headers: dict) -> None:
        response = await client.post(
            "/api/blogs/reorder",
            json=[{"id": 1, "newOrder": 1}],
            headers=reader_headers,
        )
        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_partial_failure_reports_both_sets(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        a, b = [await blog_factory(owner, title=t) for t in "ab"]
        original = BlogRepository.set_order

        async def flaky_set_order(self: BlogRepository, blog_id: int, order_id: int) -> bool:
            if blog_id == b.id:
                return False
            return await original(self, blog_id, order_id)

        monkeypatch.setattr(BlogRepository, "set_order", flaky_set_order)

        response = await client.post(
            "/api/blogs/reorder",
            json=[{"id": a.id, "newOrder": 5}, {"id": b.id, "newOrder": 1}],
            headers=owner_headers,
        )
        assert response.status_code == 500
        body = response.json()
        assert body["success"] is False
        assert body["data"] == {"updated": [a.id], "failed": [b.id]}

        ordered = (await client.get("/api/blogs/reorder", headers=owner_headers)).json()["data"]
        assert {blog["id"]: blog["orderId"] for blog in ordered}[a.id] == 5

    @pytest.mark.asyncio
    async def test_reorder_invalidates_detail_and_list(
        self,
        client: AsyncClient,
        owner: UserDB,
        owner_headers: dict,
        blog_factory,
    ) -> None:
        blog = await blog_factory(owner)
        before = (await client.get(f"/api/blogs/{blog.id}")).json()["data"]["orderId"]
        await client.get("/api/blogs")

        await client.post(
            "/api/blogs/reorder",
            json=[{"id": blog.id, "newOrder": before + 10}],
            headers=owner_headers,
        )

        assert (await client.get(f"/api/blogs/{blog.id}")).json()["data"]["orderId"] == before + 10
        assert (await client.get("/api/blogs")).json()["data"][0]["orderId"] == before + 10
