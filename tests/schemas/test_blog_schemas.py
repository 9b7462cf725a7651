# tests/schemas/test_blog_schemas.py
"""Tests for blog request schemas and the response envelope."""

import pytest
from pydantic import ValidationError

from app.schemas import BlogCreate, BlogUpdate, Pagination, ReorderRequest, ok
from app.schemas.blog import OrderedBlogOut


class TestReorderRequest:
    def test_bare_list(self) -> None:
        request = ReorderRequest.model_validate([{"id": 1, "newOrder": 2}])
        assert [(item.id, item.new_order) for item in request.root] == [(1, 2)]

    def test_wrapped_list(self) -> None:
        request = ReorderRequest.model_validate({"data": [{"id": 3, "newOrder": 1}]})
        assert request.root[0].id == 3

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            [{"id": 1}],
            [{"id": "x", "newOrder": 1}],
            [{"id": 1, "newOrder": 1}, {"id": 1, "newOrder": 2}],
            [{"id": 1, "newOrder": 2**31}],
            [{"id": 1, "newOrder": -(2**31) - 1}],
            [{"id": 2**31, "newOrder": 1}],
            [{"id": 0, "newOrder": 1}],
        ],
    )
    def test_rejects(self, payload: list) -> None:
        with pytest.raises(ValidationError):
            ReorderRequest.model_validate(payload)


class TestBlogPayloads:
    def test_create_requires_image_url(self) -> None:
        with pytest.raises(ValidationError, match="Invalid image URL"):
            BlogCreate(title="t", content="c", image="ftp://example.com/x.png")

    def test_create_rejects_blank_title(self) -> None:
        with pytest.raises(ValidationError):
            BlogCreate(title="   ", content="c", image="https://example.com/x.png")

    @pytest.mark.parametrize("field", ["title", "content"])
    def test_update_rejects_blank_text(self, field: str) -> None:
        with pytest.raises(ValidationError, match="Title and content are required"):
            BlogUpdate.model_validate({field: " \t "})

    def test_update_null_text_is_ignored(self) -> None:
        assert BlogUpdate.model_validate({"title": None}).changes() == {}

    def test_update_changes_only_sent_fields(self) -> None:
        update = BlogUpdate.model_validate({"title": "New", "content": None})
        assert update.changes() == {"title": "New"}

    def test_update_null_image_clears(self) -> None:
        assert BlogUpdate.model_validate({"image": None}).changes() == {"image": None}


class TestEnvelope:
    def test_unset_keys_are_omitted(self) -> None:
        assert ok(message="Done") == {"success": True, "message": "Done"}

    def test_models_are_dumped_with_aliases(self) -> None:
        body = ok(
            [OrderedBlogOut(id=1, title="A", order_id=4)],
            pagination=Pagination.build(page=2, limit=5, total=11),
        )
        assert body == {
            "success": True,
            "data": [{"id": 1, "title": "A", "orderId": 4}],
            "pagination": {"page": 2, "limit": 5, "total": 11, "totalPages": 3},
        }

    def test_empty_list_is_kept(self) -> None:
        assert ok([]) == {"success": True, "data": []}
