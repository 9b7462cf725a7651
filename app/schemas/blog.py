"""
Blog schemas.

Request bodies for creating, updating and reordering posts, and the
response shapes used by the list, detail, ordered-list and stats endpoints.
"""

from typing import Any

from pydantic import (
    Field,
    HttpUrl,
    RootModel,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)

from app.configs.settings import INT32_MAX, INT32_MIN, MAX_IMAGE_URL_LENGTH, MAX_TITLE_LENGTH
from app.schemas.common import CamelModel, UTCDateTime

_http_url = TypeAdapter(HttpUrl)


def validate_image_url(value: str) -> str:
    """Accept only absolute http(s) URLs; the original string is kept as stored."""
    try:
        _http_url.validate_python(value)
    except ValidationError as e:
        mssg = "Invalid image URL"
        raise ValueError(mssg) from e
    return value


def require_text(value: str) -> str:
    if not value.strip():
        mssg = "Title and content are required"
        raise ValueError(mssg)
    return value


class BlogCreate(CamelModel):
    """Blog creation payload."""

    title: str = Field(
        ...,
        min_length=1,
        max_length=MAX_TITLE_LENGTH,
        description="Blog title",
        examples=["Understanding asyncio task groups"],
    )
    content: str = Field(..., min_length=1, description="Blog content")
    tags: list[str] = Field(
        default_factory=list,
        description="Blog tags for categorization",
        examples=[["python", "asyncio"]],
    )
    image: str = Field(
        ...,
        max_length=MAX_IMAGE_URL_LENGTH,
        description="Cover image URL",
        examples=["https://images.example.com/cover.webp"],
    )

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        return require_text(v)

    @field_validator("image")
    @classmethod
    def check_image(cls, v: str) -> str:
        return validate_image_url(v)


class BlogUpdate(CamelModel):
    """
    Partial blog update.

    Only fields present in the body are applied. ``image: null`` clears the
    stored image; a null for any other field keeps the stored value.
    """

    title: str | None = Field(default=None, min_length=1, max_length=MAX_TITLE_LENGTH)
    content: str | None = Field(default=None, min_length=1)
    tags: list[str] | None = None
    image: str | None = Field(default=None, max_length=MAX_IMAGE_URL_LENGTH)

    @field_validator("title", "content")
    @classmethod
    def not_blank(cls, v: str | None) -> str | None:
        return v if v is None else require_text(v)

    @field_validator("image")
    @classmethod
    def check_image(cls, v: str | None) -> str | None:
        return v if v is None else validate_image_url(v)

    def changes(self) -> dict[str, Any]:
        """Column values to write."""
        provided = self.model_dump(exclude_unset=True)
        return {
            field: value
            for field, value in provided.items()
            if value is not None or field == "image"
        }


class ReorderItem(CamelModel):
    id: int = Field(ge=1, le=INT32_MAX)
    new_order: int = Field(ge=INT32_MIN, le=INT32_MAX)


class ReorderRequest(RootModel[list[ReorderItem]]):
    """
    Batch of ``{id, newOrder}`` pairs.

    Also accepts the list wrapped as ``{"data": [...]}``.
    """

    @model_validator(mode="before")
    @classmethod
    def unwrap(cls, data: Any) -> Any:
        if isinstance(data, dict) and "data" in data:
            return data["data"]
        return data

    @field_validator("root")
    @classmethod
    def check_batch(cls, v: list[ReorderItem]) -> list[ReorderItem]:
        if not v:
            mssg = "Reorder list must not be empty"
            raise ValueError(mssg)
        ids = [item.id for item in v]
        if len(ids) != len(set(ids)):
            mssg = "Duplicate blog IDs in reorder request"
            raise ValueError(mssg)
        return v


class AuthorOut(CamelModel):
    id: int
    email: str
    name: str
    image: str | None = None


class AuthorProfileOut(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None


class BlogOut(CamelModel):
    """Post as returned by the list and detail endpoints."""

    id: int
    title: str
    image: str | None
    content: str
    tags: list[str]
    author_id: int
    order_id: int | None
    created_at: UTCDateTime
    updated_at: UTCDateTime
    author: AuthorOut | None
    author_profile: AuthorProfileOut | None
    comments: int = 0


class OrderedBlogOut(CamelModel):
    id: int
    title: str
    order_id: int | None


class ReorderResult(CamelModel):
    updated: list[int]
    failed: list[int]


class RecentAuthorOut(CamelModel):
    id: int
    email: str
    name: str
    avatar: str | None
    profile_image: str | None


class RecentPostOut(CamelModel):
    id: int
    title: str
    content: str
    tags: list[str]
    author_id: int
    created_at: UTCDateTime
    updated_at: UTCDateTime
    comments: int
    author: RecentAuthorOut
    image: str | None


class TagCount(CamelModel):
    tag: str
    count: int


class StatsOut(CamelModel):
    """Dashboard aggregate."""

    total_posts: int
    total_comments: int
    recent_posts: list[RecentPostOut]
    popular_tags: list[TagCount]
