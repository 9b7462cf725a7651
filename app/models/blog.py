"""Blog post and comment database models using SQLModel."""

from datetime import datetime
from typing import cast

from pydantic import ConfigDict
from sqlalchemy import JSON, DateTime, Index, Integer, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from app.configs.settings import MAX_COMMENT_LENGTH, MAX_IMAGE_URL_LENGTH, MAX_TITLE_LENGTH
from app.utils.helpers import utc_now

# JSONB (GIN-indexable) on PostgreSQL, plain JSON elsewhere
TagsType = JSON().with_variant(JSONB(), "postgresql")


class BlogDB(SQLModel, table=True):
    """
    Blog post.

    ``order_id`` drives the manual display order; it is not unique and may
    have gaps, so ordered reads break ties on ``id``.
    """

    __tablename__ = cast("declared_attr[str]", "blogs")

    __table_args__ = (
        Index("ix_blogs_tags_gin", "tags", postgresql_using="gin"),
        Index("ix_blogs_order", "order_id", "id"),
    )

    id: int | None = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True),
        description="Blog ID",
    )
    author_id: int = Field(
        sa_column=Column(
            "author_id",
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Author ID (foreign key to users.id)",
    )
    title: str = Field(
        sa_column=Column(String(MAX_TITLE_LENGTH), nullable=False),
        description="Blog title",
    )
    content: str = Field(
        sa_column=Column(Text, nullable=False),
        description="Blog content",
    )
    tags: list[str] = Field(
        default_factory=list,
        sa_column=Column(TagsType, nullable=False),
        description="Blog tags for categorization",
    )
    image: str | None = Field(
        default=None,
        sa_column=Column(String(MAX_IMAGE_URL_LENGTH)),
        description="Thumbnail image URL",
    )
    order_id: int | None = Field(
        default=None,
        sa_column=Column(Integer, nullable=True),
        description="Manual display order",
    )

    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
        description="Creation timestamp",
    )
    updated_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False),
        description="Last update timestamp",
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "id": 1,
                "author_id": 1,
                "title": "Getting started with FastAPI",
                "content": "FastAPI is a modern web framework...",
                "tags": ["python", "fastapi"],
                "image": "https://example.com/thumbnail.webp",
                "order_id": 1,
            },
        },
    )


class CommentDB(SQLModel, table=True):
    """Comment on a blog post; removed with its post or its author."""

    __tablename__ = cast("declared_attr[str]", "comments")

    id: int | None = Field(
        default=None,
        sa_column=Column(Integer, primary_key=True, autoincrement=True),
    )
    content: str = Field(sa_column=Column(String(MAX_COMMENT_LENGTH), nullable=False))
    user_id: int = Field(
        sa_column=Column(
            "user_id",
            Integer,
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    blog_id: int = Field(
        sa_column=Column(
            "blog_id",
            Integer,
            ForeignKey("blogs.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    created_at: datetime = Field(
        default_factory=utc_now,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
