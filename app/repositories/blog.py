"""Blog repository for database operations."""

from collections import Counter
from logging import getLogger
from typing import Any

from sqlalchemy import ColumnElement, Select, exists, func, or_, select, type_coerce, update
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.exc import SQLAlchemyError

from app.configs import file_logger
from app.errors.database import DatabaseError
from app.models import BlogDB, CommentDB, UserDB, UserProfileDB
from app.repositories.base import BaseRepository
from app.schemas.blog import (
    AuthorOut,
    AuthorProfileOut,
    BlogCreate,
    BlogOut,
    OrderedBlogOut,
    RecentAuthorOut,
    RecentPostOut,
    TagCount,
)
from app.utils.helpers import utc_now

logger = file_logger(getLogger(__name__))

LIKE_ESCAPE = "\\"


def escape_like(value: str) -> str:
    """Make ``%`` and ``_`` in user input match literally inside a LIKE pattern."""
    return (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", f"{LIKE_ESCAPE}%")
        .replace("_", f"{LIKE_ESCAPE}_")
    )


def comment_counts() -> Any:
    """Subquery of ``(blog_id, comments)`` pairs."""
    return (
        select(CommentDB.blog_id, func.count(CommentDB.id).label("comments"))
        .group_by(CommentDB.blog_id)
        .subquery("comment_counts")
    )


def display_name(user: UserDB | None, profile: UserProfileDB | None) -> str:
    """Profile full name when both parts are set, else the account name."""
    if profile and profile.first_name and profile.last_name:
        return f"{profile.first_name} {profile.last_name}"
    return user.name if user else ""


def to_blog_out(
    blog: BlogDB,
    user: UserDB | None,
    profile: UserProfileDB | None,
    comments: int,
) -> BlogOut:
    """
    Assemble the list/detail view of a post.

    Args:
        blog: Post row
        user: Author row, if it still exists
        profile: Author's profile row, if any
        comments: Number of comments on the post

    Returns:
        BlogOut: Response model
    """
    author = (
        AuthorOut(id=user.id, email=user.email, name=user.name, image=user.profile_image)
        if user
        else None
    )
    author_profile = (
        AuthorProfileOut(
            first_name=profile.first_name,
            last_name=profile.last_name,
            avatar=profile.avatar,
        )
        if profile
        else None
    )
    return BlogOut(
        id=blog.id,
        title=blog.title,
        image=blog.image,
        content=blog.content,
        tags=blog.tags or [],
        author_id=blog.author_id,
        order_id=blog.order_id,
        created_at=blog.created_at,
        updated_at=blog.updated_at,
        author=author,
        author_profile=author_profile,
        comments=comments,
    )


class BlogRepository(BaseRepository[BlogDB]):
    """
    Repository for Blog database operations.

    Read methods return response models assembled from joined rows; write
    methods return the committed ``BlogDB``.
    """

    model = BlogDB

    def _joined(self) -> Select:
        counts = comment_counts()
        return (
            select(BlogDB, UserDB, UserProfileDB, func.coalesce(counts.c.comments, 0))
            .outerjoin(UserDB, UserDB.id == BlogDB.author_id)
            .outerjoin(UserProfileDB, UserProfileDB.user_id == UserDB.id)
            .outerjoin(counts, counts.c.blog_id == BlogDB.id)
        )

    def _has_tag(self, tag: str) -> ColumnElement[bool]:
        """
        Array containment on ``tags``.

        PostgreSQL uses the JSONB ``@>`` operator (GIN indexed); other
        backends expand the JSON array with ``json_each``.
        """
        if self.session.bind.dialect.name == "postgresql":
            return type_coerce(BlogDB.tags, JSONB).contains([tag])
        elements = func.json_each(BlogDB.tags).table_valued("value")
        return exists(select(1).select_from(elements).where(elements.c.value == tag))

    def _filters(
        self,
        tag: str | None,
        author: int | None,
        search: str | None,
    ) -> list[ColumnElement[bool]]:
        filters: list[ColumnElement[bool]] = []
        if tag:
            filters.append(self._has_tag(tag))
        if author is not None:
            filters.append(BlogDB.author_id == author)
        if search:
            pattern = f"%{escape_like(search)}%"
            filters.append(
                or_(
                    BlogDB.title.ilike(pattern, escape=LIKE_ESCAPE),
                    BlogDB.content.ilike(pattern, escape=LIKE_ESCAPE),
                ),
            )
        return filters

    async def list_blogs(
        self,
        page: int,
        limit: int,
        tag: str | None = None,
        author: int | None = None,
        search: str | None = None,
    ) -> tuple[list[BlogOut], int]:
        """
        Page through posts, newest first.

        Args:
            page: 1-based page number
            limit: Page size
            tag: Only posts whose tags contain this value
            author: Only posts by this author id
            search: Case-insensitive substring of title or content

        Returns:
            tuple[list[BlogOut], int]: The page and the total number of matches
        """
        filters = self._filters(tag, author, search)

        total = await self.session.execute(
            select(func.count()).select_from(BlogDB).where(*filters),
        )
        rows = await self.session.execute(
            self._joined()
            .where(*filters)
            .order_by(BlogDB.created_at.desc(), BlogDB.id.desc())
            .offset((page - 1) * limit)
            .limit(limit),
        )
        blogs = [to_blog_out(*row) for row in rows.all()]
        return blogs, total.scalar() or 0

    async def get_detail(self, blog_id: int) -> BlogOut | None:
        result = await self.session.execute(self._joined().where(BlogDB.id == blog_id))
        row = result.first()
        return to_blog_out(*row) if row else None

    async def next_order_id(self) -> int:
        result = await self.session.execute(select(func.coalesce(func.max(BlogDB.order_id), 0)))
        return (result.scalar() or 0) + 1

    async def create(self, blog: BlogCreate, author_id: int) -> BlogDB:
        """
        Create a post appended to the end of the manual order.

        Args:
            blog: Validated creation payload
            author_id: Id of the owner creating the post

        Returns:
            BlogDB: Committed post
        """
        db_blog = BlogDB(
            author_id=author_id,
            title=blog.title,
            content=blog.content,
            tags=blog.tags,
            image=blog.image,
            order_id=await self.next_order_id(),
        )
        return await self.save(db_blog)

    async def update(self, blog: BlogDB, changes: dict[str, Any]) -> BlogDB:
        if changes:
            changes = {**changes, "updated_at": utc_now()}
        return await self.assign(blog, changes)

    async def ordered(self) -> list[OrderedBlogOut]:
        """Every post by manual order; unordered posts last, ties broken by id."""
        result = await self.session.execute(
            select(BlogDB.id, BlogDB.title, BlogDB.order_id).order_by(
                BlogDB.order_id.is_(None),
                BlogDB.order_id,
                BlogDB.id,
            ),
        )
        return [
            OrderedBlogOut(id=blog_id, title=title, order_id=order_id)
            for blog_id, title, order_id in result.all()
        ]

    async def missing_ids(self, ids: list[int]) -> list[int]:
        """Ids from ``ids`` that have no post."""
        result = await self.session.execute(select(BlogDB.id).where(BlogDB.id.in_(ids)))
        found = set(result.scalars().all())
        return sorted(set(ids) - found)

    async def set_order(self, blog_id: int, order_id: int) -> bool:
        """
        Write one post's ``order_id`` and commit.

        Returns:
            bool: False when no row matched
        """
        try:
            result = await self.session.execute(
                update(BlogDB).where(BlogDB.id == blog_id).values(order_id=order_id),
            )
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(detail=f"Failed to reorder blog {blog_id}: {e}") from e
        return result.rowcount > 0

    async def recent(self, limit: int) -> list[RecentPostOut]:
        """Newest posts with author display details and comment counts."""
        rows = await self.session.execute(
            self._joined().order_by(BlogDB.created_at.desc(), BlogDB.id.desc()).limit(limit),
        )
        posts = []
        for blog, user, profile, comments in rows.all():
            posts.append(
                RecentPostOut(
                    id=blog.id,
                    title=blog.title,
                    content=blog.content,
                    tags=blog.tags or [],
                    author_id=blog.author_id,
                    created_at=blog.created_at,
                    updated_at=blog.updated_at,
                    comments=comments,
                    author=RecentAuthorOut(
                        id=blog.author_id,
                        email=user.email if user else "",
                        name=display_name(user, profile),
                        avatar=profile.avatar if profile else None,
                        profile_image=user.profile_image if user else None,
                    ),
                    image=blog.image,
                ),
            )
        return posts

    async def popular_tags(self, limit: int) -> list[TagCount]:
        """Most used tags, ties kept in first-seen order."""
        result = await self.session.execute(select(BlogDB.tags).order_by(BlogDB.id))
        counter: Counter[str] = Counter()
        for tags in result.scalars().all():
            counter.update(tags or [])
        return [TagCount(tag=tag, count=count) for tag, count in counter.most_common(limit)]
