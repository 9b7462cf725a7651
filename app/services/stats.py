"""Dashboard statistics assembled from independent queries run concurrently."""

from asyncio import gather

from app.configs.settings import POPULAR_TAGS_COUNT, RECENT_POSTS_COUNT
from app.db import transaction
from app.repositories import BlogRepository, CommentRepository
from app.schemas.blog import RecentPostOut, StatsOut, TagCount
from app.services.cleanup import SessionFactory


class StatsService:
    """
    Builds the stats payload.

    Every sub-query opens its own session; an ``AsyncSession`` must not be
    shared between concurrently running tasks.
    """

    def __init__(self, session_factory: SessionFactory = transaction) -> None:
        self._session_factory = session_factory

    async def _total_posts(self) -> int:
        async with self._session_factory() as session:
            return await BlogRepository(session).count()

    async def _total_comments(self) -> int:
        async with self._session_factory() as session:
            return await CommentRepository(session).count()

    async def _recent_posts(self) -> list[RecentPostOut]:
        async with self._session_factory() as session:
            return await BlogRepository(session).recent(RECENT_POSTS_COUNT)

    async def _popular_tags(self) -> list[TagCount]:
        async with self._session_factory() as session:
            return await BlogRepository(session).popular_tags(POPULAR_TAGS_COUNT)

    async def collect(self) -> StatsOut:
        total_posts, total_comments, recent_posts, popular_tags = await gather(
            self._total_posts(),
            self._total_comments(),
            self._recent_posts(),
            self._popular_tags(),
        )
        return StatsOut(
            total_posts=total_posts,
            total_comments=total_comments,
            recent_posts=recent_posts,
            popular_tags=popular_tags,
        )
