"""
Manual ordering of blog posts.

A batch of ``(id, newOrder)`` pairs is validated as a whole, then each pair is
written in its own transaction. Writes fan out concurrently and are not
rolled back as a group: the outcome lists which ids were updated and which
failed.
"""

from asyncio import gather
from logging import getLogger

from app.configs import file_logger
from app.db import transaction
from app.errors import RecordNotFoundError
from app.repositories import BlogRepository
from app.schemas.blog import ReorderItem, ReorderResult
from app.services.cleanup import SessionFactory

logger = file_logger(getLogger(__name__))


class ReorderService:
    """Validates and applies reorder batches."""

    def __init__(self, repo: BlogRepository, session_factory: SessionFactory = transaction) -> None:
        self.repo = repo
        self._session_factory = session_factory

    async def _set_one(self, item: ReorderItem) -> bool:
        async with self._session_factory() as session:
            return await BlogRepository(session).set_order(item.id, item.new_order)

    async def reorder(self, items: list[ReorderItem]) -> ReorderResult:
        """
        Apply a batch of order changes.

        Args:
            items: Non-empty list with unique ids

        Returns:
            ReorderResult: Ids updated and ids that failed

        Raises:
            RecordNotFoundError: If any id has no post; nothing is written
        """
        missing = await self.repo.missing_ids([item.id for item in items])
        if missing:
            mssg = f"Blog not found: {', '.join(str(blog_id) for blog_id in missing)}"
            raise RecordNotFoundError(detail=mssg)

        outcomes = await gather(*(self._set_one(item) for item in items), return_exceptions=True)

        updated: list[int] = []
        failed: list[int] = []
        for item, outcome in zip(items, outcomes, strict=True):
            if outcome is True:
                updated.append(item.id)
            else:
                if isinstance(outcome, BaseException):
                    logger.error(f"Reorder of blog {item.id} failed: {outcome}")
                failed.append(item.id)

        logger.info(f"Reordered {len(updated)} blogs, {len(failed)} failed")
        return ReorderResult(updated=updated, failed=failed)
