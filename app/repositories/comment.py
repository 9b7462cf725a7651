"""Comment repository for database operations."""

from sqlalchemy import Select, func, select

from app.models import CommentDB, UserDB, UserProfileDB
from app.repositories.base import BaseRepository
from app.schemas.comment import CommentOut, CommentUserOut, CommentUserProfileOut


class CommentRepository(BaseRepository[CommentDB]):
    """Repository for comments on blog posts."""

    model = CommentDB

    @staticmethod
    def _joined() -> Select:
        return (
            select(CommentDB, UserDB, UserProfileDB)
            .outerjoin(UserDB, UserDB.id == CommentDB.user_id)
            .outerjoin(UserProfileDB, UserProfileDB.user_id == UserDB.id)
        )

    async def list_for_blog(
        self,
        blog_id: int,
        page: int,
        limit: int,
    ) -> tuple[list[CommentOut], int]:
        """
        Page through a post's comments, newest first.

        Args:
            blog_id: Parent post id
            page: 1-based page number
            limit: Page size

        Returns:
            tuple[list[CommentOut], int]: The page and the total comment count
        """
        total = await self.session.execute(
            select(func.count()).select_from(CommentDB).where(CommentDB.blog_id == blog_id),
        )
        rows = await self.session.execute(
            self._joined()
            .where(CommentDB.blog_id == blog_id)
            .order_by(CommentDB.created_at.desc(), CommentDB.id.desc())
            .offset((page - 1) * limit)
            .limit(limit),
        )
        comments = [self.to_out(*row) for row in rows.all()]
        return comments, total.scalar() or 0

    async def create(self, blog_id: int, user_id: int, content: str) -> CommentDB:
        return await self.save(
            CommentDB(blog_id=blog_id, user_id=user_id, content=content),
        )

    async def get_out(self, comment_id: int) -> CommentOut | None:
        result = await self.session.execute(self._joined().where(CommentDB.id == comment_id))
        row = result.first()
        return self.to_out(*row) if row else None

    async def get_in_blog(self, blog_id: int, comment_id: int) -> CommentDB | None:
        result = await self.session.execute(
            select(CommentDB).where(CommentDB.id == comment_id, CommentDB.blog_id == blog_id),
        )
        return result.scalar_one_or_none()

    @staticmethod
    def to_out(
        comment: CommentDB,
        user: UserDB | None,
        profile: UserProfileDB | None,
    ) -> CommentOut:
        return CommentOut(
            id=comment.id,
            content=comment.content,
            user_id=comment.user_id,
            blog_id=comment.blog_id,
            created_at=comment.created_at,
            user=CommentUserOut(
                id=user.id,
                email=user.email,
                name=user.name,
                is_verified=user.is_verified,
                profile_image=user.profile_image,
            )
            if user
            else None,
            user_profile=CommentUserProfileOut(
                first_name=profile.first_name,
                last_name=profile.last_name,
                avatar=profile.avatar,
            )
            if profile
            else None,
        )
