"""User repository for database operations."""

from datetime import datetime

from sqlalchemy import delete, select

from app.models import UserDB
from app.repositories.base import BaseRepository
from app.utils.helpers import utc_now


class UserRepository(BaseRepository[UserDB]):
    """Repository for user accounts."""

    model = UserDB

    async def get_by_email(self, email: str) -> UserDB | None:
        """
        Get user by email.

        Args:
            email: Email to search for

        Returns:
            UserDB | None: User if found, None otherwise
        """
        return await self.get_by_field("email", email)

    async def create(
        self,
        email: str,
        password_hash: str,
        name: str,
        profile_image: str | None,
    ) -> UserDB:
        """
        Create an unverified account.

        Raises:
            DuplicateEntryError: If the email is already registered
        """
        return await self.save(
            UserDB(
                email=email,
                password_hash=password_hash,
                name=name,
                profile_image=profile_image,
                is_verified=False,
            ),
        )

    async def mark_verified(self, user: UserDB) -> UserDB:
        return await self.assign(user, {"is_verified": True, "updated_at": utc_now()})

    async def update_password_hash(self, user: UserDB, password_hash: str) -> UserDB:
        return await self.assign(user, {"password_hash": password_hash, "updated_at": utc_now()})

    async def delete_unverified_before(self, cutoff: datetime) -> list[str]:
        """
        Delete accounts still unverified that were created before ``cutoff``.

        Args:
            cutoff: Creation time threshold

        Returns:
            list[str]: Emails of the removed accounts
        """
        result = await self.session.execute(
            select(UserDB.email).where(
                UserDB.is_verified.is_(False),
                UserDB.created_at < cutoff,
            ),
        )
        emails = list(result.scalars().all())
        if emails:
            await self.session.execute(delete(UserDB).where(UserDB.email.in_(emails)))
            await self.commit()
        return emails
