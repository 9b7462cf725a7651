"""Base repository for database operations."""

from datetime import datetime
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel

from app.errors.database import (
    DatabaseError,
    DuplicateEntryError,
    RecordNotFoundError,
    TransactionError,
)

type FilterValue = str | int | float | bool | datetime | None


def _integrity_error(e: IntegrityError) -> DatabaseError:
    """Map a constraint violation to the matching application error."""
    reason = str(e.orig) if e.orig else str(e)
    lowered = reason.lower()
    if "unique" in lowered or "duplicate" in lowered:
        return DuplicateEntryError(detail=reason)
    return DatabaseError(detail=f"Constraint violated: {reason}")


class BaseRepository[ModelT: SQLModel]:
    """
    Shared lookups and writes for one SQLModel table.

    Every write commits before returning, so the cache-busting decorator
    wrapped around a route only runs once the change is durable.

    Attributes:
        model: The SQLModel table class.
        id_field: Primary key column name.
    """

    model: type[ModelT]
    id_field: str = "id"

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    @property
    def _id_column(self) -> Any:
        return getattr(self.model, self.id_field)

    async def get_by_id(self, record_id: int) -> ModelT | None:
        result = await self.session.execute(select(self.model).where(self._id_column == record_id))
        return result.scalar_one_or_none()

    async def get_by_field(self, field_name: str, value: FilterValue) -> ModelT | None:
        """
        First row whose ``field_name`` equals ``value``.

        Args:
            field_name: Column attribute on the model.
            value: Value to match.

        Returns:
            ModelT | None: The row, or None.
        """
        column = getattr(self.model, field_name)
        result = await self.session.execute(select(self.model).where(column == value).limit(1))
        return result.scalar_one_or_none()

    async def get_or_raise(self, record_id: int, detail: str | None = None) -> ModelT:
        """
        Row with ``record_id``.

        Raises:
            RecordNotFoundError: With ``detail`` when the row does not exist.
        """
        if record := await self.get_by_id(record_id):
            return record
        raise RecordNotFoundError(detail=detail or f"{self.model.__name__} {record_id} not found")

    async def exists(self, record_id: int) -> bool:
        result = await self.session.execute(select(1).where(self._id_column == record_id).limit(1))
        return result.scalar_one_or_none() is not None

    async def count(self) -> int:
        result = await self.session.execute(select(func.count()).select_from(self.model))
        return result.scalar() or 0

    async def delete(self, record: ModelT) -> None:
        await self.session.delete(record)
        await self.commit()

    async def commit(self) -> None:
        """
        Commit pending changes.

        Raises:
            TransactionError: If the commit fails; the session is rolled back.
        """
        try:
            await self.session.commit()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise TransactionError(detail=f"Commit failed: {e}") from e

    async def save(self, record: ModelT) -> ModelT:
        """
        Insert or update ``record``, commit, and reload server defaults.

        Raises:
            DuplicateEntryError: On a unique constraint violation.
            DatabaseError: On any other database failure.
        """
        self.session.add(record)
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise _integrity_error(e) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(detail=f"Failed to save {self.model.__name__}: {e}") from e
        await self.session.refresh(record)
        return record

    async def assign(self, record: ModelT, values: dict[str, Any]) -> ModelT:
        """Set ``values`` on ``record`` and save it."""
        for key, value in values.items():
            setattr(record, key, value)
        return await self.save(record)
