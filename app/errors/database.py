"""Persistence errors raised by the repository layer."""

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from app.errors.base import BaseAppError


class DatabaseError(BaseAppError):
    """Any database failure; masked as a 500 unless a subclass says otherwise."""

    def __init__(
        self,
        detail: str = "Database error",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail, status_code)


class DuplicateEntryError(DatabaseError):
    """Unique constraint violation, e.g. a second account for one email."""

    def __init__(self, detail: str = "Record already exists") -> None:
        super().__init__(detail, HTTP_400_BAD_REQUEST)


class RecordNotFoundError(DatabaseError):
    """Looked-up row does not exist; ``detail`` names the entity."""

    def __init__(self, detail: str = "Record not found") -> None:
        super().__init__(detail, HTTP_404_NOT_FOUND)


class TransactionError(DatabaseError):
    def __init__(self, detail: str = "Transaction failed") -> None:
        super().__init__(detail)
