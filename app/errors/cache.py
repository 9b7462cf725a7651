"""
Cache errors.

None of these reach a client: the caching decorators log them and fall back
to the database, so every subclass keeps the masked 500 default.
"""

from app.errors.base import BaseAppError


class CacheExceptionError(BaseAppError):
    def __init__(self, detail: str = "Cache operation failed") -> None:
        super().__init__(detail)


class CacheConnectionError(CacheExceptionError):
    """Backend unreachable or a command failed in transit."""

    def __init__(self, detail: str = "Cache backend unavailable") -> None:
        super().__init__(detail)


class CacheKeyError(CacheExceptionError):
    """Read, write or delete of a key failed."""

    def __init__(self, detail: str = "Cache key operation failed") -> None:
        super().__init__(detail)


class CacheSerializationError(CacheExceptionError):
    def __init__(self, detail: str = "Value is not JSON serializable") -> None:
        super().__init__(detail)


class CacheDeserializationError(CacheExceptionError):
    def __init__(self, detail: str = "Cached value is not valid JSON") -> None:
        super().__init__(detail)
