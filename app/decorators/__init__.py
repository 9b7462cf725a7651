from app.decorators.caching import cache_busting, cached
from app.decorators.with_retry import RETRIABLE_EXCEPTIONS, with_retry

__all__ = [
    "cache_busting",
    "cached",
    "with_retry",
    "RETRIABLE_EXCEPTIONS",
]
