from app.managers.cache_manager import CacheManager
from app.managers.rate_limiter import (
    close_limiter,
    get_identifier,
    limiter,
    rate_limit_exceeded_handler,
    tiered,
)

__all__ = [
    "CacheManager",
    "close_limiter",
    "get_identifier",
    "limiter",
    "rate_limit_exceeded_handler",
    "tiered",
]
