from app.configs.logger import file_logger
from app.configs.settings import (
    CONFIG_MAP,
    CacheConfig,
    LimiterConfig,
    pool_kwargs,
    settings,
)

__all__ = [
    "CacheConfig",
    "LimiterConfig",
    "file_logger",
    "pool_kwargs",
    "settings",
    "CONFIG_MAP",
]
