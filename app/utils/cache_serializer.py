"""
orjson codec for cached envelopes.

Cached bodies are already JSON-ready dicts built by ``ok()``, so a value read
back from the cache re-serializes to the same bytes the first response had.
"""

from logging import getLogger
from typing import Any

from orjson import OPT_NON_STR_KEYS, JSONDecodeError
from orjson import dumps as orjson_dumps
from orjson import loads as orjson_loads

from app.configs import file_logger
from app.errors import CacheDeserializationError, CacheSerializationError

logger = file_logger(getLogger(__name__))


def serialize(value: object) -> str:
    """
    Encode ``value`` as a JSON string; unknown types fall back to ``str()``.

    Raises:
        CacheSerializationError: If orjson rejects the value.
    """
    try:
        return orjson_dumps(value, default=str, option=OPT_NON_STR_KEYS).decode()
    except TypeError as e:
        logger.exception(f"Cannot cache value of type {type(value).__name__}")
        raise CacheSerializationError from e


def deserialize(value: str) -> Any:
    """
    Decode a cached JSON string.

    Raises:
        CacheDeserializationError: If the stored text is not valid JSON.
    """
    try:
        return orjson_loads(value)
    except (JSONDecodeError, TypeError) as e:
        logger.exception("Cached entry is not valid JSON")
        raise CacheDeserializationError from e
