"""
Cache key builders for the application.

This module contains functions to generate consistent cache keys for the
blog read paths, so that routes and services coordinate cache invalidation
on the same names.
"""

from urllib.parse import urlencode

BLOG_NAMESPACE = "blogs"
BLOG_STATS_KEY = "blog_stats"
BLOG_LIST_PREFIX = "blogs_list_"
BLOG_LIST_PATTERN = f"{BLOG_LIST_PREFIX}*"


def blog_list_key(
    page: int,
    limit: int,
    tag: str | None = None,
    author: int | None = None,
    search: str | None = None,
) -> str:
    """
    Generate cache key for a list query.

    Filters are encoded as a query string in fixed order. An absent filter
    has no segment, and values are percent-encoded, so no filter value can
    reproduce another query's key or inject glob characters.

    Examples:
        >>> blog_list_key(1, 10, tag="any")
        'blogs_list_page=1&limit=10&tag=any'
    """
    params: list[tuple[str, object]] = [("page", page), ("limit", limit)]
    params += [
        (name, value)
        for name, value in (("tag", tag), ("author", author), ("search", search))
        if value is not None and value != ""
    ]
    return BLOG_LIST_PREFIX + urlencode(params)


def blog_id_key(blog_id: int) -> str:
    """Generate cache key for blog by ID."""
    return f"blog_by_id_{blog_id}"


def blog_write_keys(blog_id: int | None = None) -> list[str]:
    """Keys a write to ``blog_id`` makes stale, besides the list pattern."""
    keys = [BLOG_STATS_KEY]
    if blog_id is not None:
        keys.append(blog_id_key(blog_id))
    return keys
