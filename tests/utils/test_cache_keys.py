# tests/utils/test_cache_keys.py
"""Tests for app/utils/cache_keys.py module."""

from fnmatch import fnmatch

import pytest

from app.utils.cache_keys import (
    BLOG_LIST_PATTERN,
    BLOG_STATS_KEY,
    blog_id_key,
    blog_list_key,
    blog_write_keys,
)


def test_list_key_includes_every_filter() -> None:
    assert blog_list_key(1, 10) == "blogs_list_page=1&limit=10"
    assert blog_list_key(2, 5, tag="go", author=3, search="rust") == (
        "blogs_list_page=2&limit=5&tag=go&author=3&search=rust"
    )


def test_empty_search_matches_absent_search() -> None:
    assert blog_list_key(1, 10, search="") == blog_list_key(1, 10)


@pytest.mark.parametrize(
    ("left", "right"),
    [
        ({"tag": "any"}, {}),
        ({"search": "any"}, {}),
        ({"tag": "a_b"}, {"tag": "a", "search": "b"}),
        ({"tag": "a&search=b"}, {"tag": "a", "search": "b"}),
        ({"tag": "x", "author": 1}, {"tag": "x&author=1"}),
    ],
)
def test_distinct_queries_never_share_a_key(left: dict, right: dict) -> None:
    assert blog_list_key(1, 10, **left) != blog_list_key(1, 10, **right)


def test_glob_characters_are_encoded() -> None:
    key = blog_list_key(1, 10, search="*[a]?")
    assert not any(char in key.removeprefix("blogs_list_") for char in "*[]?")


def test_list_keys_match_pattern() -> None:
    assert fnmatch(blog_list_key(3, 20, tag="python"), BLOG_LIST_PATTERN)
    assert not fnmatch(blog_id_key(1), BLOG_LIST_PATTERN)


def test_write_keys() -> None:
    assert blog_write_keys() == [BLOG_STATS_KEY]
    assert blog_write_keys(9) == [BLOG_STATS_KEY, "blog_by_id_9"]
