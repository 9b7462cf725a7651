from datetime import UTC, datetime
from math import ceil

from fastapi import Request
from fastapi.routing import APIRoute
from starlette.routing import Match, Route


def host(request: Request) -> str:
    """Client IP, or ``"unknown"`` when the transport does not report one."""
    return request.client.host if request.client else "unknown"


def utc_now() -> datetime:
    return datetime.now(UTC)


def today_str() -> str:
    """Current UTC time as ``YYYY-MM-DD HH:MM:SS``."""
    return utc_now().strftime("%Y-%m-%d %H:%M:%S")


def as_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes read back from backends without tz support."""
    return dt.replace(tzinfo=UTC) if dt.tzinfo is None else dt


def total_pages(total: int, limit: int) -> int:
    return ceil(total / limit) if limit else 0


def get_summary(request: Request) -> str | None:
    """OpenAPI summary (or plain route name) of the route serving ``request``."""
    scope = request.scope
    for route in scope["app"].routes:
        if not isinstance(route, Route) or route.matches(scope)[0] != Match.FULL:
            continue
        return route.summary if isinstance(route, APIRoute) else route.name
    return None
