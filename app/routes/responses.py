"""OpenAPI response examples shared by the routers."""

from typing import Any


def envelope_example(description: str, error: str, **extra: Any) -> dict[str, Any]:
    return {
        "description": description,
        "content": {
            "application/json": {"example": {"success": False, "error": error, **extra}},
        },
    }


BAD_REQUEST = envelope_example("Bad request", "title: Field required")
UNAUTHORIZED = envelope_example("Unauthorized", "Unauthorized")
FORBIDDEN = envelope_example("Forbidden", "Forbidden - Owner access required")
BLOG_NOT_FOUND = envelope_example("Not found", "Blog not found")
RATE_LIMITED = envelope_example("Rate limit exceeded", "Rate limit exceeded: 20 per 1 minute")
