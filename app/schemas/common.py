"""
Shared response building blocks.

Every endpoint answers with the same envelope:
``{success, data?, error?, message?, pagination?}``. Payloads are dumped with
camelCase aliases so cached bodies and fresh bodies serialize identically.
"""

from datetime import datetime
from typing import Annotated, Any

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from app.utils.helpers import as_utc, total_pages

# SQLite hands back naive datetimes; normalize so both backends emit "Z" timestamps.
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base model exposing camelCase aliases while accepting snake_case names."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )

    def dump(self) -> dict[str, Any]:
        """JSON-ready dict using aliases; fields never set are left out."""
        return self.model_dump(mode="json", by_alias=True, exclude_unset=True)


class Pagination(CamelModel):
    """Page metadata attached to list envelopes."""

    page: int = Field(ge=1)
    limit: int = Field(ge=1)
    total: int = Field(ge=0)
    total_pages: int = Field(ge=0)

    @classmethod
    def build(cls, page: int, limit: int, total: int) -> "Pagination":
        return cls(page=page, limit=limit, total=total, total_pages=total_pages(total, limit))


class Envelope(CamelModel):
    """Uniform response wrapper."""

    success: bool = True
    data: Any = None
    error: str | None = None
    message: str | None = None
    pagination: Pagination | None = None


def ok(
    data: Any = None,
    message: str | None = None,
    pagination: Pagination | None = None,
) -> dict[str, Any]:
    """
    Build a success envelope.

    Args:
        data: Payload; pydantic models are dumped with aliases.
        message: Optional human readable message.
        pagination: Optional page metadata.

    Returns:
        JSON-ready envelope dict.
    """
    fields: dict[str, Any] = {"success": True}
    if data is not None:
        fields["data"] = _jsonable(data)
    if message is not None:
        fields["message"] = message
    if pagination is not None:
        fields["pagination"] = pagination
    return Envelope(**fields).dump()


def _jsonable(data: Any) -> Any:
    if isinstance(data, CamelModel):
        return data.dump()
    if isinstance(data, list):
        return [_jsonable(item) for item in data]
    if isinstance(data, dict):
        return {key: _jsonable(value) for key, value in data.items()}
    return data
