from pydantic import Field, field_validator

from app.configs.settings import MAX_COMMENT_LENGTH
from app.schemas.common import CamelModel, UTCDateTime


class CommentCreate(CamelModel):
    """Comment creation payload."""

    content: str = Field(
        ...,
        min_length=1,
        max_length=MAX_COMMENT_LENGTH,
        description="Comment text",
        examples=["Great write-up, thanks!"],
    )

    @field_validator("content")
    @classmethod
    def not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            mssg = "Comment content is required"
            raise ValueError(mssg)
        return v


class CommentUserOut(CamelModel):
    id: int
    email: str
    name: str
    is_verified: bool
    profile_image: str | None


class CommentUserProfileOut(CamelModel):
    first_name: str | None = None
    last_name: str | None = None
    avatar: str | None = None


class CommentOut(CamelModel):
    """Comment with its author and the author's profile."""

    id: int
    content: str
    user_id: int
    blog_id: int
    created_at: UTCDateTime
    user: CommentUserOut | None
    user_profile: CommentUserProfileOut | None
