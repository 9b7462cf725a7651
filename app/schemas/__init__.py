from app.schemas.auth import (
    AuthOut,
    LoginRequest,
    RegisterRequest,
    ResendOTPRequest,
    TokenData,
    UserOut,
    VerifyOTPRequest,
)
from app.schemas.blog import (
    AuthorOut,
    AuthorProfileOut,
    BlogCreate,
    BlogOut,
    BlogUpdate,
    OrderedBlogOut,
    RecentAuthorOut,
    RecentPostOut,
    ReorderItem,
    ReorderRequest,
    ReorderResult,
    StatsOut,
    TagCount,
)
from app.schemas.comment import CommentCreate, CommentOut, CommentUserOut, CommentUserProfileOut
from app.schemas.common import CamelModel, Envelope, Pagination, UTCDateTime, ok

__all__ = [
    "AuthOut",
    "AuthorOut",
    "AuthorProfileOut",
    "BlogCreate",
    "BlogOut",
    "BlogUpdate",
    "CamelModel",
    "CommentCreate",
    "CommentOut",
    "CommentUserOut",
    "CommentUserProfileOut",
    "Envelope",
    "LoginRequest",
    "OrderedBlogOut",
    "Pagination",
    "RecentAuthorOut",
    "RecentPostOut",
    "RegisterRequest",
    "ReorderItem",
    "ReorderRequest",
    "ReorderResult",
    "ResendOTPRequest",
    "StatsOut",
    "TagCount",
    "TokenData",
    "UTCDateTime",
    "UserOut",
    "VerifyOTPRequest",
    "ok",
]
