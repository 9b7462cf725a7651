# app/dependencies/__init__.py

from app.dependencies.dependencies import (
    AuthServiceDep,
    BlogListQuery,
    BlogQueryListDep,
    BlogRepoDep,
    CommentRepoDep,
    CurrentUserDep,
    EmailDep,
    OwnerDep,
    PageQuery,
    PageQueryDep,
    ReorderServiceDep,
    StatsServiceDep,
    TokenDataDep,
    UserRepoDep,
    VerifiedUserDep,
    get_current_user,
    get_email_client,
    get_token_data,
    get_verified_user,
    require_owner,
)

__all__ = [
    "AuthServiceDep",
    "BlogListQuery",
    "BlogQueryListDep",
    "BlogRepoDep",
    "CommentRepoDep",
    "CurrentUserDep",
    "EmailDep",
    "OwnerDep",
    "PageQuery",
    "PageQueryDep",
    "ReorderServiceDep",
    "StatsServiceDep",
    "TokenDataDep",
    "UserRepoDep",
    "VerifiedUserDep",
    "get_current_user",
    "get_email_client",
    "get_token_data",
    "get_verified_user",
    "require_owner",
]
