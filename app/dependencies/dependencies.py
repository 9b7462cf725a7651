# app/dependencies/dependencies.py

"""Application dependencies: sessions, repositories, services and auth guards."""

from dataclasses import dataclass
from typing import Annotated

from fastapi import Depends, Query, Request
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.clients.email_client import EmailClient
from app.configs.settings import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT
from app.db import get_session
from app.errors import (
    ForbiddenError,
    InvalidTokenError,
    UserAuthenticationError,
    VerificationRequiredError,
)
from app.managers.token_manager import decode_access_token, is_owner_email
from app.models import UserDB
from app.repositories import BlogRepository, CommentRepository, OTPRepository, UserRepository
from app.schemas import TokenData
from app.services import AuthService, OTPService, ReorderService, StatsService

ACCESS_TOKEN_COOKIE = "access_token"

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)


def get_token(
    request: Request,
    bearer: Annotated[str | None, Depends(oauth2_scheme)],
) -> str | None:
    """
    Read the access token from the ``Authorization`` header or the cookie.

    Parameters
    ----------
    request : Request
        Current request.
    bearer : str | None
        Token from ``Authorization: Bearer``, if present.

    Returns
    -------
    str | None
        Raw token, or None when the request carries no credentials.
    """
    return bearer or request.cookies.get(ACCESS_TOKEN_COOKIE) or None


def get_token_data(token: Annotated[str | None, Depends(get_token)]) -> TokenData:
    """
    Decoded claims of the request's token.

    Raises
    ------
    UserAuthenticationError
        If no token is supplied.
    InvalidTokenError
        If the token cannot be decoded or has expired.
    """
    if not token:
        raise UserAuthenticationError("Unauthorized")
    token_data = decode_access_token(token)
    if token_data is None:
        raise InvalidTokenError
    return token_data


async def _load_user(token: str, session: AsyncSession) -> UserDB | None:
    token_data = decode_access_token(token)
    if not token_data:
        return None
    return await UserRepository(session).get_by_id(token_data.user_id)


async def get_current_user(
    token: Annotated[str | None, Depends(get_token)],
    session: Annotated[AsyncSession, Depends(get_session)],
) -> UserDB:
    """
    Get current authenticated user from token claims.

    Parameters
    ----------
    token : str | None
        Bearer or cookie token.
    session : AsyncSession
        Database session.

    Returns
    -------
    UserDB
        Current authenticated user.

    Raises
    ------
    UserAuthenticationError
        If no token is supplied or its user no longer exists.
    InvalidTokenError
        If the token cannot be decoded or has expired.
    """
    if not token:
        raise UserAuthenticationError("Unauthorized")

    if decode_access_token(token) is None:
        raise InvalidTokenError

    user = await _load_user(token, session)
    if not user:
        raise UserAuthenticationError("Unauthorized")
    return user


async def get_verified_user(
    user: Annotated[UserDB, Depends(get_current_user)],
) -> UserDB:
    """
    Get current authenticated and verified user.

    Raises
    ------
    VerificationRequiredError
        If user email is not verified.
    """
    if not user.is_verified:
        raise VerificationRequiredError("Please verify your email to post comments")
    return user


async def require_owner(
    user: Annotated[UserDB, Depends(get_current_user)],
) -> UserDB:
    """
    Get current user, requiring the site owner.

    Raises
    ------
    ForbiddenError
        If the user is not the owner.
    """
    if not is_owner_email(user.email):
        raise ForbiddenError("Forbidden - Owner access required")
    return user


CurrentUserDep = Annotated[UserDB, Depends(get_current_user)]
VerifiedUserDep = Annotated[UserDB, Depends(get_verified_user)]
OwnerDep = Annotated[UserDB, Depends(require_owner)]
TokenDataDep = Annotated[TokenData, Depends(get_token_data)]

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def get_blog_repository(session: SessionDep) -> BlogRepository:
    """
    Resolve the `BlogRepository` dependency.

    Parameters
    ----------
    session : AsyncSession
        Database session.

    Returns
    -------
    BlogRepository
        Repository instance bound to the session.
    """
    return BlogRepository(session)


def get_comment_repository(session: SessionDep) -> CommentRepository:
    return CommentRepository(session)


def get_user_repository(session: SessionDep) -> UserRepository:
    return UserRepository(session)


BlogRepoDep = Annotated[BlogRepository, Depends(get_blog_repository)]
CommentRepoDep = Annotated[CommentRepository, Depends(get_comment_repository)]
UserRepoDep = Annotated[UserRepository, Depends(get_user_repository)]


def get_email_client() -> EmailClient:
    return EmailClient()


EmailDep = Annotated[EmailClient, Depends(get_email_client)]


def get_auth_service(session: SessionDep, email_client: EmailDep) -> AuthService:
    """Auth service whose repositories share the request session."""
    return AuthService(
        UserRepository(session),
        OTPService(OTPRepository(session)),
        email_client,
    )


def get_reorder_service(repo: BlogRepoDep) -> ReorderService:
    return ReorderService(repo)


def get_stats_service() -> StatsService:
    return StatsService()


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
ReorderServiceDep = Annotated[ReorderService, Depends(get_reorder_service)]
StatsServiceDep = Annotated[StatsService, Depends(get_stats_service)]


@dataclass(frozen=True)
class PageQuery:
    """
    Query container for pagination.

    Parameters
    ----------
    page : int
        1-based page number.
    limit : int
        Page size.
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT


def get_page_query(
    page: Annotated[int, Query(ge=1, description="Page number, starting at 1")] = 1,
    limit: Annotated[
        int,
        Query(ge=1, le=MAX_PAGE_LIMIT, description="Maximum number of records to return"),
    ] = DEFAULT_PAGE_LIMIT,
) -> PageQuery:
    return PageQuery(page=page, limit=limit)


PageQueryDep = Annotated[PageQuery, Depends(get_page_query)]


@dataclass(frozen=True)
class BlogListQuery:
    """
    Query container for blog listing and filters.

    Parameters
    ----------
    page : int
        1-based page number.
    limit : int
        Page size.
    tag : str | None
        Only posts carrying this tag.
    author : int | None
        Only posts by this author.
    search : str | None
        Case-insensitive substring of title or content.
    """

    page: int = 1
    limit: int = DEFAULT_PAGE_LIMIT
    tag: str | None = None
    author: int | None = None
    search: str | None = None


def get_blog_list_query(
    page: PageQueryDep,
    tag: Annotated[str | None, Query(description="Tag filter")] = None,
    author: Annotated[int | None, Query(description="Author ID filter")] = None,
    search: Annotated[str | None, Query(description="Search in title and content")] = None,
) -> BlogListQuery:
    """
    Dependency to construct `BlogListQuery` from query parameters.

    Returns
    -------
    BlogListQuery
        Aggregated query parameters object.
    """
    return BlogListQuery(
        page=page.page,
        limit=page.limit,
        tag=tag or None,
        author=author,
        search=(search.strip() or None) if search else None,
    )


BlogQueryListDep = Annotated[BlogListQuery, Depends(get_blog_list_query)]
