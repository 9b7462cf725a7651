# app/routes/comment.py

"""
Comment Routes.

Comments live under their post: ``/api/blogs/{blog_id}/comments``.

Summary
-------
Endpoints include:
  - List a post's comments (paginated, newest first)
  - Add a comment (verified users)
  - Delete a comment (its author or the site owner)

Adding or deleting a comment changes the post's comment count, so both writes
invalidate the post's detail key, every list key and the stats key.
"""

from logging import getLogger
from typing import Annotated, Any

from fastapi import APIRouter, Body, Path, Request
from fastapi.responses import ORJSONResponse
from starlette.responses import Response
from starlette.status import HTTP_201_CREATED

from app.configs import file_logger
from app.decorators import cache_busting
from app.dependencies import (
    BlogRepoDep,
    CommentRepoDep,
    CurrentUserDep,
    PageQueryDep,
    VerifiedUserDep,
)
from app.errors import ForbiddenError, RecordNotFoundError
from app.managers import limiter, tiered
from app.managers.token_manager import is_owner_email
from app.routes.responses import (
    BAD_REQUEST,
    BLOG_NOT_FOUND,
    RATE_LIMITED,
    UNAUTHORIZED,
    envelope_example,
)
from app.schemas import CommentCreate, Pagination, ok
from app.utils.cache_keys import BLOG_LIST_PATTERN, BLOG_NAMESPACE, blog_write_keys

router = APIRouter(prefix="/api/blogs/{blog_id}/comments", tags=["💬 Comments"])

logger = file_logger(getLogger(__name__))

BlogId = Annotated[int, Path(ge=1, description="Parent blog ID")]

COMMENT_EXAMPLE = {
    "id": 7,
    "content": "Great write-up!",
    "userId": 3,
    "blogId": 1,
    "createdAt": "2025-01-02T10:00:00Z",
    "user": {
        "id": 3,
        "email": "reader@example.com",
        "name": "Reader",
        "isVerified": True,
        "profileImage": None,
    },
    "userProfile": None,
}

COMMENT_NOT_FOUND = envelope_example("Not found", "Comment not found")
NOT_VERIFIED = envelope_example(
    "Email not verified",
    "Please verify your email to post comments",
    requiresVerification=True,
)
NOT_YOURS = envelope_example(
    "Forbidden",
    "Forbidden - You can only delete your own comments or if you are the blog owner",
)


async def _ensure_blog(blogs: Any, blog_id: int) -> None:
    if not await blogs.exists(blog_id):
        raise RecordNotFoundError(detail="Blog not found")


@router.get(
    "",
    response_class=ORJSONResponse,
    summary="List comments",
    description="A post's comments, newest first, with each commenter and their profile.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": [COMMENT_EXAMPLE],
                        "pagination": {"page": 1, "limit": 10, "total": 1, "totalPages": 1},
                    },
                },
            },
        },
        400: BAD_REQUEST,
        404: BLOG_NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="comments_list",
)
@limiter.limit(tiered("120/minute", "60/minute"))
async def list_comments(
    request: Request,
    response: Response,
    blog_id: BlogId,
    page: PageQueryDep,
    blogs: BlogRepoDep,
    comments: CommentRepoDep,
) -> dict[str, Any]:
    """
    List comments for a post.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    blog_id : int
        Parent post.
    page : PageQuery
        Page and limit.
    blogs : BlogRepository
        Used to check the post exists.
    comments : CommentRepository
        Repository dependency.

    Returns
    -------
    dict
        Envelope with the page of comments and pagination metadata.

    Raises
    ------
    RecordNotFoundError
        If the post does not exist.
    """
    await _ensure_blog(blogs, blog_id)
    items, total = await comments.list_for_blog(blog_id, page.page, page.limit)
    return ok(items, pagination=Pagination.build(page.page, page.limit, total))


@router.post(
    "",
    response_class=ORJSONResponse,
    status_code=HTTP_201_CREATED,
    summary="Add a comment",
    description="Requires a verified account. Content is trimmed; at most 500 characters.",
    responses={
        201: {
            "content": {
                "application/json": {"example": {"success": True, "data": COMMENT_EXAMPLE}},
            },
        },
        400: BAD_REQUEST,
        401: UNAUTHORIZED,
        403: NOT_VERIFIED,
        404: BLOG_NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="comments_create",
)
@limiter.limit(tiered("30/minute", "10/minute"))
@cache_busting(
    patterns=[BLOG_LIST_PATTERN],
    namespace=BLOG_NAMESPACE,
    key_builder=lambda blog_id, **kw: blog_write_keys(blog_id),
)
async def create_comment(
    request: Request,
    response: Response,
    blog_id: BlogId,
    comment: Annotated[CommentCreate, Body(examples=[{"content": "Great write-up!"}])],
    user: VerifiedUserDep,
    blogs: BlogRepoDep,
    comments: CommentRepoDep,
) -> dict[str, Any]:
    """
    Add a comment to a post.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    blog_id : int
        Parent post.
    comment : CommentCreate
        Comment body.
    user : UserDB
        Authenticated, verified commenter.
    blogs : BlogRepository
        Used to check the post exists.
    comments : CommentRepository
        Repository dependency.

    Returns
    -------
    dict
        Envelope with the new comment.

    Raises
    ------
    RecordNotFoundError
        If the post does not exist.
    """
    await _ensure_blog(blogs, blog_id)
    db_comment = await comments.create(blog_id, user.id, comment.content)
    logger.info(f"Comment {db_comment.id} added to blog {blog_id} by user {user.id}")
    return ok(await comments.get_out(db_comment.id))


@router.delete(
    "/{comment_id}",
    response_class=ORJSONResponse,
    summary="Delete a comment",
    description="Only the comment's author or the site owner may delete it.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {"success": True, "message": "Comment deleted successfully"},
                },
            },
        },
        401: UNAUTHORIZED,
        403: NOT_YOURS,
        404: COMMENT_NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="comments_delete",
)
@limiter.limit(tiered("30/minute", "10/minute"))
@cache_busting(
    patterns=[BLOG_LIST_PATTERN],
    namespace=BLOG_NAMESPACE,
    key_builder=lambda blog_id, **kw: blog_write_keys(blog_id),
)
async def delete_comment(
    request: Request,
    response: Response,
    blog_id: BlogId,
    comment_id: Annotated[int, Path(ge=1, description="Comment ID")],
    user: CurrentUserDep,
    comments: CommentRepoDep,
) -> dict[str, Any]:
    """
    Delete a comment.

    Raises
    ------
    RecordNotFoundError
        If the comment does not exist under this post.
    ForbiddenError
        If the caller is neither the author nor the owner.
    """
    db_comment = await comments.get_in_blog(blog_id, comment_id)
    if db_comment is None:
        raise RecordNotFoundError(detail="Comment not found")

    if db_comment.user_id != user.id and not is_owner_email(user.email):
        raise ForbiddenError(
            "Forbidden - You can only delete your own comments or if you are the blog owner",
        )

    await comments.delete(db_comment)
    logger.info(f"Comment {comment_id} deleted from blog {blog_id} by user {user.id}")
    return ok(message="Comment deleted successfully")
