# app/routes/blog.py

"""
Blog Routes.

Provides listing, stats, manual ordering and CRUD endpoints for blog posts.

Summary
-------
Endpoints include:
  - List blogs (paginated, with tag/author/search filters)
  - Blog statistics
  - Ordered blog list and batch reorder (owner)
  - Get blog by id
  - Create, update and delete blog (owner)

Caching
-------
List, detail and stats responses are cached as complete envelopes, so a hit
returns exactly the body of the miss that stored it. Every write invalidates
the post's detail key, every list key and the stats key once the write has
been committed.

Rate Limiting
-------------
All endpoints define explicit limits and include `429` response examples. Tiered
limits apply when `X-API-Key` is present.
"""

from logging import getLogger
from typing import Annotated, Any

from fastapi import APIRouter, Body, Path, Request
from fastapi.responses import ORJSONResponse
from starlette.responses import Response
from starlette.status import HTTP_201_CREATED, HTTP_500_INTERNAL_SERVER_ERROR

from app.configs import file_logger, settings
from app.decorators import cache_busting, cached
from app.dependencies import (
    BlogQueryListDep,
    BlogRepoDep,
    OwnerDep,
    ReorderServiceDep,
    StatsServiceDep,
)
from app.errors import RecordNotFoundError, error_envelope
from app.managers import limiter, tiered
from app.routes.responses import (
    BAD_REQUEST,
    BLOG_NOT_FOUND,
    FORBIDDEN,
    RATE_LIMITED,
    UNAUTHORIZED,
)
from app.schemas import BlogCreate, BlogUpdate, Pagination, ReorderRequest, ok
from app.utils.cache_keys import (
    BLOG_LIST_PATTERN,
    BLOG_NAMESPACE,
    BLOG_STATS_KEY,
    blog_id_key,
    blog_list_key,
    blog_write_keys,
)

router = APIRouter(prefix="/api/blogs", tags=["📝 Blogs"])

logger = file_logger(getLogger(__name__))

BlogId = Annotated[int, Path(ge=1, description="Blog ID")]

BLOG_EXAMPLE = {
    "id": 1,
    "title": "Understanding asyncio task groups",
    "image": "https://images.example.com/cover.webp",
    "content": "...",
    "tags": ["python", "asyncio"],
    "authorId": 1,
    "orderId": 1,
    "createdAt": "2025-01-01T00:00:00Z",
    "updatedAt": "2025-01-01T00:00:00Z",
    "author": {"id": 1, "email": "owner@example.com", "name": "Owner", "image": None},
    "authorProfile": {"firstName": "Jane", "lastName": "Doe", "avatar": None},
    "comments": 3,
}


def list_key(query: Any, **kw: Any) -> str:
    return blog_list_key(query.page, query.limit, query.tag, query.author, query.search)


async def _detail_or_404(repo: Any, blog_id: int) -> dict[str, Any]:
    blog = await repo.get_detail(blog_id)
    if blog is None:
        raise RecordNotFoundError(detail="Blog not found")
    return ok(blog)


@router.get(
    "",
    response_class=ORJSONResponse,
    summary="List blogs",
    description="Paginated posts, newest first, filtered by tag, author or search text.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": [BLOG_EXAMPLE],
                        "pagination": {"page": 1, "limit": 10, "total": 1, "totalPages": 1},
                    },
                },
            },
        },
        400: BAD_REQUEST,
        429: RATE_LIMITED,
    },
    operation_id="blogs_list",
)
@limiter.limit(tiered("120/minute", "60/minute"))
@cached(ttl=settings.CACHE_TTL_LIST, namespace=BLOG_NAMESPACE, key_builder=list_key)
async def list_blogs(
    request: Request,
    response: Response,
    query: BlogQueryListDep,
    repo: BlogRepoDep,
) -> dict[str, Any]:
    """
    List blogs with pagination and filters.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    query : BlogListQuery
        Page, limit, tag, author and search parameters.
    repo : BlogRepository
        Repository dependency.

    Returns
    -------
    dict
        Envelope with the page of posts and pagination metadata.
    """
    blogs, total = await repo.list_blogs(
        page=query.page,
        limit=query.limit,
        tag=query.tag,
        author=query.author,
        search=query.search,
    )
    return ok(blogs, pagination=Pagination.build(query.page, query.limit, total))


@router.get(
    "/stats",
    response_class=ORJSONResponse,
    summary="Blog statistics",
    description="Total posts and comments, the five newest posts and the most used tags.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": {
                            "totalPosts": 12,
                            "totalComments": 40,
                            "recentPosts": [],
                            "popularTags": [{"tag": "python", "count": 7}],
                        },
                    },
                },
            },
        },
        429: RATE_LIMITED,
    },
    operation_id="blogs_stats",
)
@limiter.limit(tiered("60/minute", "30/minute"))
@cached(
    ttl=settings.CACHE_TTL_STATS,
    namespace=BLOG_NAMESPACE,
    key_builder=lambda **kw: BLOG_STATS_KEY,
)
async def get_stats(
    request: Request,
    response: Response,
    stats: StatsServiceDep,
) -> dict[str, Any]:
    """
    Aggregate dashboard statistics.

    The four sub-queries run concurrently, each on its own session.
    """
    return ok(await stats.collect())


@router.get(
    "/reorder",
    response_class=ORJSONResponse,
    summary="Blogs in manual order",
    description="Every post ordered by `orderId`, unordered posts last. Never cached.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "data": [{"id": 2, "title": "Second", "orderId": 1}],
                    },
                },
            },
        },
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        429: RATE_LIMITED,
    },
    operation_id="blogs_ordered",
)
@limiter.limit(tiered("60/minute", "30/minute"))
async def get_ordered_blogs(
    request: Request,
    response: Response,
    owner: OwnerDep,
    repo: BlogRepoDep,
) -> dict[str, Any]:
    return ok(await repo.ordered())


@router.post(
    "/reorder",
    response_class=ORJSONResponse,
    response_model=None,
    summary="Reorder blogs",
    description=(
        "Apply a batch of `{id, newOrder}` pairs. The batch is validated as a whole; "
        "updates then run independently and partial failures are reported."
    ),
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Blogs reordered successfully",
                        "data": {"updated": [1, 2], "failed": []},
                    },
                },
            },
        },
        400: BAD_REQUEST,
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: BLOG_NOT_FOUND,
        429: RATE_LIMITED,
        500: {
            "description": "Some updates failed",
            "content": {
                "application/json": {
                    "example": {
                        "success": False,
                        "error": "Some blogs could not be reordered",
                        "data": {"updated": [1], "failed": [2]},
                    },
                },
            },
        },
    },
    operation_id="blogs_reorder",
)
@limiter.limit(tiered("30/minute", "10/minute"))
@cache_busting(
    keys=[BLOG_STATS_KEY],
    patterns=[BLOG_LIST_PATTERN],
    namespace=BLOG_NAMESPACE,
    key_builder=lambda payload, **kw: [blog_id_key(item.id) for item in payload.root],
)
async def reorder_blogs(
    request: Request,
    response: Response,
    payload: Annotated[
        ReorderRequest,
        Body(
            examples=[
                [{"id": 1, "newOrder": 5}, {"id": 2, "newOrder": 1}],
                {"data": [{"id": 1, "newOrder": 5}]},
            ],
        ),
    ],
    owner: OwnerDep,
    reorder: ReorderServiceDep,
) -> dict[str, Any] | ORJSONResponse:
    """
    Batch reorder.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    payload : ReorderRequest
        Non-empty list of pairs with unique ids.
    owner : UserDB
        Authenticated owner.
    reorder : ReorderService
        Service applying the batch.

    Returns
    -------
    dict | ORJSONResponse
        Success envelope, or a 500 envelope listing updated and failed ids.

    Raises
    ------
    RecordNotFoundError
        If any id has no post; nothing is written.
    """
    result = await reorder.reorder(payload.root)
    if result.failed:
        return ORJSONResponse(
            status_code=HTTP_500_INTERNAL_SERVER_ERROR,
            content=error_envelope("Some blogs could not be reordered", data=result.dump()),
        )
    return ok(result, message="Blogs reordered successfully")


@router.get(
    "/{blog_id}",
    response_class=ORJSONResponse,
    summary="Get blog by ID",
    description="A post with its author, the author's profile and its comment count.",
    responses={
        200: {
            "content": {"application/json": {"example": {"success": True, "data": BLOG_EXAMPLE}}},
        },
        400: BAD_REQUEST,
        404: BLOG_NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="blogs_get_by_id",
)
@limiter.limit(tiered("120/minute", "60/minute"))
@cached(
    ttl=settings.CACHE_TTL_DETAIL,
    namespace=BLOG_NAMESPACE,
    key_builder=lambda blog_id, **kw: blog_id_key(blog_id),
)
async def get_blog(
    request: Request,
    response: Response,
    blog_id: BlogId,
    repo: BlogRepoDep,
) -> dict[str, Any]:
    """
    Get blog by ID.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    blog_id : int
        Blog identifier.
    repo : BlogRepository
        Repository dependency.

    Returns
    -------
    dict
        Envelope with the post.

    Raises
    ------
    RecordNotFoundError
        If blog not found.
    """
    return await _detail_or_404(repo, blog_id)


@router.post(
    "",
    response_class=ORJSONResponse,
    status_code=HTTP_201_CREATED,
    summary="Create a new blog post",
    description="Create a post; it is appended to the end of the manual order.",
    responses={
        201: {
            "content": {"application/json": {"example": {"success": True, "data": BLOG_EXAMPLE}}},
        },
        400: BAD_REQUEST,
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        429: RATE_LIMITED,
    },
    operation_id="blogs_create",
)
@limiter.limit(tiered("20/minute", "10/minute"))
@cache_busting(keys=[BLOG_STATS_KEY], patterns=[BLOG_LIST_PATTERN], namespace=BLOG_NAMESPACE)
async def create_blog(
    request: Request,
    response: Response,
    blog: Annotated[
        BlogCreate,
        Body(
            examples=[
                {
                    "title": "Understanding asyncio task groups",
                    "content": "Task groups give structured concurrency...",
                    "tags": ["python", "asyncio"],
                    "image": "https://images.example.com/cover.webp",
                },
            ],
        ),
    ],
    owner: OwnerDep,
    repo: BlogRepoDep,
) -> dict[str, Any]:
    """
    Create a new blog post.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    blog : BlogCreate
        Blog input payload.
    owner : UserDB
        Authenticated owner, recorded as the author.
    repo : BlogRepository
        Repository dependency.

    Returns
    -------
    dict
        Envelope with the created post.
    """
    db_blog = await repo.create(blog, author_id=owner.id)
    logger.info(f"Blog {db_blog.id} created by user {owner.id}")
    return await _detail_or_404(repo, db_blog.id)


async def _update(repo: Any, blog_id: int, blog: BlogUpdate) -> dict[str, Any]:
    db_blog = await repo.get_or_raise(blog_id, detail="Blog not found")
    await repo.update(db_blog, blog.changes())
    logger.info(f"Blog {blog_id} updated")
    return await _detail_or_404(repo, blog_id)


UPDATE_RESPONSES: dict[int | str, dict[str, Any]] = {
    200: {"content": {"application/json": {"example": {"success": True, "data": BLOG_EXAMPLE}}}},
    400: BAD_REQUEST,
    401: UNAUTHORIZED,
    403: FORBIDDEN,
    404: BLOG_NOT_FOUND,
    429: RATE_LIMITED,
}


@router.put(
    "/{blog_id}",
    response_class=ORJSONResponse,
    summary="Update blog",
    description="Apply the fields present in the body; `image: null` clears the image.",
    responses=UPDATE_RESPONSES,
    operation_id="blogs_update",
)
@limiter.limit(tiered("30/minute", "10/minute"))
@cache_busting(
    patterns=[BLOG_LIST_PATTERN],
    namespace=BLOG_NAMESPACE,
    key_builder=lambda blog_id, **kw: blog_write_keys(blog_id),
)
async def update_blog(
    request: Request,
    response: Response,
    blog_id: BlogId,
    blog: BlogUpdate,
    owner: OwnerDep,
    repo: BlogRepoDep,
) -> dict[str, Any]:
    """
    Update a blog post.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object for middleware/decorators.
    blog_id : int
        Blog identifier.
    blog : BlogUpdate
        Fields to change.
    owner : UserDB
        Authenticated owner.
    repo : BlogRepository
        Repository dependency.

    Returns
    -------
    dict
        Envelope with the updated post.

    Raises
    ------
    RecordNotFoundError
        If blog not found.
    """
    return await _update(repo, blog_id, blog)


@router.patch(
    "/{blog_id}",
    response_class=ORJSONResponse,
    summary="Partially update blog",
    description="Same semantics as PUT.",
    responses=UPDATE_RESPONSES,
    operation_id="blogs_patch",
)
@limiter.limit(tiered("30/minute", "10/minute"))
@cache_busting(
    patterns=[BLOG_LIST_PATTERN],
    namespace=BLOG_NAMESPACE,
    key_builder=lambda blog_id, **kw: blog_write_keys(blog_id),
)
async def patch_blog(
    request: Request,
    response: Response,
    blog_id: BlogId,
    blog: BlogUpdate,
    owner: OwnerDep,
    repo: BlogRepoDep,
) -> dict[str, Any]:
    return await _update(repo, blog_id, blog)


@router.delete(
    "/{blog_id}",
    response_class=ORJSONResponse,
    summary="Delete blog",
    description="Delete a post together with its comments.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {"success": True, "message": "Blog deleted successfully"},
                },
            },
        },
        401: UNAUTHORIZED,
        403: FORBIDDEN,
        404: BLOG_NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="blogs_delete",
)
@limiter.limit(tiered("20/minute", "10/minute"))
@cache_busting(
    patterns=[BLOG_LIST_PATTERN],
    namespace=BLOG_NAMESPACE,
    key_builder=lambda blog_id, **kw: blog_write_keys(blog_id),
)
async def delete_blog(
    request: Request,
    response: Response,
    blog_id: BlogId,
    owner: OwnerDep,
    repo: BlogRepoDep,
) -> dict[str, Any]:
    """
    Delete a blog post.

    Raises
    ------
    RecordNotFoundError
        If blog not found.
    """
    db_blog = await repo.get_or_raise(blog_id, detail="Blog not found")
    await repo.delete(db_blog)
    logger.info(f"Blog {blog_id} deleted by user {owner.id}")
    return ok(message="Blog deleted successfully")
