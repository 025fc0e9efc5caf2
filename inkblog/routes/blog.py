# inkblog/routes/blog.py

"""
Blog Routes.

Public listings and details are served through the cache-aside layer;
writes commit first and then invalidate what they made stale.

Summary
-------
Endpoints include:
  - Paged listing, hot, latest, recommended, archive and simple listings
  - Full-text search
  - Post detail (counts a view)
  - Per-user listings
  - Create, edit info and update (authenticated)
  - Draft read, save and discard (authenticated)

Search index pushes run as background tasks after the response is sent.
"""

from datetime import datetime
from logging import getLogger
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Request
from fastapi.responses import ORJSONResponse
from starlette.status import HTTP_201_CREATED

from inkblog.dependencies import BlogServiceDep, CurrentUserDep, SearchDep
from inkblog.managers import limiter
from inkblog.schemas import (
    ArchiveBlog,
    ArchiveQuery,
    BlogDetail,
    BlogEditInfo,
    BlogPageQuery,
    BlogRequest,
    BlogSummary,
    DraftContent,
    HotBlog,
    MessageResponse,
    PageInfo,
    RecommendBlog,
    SearchHit,
    SimpleBlog,
    SortMode,
)
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

router = APIRouter(prefix="/blogs", tags=["📝 Blogs"])

PageParam = Annotated[int, Query(ge=1, description="Page number, starting at 1")]


def get_page_query(
    page: PageParam = 1,
    cid: Annotated[int, Query(description="Category id, -1 for every category")] = -1,
    sort: Annotated[SortMode, Query(description="Listing order")] = SortMode.CREATE,
) -> BlogPageQuery:
    """
    Dependency to construct `BlogPageQuery` from query parameters.

    Returns
    -------
    BlogPageQuery
        Aggregated query parameters object.
    """
    return BlogPageQuery(page=page, cid=cid, sort=sort)


def get_archive_query(
    start: Annotated[datetime, Query(description="Inclusive lower bound of created_at")],
    end: Annotated[datetime, Query(description="Exclusive upper bound of created_at")],
    page: PageParam = 1,
) -> ArchiveQuery:
    return ArchiveQuery(start=start, end=end, page=page)


# --- listings ---


@router.get(
    "/",
    response_class=ORJSONResponse,
    response_model=PageInfo[BlogSummary],
    summary="List blogs",
    operation_id="blogs_page",
)
async def blog_page(
    query: Annotated[BlogPageQuery, Depends(get_page_query)],
    service: BlogServiceDep,
) -> PageInfo[BlogSummary]:
    """
    One page of the public listing.

    Parameters
    ----------
    query : BlogPageQuery
        Page, category filter and sort order.
    service : BlogService
        Blog service.

    Returns
    -------
    PageInfo[BlogSummary]
        Served from the page cache when enabled.
    """
    return await service.page(query)


@router.get(
    "/hot",
    response_class=ORJSONResponse,
    response_model=list[HotBlog],
    summary="Most viewed blogs",
    operation_id="blogs_hot",
)
async def hot_blogs(service: BlogServiceDep) -> list[HotBlog]:
    return await service.hot()


@router.get(
    "/latest",
    response_class=ORJSONResponse,
    response_model=list[SimpleBlog],
    summary="Latest blogs",
    operation_id="blogs_latest",
)
async def latest_blogs(service: BlogServiceDep) -> list[SimpleBlog]:
    return await service.latest()


@router.get(
    "/recommend",
    response_class=ORJSONResponse,
    response_model=list[RecommendBlog],
    summary="Recommended blogs",
    operation_id="blogs_recommend",
)
async def recommended_blogs(service: BlogServiceDep) -> list[RecommendBlog]:
    """
    The curated recommended set.

    Returns
    -------
    list[RecommendBlog]
        Empty until an admin sets the recommendations.
    """
    return await service.recommended()


@router.get(
    "/archive",
    response_class=ORJSONResponse,
    response_model=PageInfo[ArchiveBlog],
    summary="Blogs in a date range",
    operation_id="blogs_archive",
)
async def archive_blogs(
    query: Annotated[ArchiveQuery, Depends(get_archive_query)],
    service: BlogServiceDep,
) -> PageInfo[ArchiveBlog]:
    return await service.archive(query)


@router.get(
    "/search",
    response_class=ORJSONResponse,
    response_model=PageInfo[SearchHit],
    summary="Full-text search",
    operation_id="blogs_search",
)
@limiter.limit("30/minute")
async def search_blogs(
    request: Request,
    q: Annotated[str, Query(min_length=1, max_length=100)],
    search: SearchDep,
    page: PageParam = 1,
) -> PageInfo[SearchHit]:
    """
    Search titles and descriptions.

    Parameters
    ----------
    request : Request
        Current request context (required by the rate limiter).
    q : str
        Search terms.
    search : SearchClient
        Search service client.
    page : int
        Page number.

    Returns
    -------
    PageInfo[SearchHit]
        Empty when search is disabled or unavailable.
    """
    return await search.search(q, page)


@router.get(
    "/simple",
    response_class=ORJSONResponse,
    response_model=PageInfo[SimpleBlog],
    summary="Title-only listing",
    operation_id="blogs_simple",
)
async def simple_blogs(service: BlogServiceDep, page: PageParam = 1) -> PageInfo[SimpleBlog]:
    return await service.simple(page)


@router.get(
    "/user/{user_id}",
    response_class=ORJSONResponse,
    response_model=PageInfo[BlogSummary],
    summary="Blogs of a user",
    operation_id="blogs_by_user",
)
async def user_blogs(
    user_id: int,
    service: BlogServiceDep,
    page: PageParam = 1,
) -> PageInfo[BlogSummary]:
    return await service.by_user(user_id, page)


@router.get(
    "/user/{user_id}/top",
    response_class=ORJSONResponse,
    response_model=list[SimpleBlog],
    summary="Most viewed blogs of a user",
    operation_id="blogs_user_top",
)
async def user_top_blogs(user_id: int, service: BlogServiceDep) -> list[SimpleBlog]:
    return await service.user_top(user_id)


# --- drafts ---


@router.get(
    "/draft",
    response_class=ORJSONResponse,
    response_model=DraftContent | None,
    summary="Read the saved draft",
    operation_id="blogs_draft_get",
)
async def get_draft(user: CurrentUserDep, service: BlogServiceDep) -> DraftContent | None:
    return await service.get_draft(user.id)


@router.put(
    "/draft",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Save a draft",
    operation_id="blogs_draft_save",
)
@limiter.limit("30/minute")
async def save_draft(
    request: Request,
    draft: DraftContent,
    user: CurrentUserDep,
    service: BlogServiceDep,
) -> MessageResponse:
    """
    Save the editor content of the current user.

    Returns
    -------
    MessageResponse
        Whether the draft was stored; the cache may be unavailable.
    """
    saved = await service.save_draft(user.id, draft)
    return MessageResponse(message="Draft saved" if saved else "Draft could not be saved")


@router.delete(
    "/draft",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Discard the saved draft",
    operation_id="blogs_draft_discard",
)
async def discard_draft(user: CurrentUserDep, service: BlogServiceDep) -> MessageResponse:
    await service.discard_draft(user.id)
    return MessageResponse(message="Draft discarded")


# --- single post ---


@router.post(
    "/",
    response_class=ORJSONResponse,
    response_model=SearchHit,
    status_code=HTTP_201_CREATED,
    summary="Create a blog",
    responses={
        404: {
            "description": "Category or topic not found",
            "content": {"application/json": {"example": {"detail": "Category 3 not found"}}},
        },
        429: {
            "description": "Rate limit exceeded",
            "content": {"application/json": {"example": {"detail": "Rate limit exceeded"}}},
        },
    },
    operation_id="blogs_create",
)
@limiter.limit("10/minute")
async def create_blog(
    request: Request,
    blog: BlogRequest,
    user: CurrentUserDep,
    service: BlogServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> SearchHit:
    """
    Create a new blog post.

    Parameters
    ----------
    request : Request
        Current request context.
    blog : BlogRequest
        Post content and taxonomy references.
    user : UserRecord
        Authenticated author.
    service : BlogService
        Blog service.
    search : SearchClient
        Receives the new document after the response is sent.
    background_tasks : BackgroundTasks
        Background task queue.

    Returns
    -------
    SearchHit
        Id, title and description of the new post.
    """
    hit = await service.create(blog, user)
    background_tasks.add_task(search.index_blogs, [hit])
    return hit


@router.get(
    "/{blog_id}",
    response_class=ORJSONResponse,
    response_model=BlogDetail,
    summary="Get a blog",
    responses={
        404: {
            "description": "Blog not found",
            "content": {"application/json": {"example": {"detail": "Blog 7 not found"}}},
        },
    },
    operation_id="blogs_detail",
)
async def blog_detail(blog_id: int, service: BlogServiceDep) -> BlogDetail:
    """
    Full post content; counts one view.

    Parameters
    ----------
    blog_id : int
        Post id.
    service : BlogService
        Blog service.

    Returns
    -------
    BlogDetail
        The post with its buffered view count.
    """
    return await service.detail(blog_id)


@router.get(
    "/{blog_id}/edit",
    response_class=ORJSONResponse,
    response_model=BlogEditInfo,
    summary="Current values of a blog for editing",
    operation_id="blogs_edit_info",
)
async def blog_edit_info(
    blog_id: int,
    user: CurrentUserDep,
    service: BlogServiceDep,
) -> BlogEditInfo:
    return await service.edit_info(blog_id, user)


@router.put(
    "/{blog_id}",
    response_class=ORJSONResponse,
    response_model=SearchHit,
    summary="Update a blog",
    operation_id="blogs_update",
)
@limiter.limit("20/minute")
async def update_blog(
    request: Request,
    blog_id: int,
    blog: BlogRequest,
    user: CurrentUserDep,
    service: BlogServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> SearchHit:
    """
    Update a post owned by the current user, or any post for admins.

    Returns
    -------
    SearchHit
        The updated search document.
    """
    hit = await service.update(blog_id, blog, user)
    background_tasks.add_task(search.index_blogs, [hit])
    return hit
