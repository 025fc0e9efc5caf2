# inkblog/routes/admin.py

"""
Admin Routes.

Summary
-------
Endpoints include:
  - Blog, category, tag, topic and file moderation
  - User role changes (SUPER_ADMIN only)
  - Recommended set and website configuration
  - Maintenance: reset latest, flush view counts, rebuild the search index
  - Cache health

ADMIN accounts see and change only their own blogs, topics and files;
SUPER_ADMIN accounts see everything. Categories and tags are shared.
"""

from logging import getLogger
from typing import Annotated

from fastapi import APIRouter, BackgroundTasks, Query
from fastapi.responses import ORJSONResponse

from inkblog.auth import AdminUserDep, SuperAdminUserDep
from inkblog.dependencies import (
    AdminServiceDep,
    BlogServiceDep,
    CacheDep,
    FileServiceDep,
    SearchDep,
    UserServiceDep,
    ViewCountFlusherDep,
)
from inkblog.schemas import (
    AdminBlogFilter,
    AdminBlogItem,
    AdminFileItem,
    AdminListFilter,
    AdminTaxonomyItem,
    CacheHealthResponse,
    CategoryItem,
    FilePublicUpdate,
    FlushReport,
    IdsRequest,
    MessageResponse,
    NameRequest,
    PageInfo,
    RecommendBlog,
    RecommendRequest,
    RoleUpdate,
    TagItem,
    TopicItem,
    TopicRequest,
    UserPublic,
    WebsiteConfig,
)
from inkblog.services.admin import owner_scope
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

router = APIRouter(prefix="/admin", tags=["🛡️ Admin"])

BlogFilterDep = Annotated[AdminBlogFilter, Query()]
ListFilterDep = Annotated[AdminListFilter, Query()]


# --- blogs ---


@router.get(
    "/blogs",
    response_class=ORJSONResponse,
    response_model=PageInfo[AdminBlogItem],
    summary="Admin blog listing",
    operation_id="admin_blogs",
)
async def admin_blogs(
    query: BlogFilterDep,
    user: AdminUserDep,
    service: AdminServiceDep,
) -> PageInfo[AdminBlogItem]:
    """
    Blogs including deleted ones.

    Parameters
    ----------
    query : AdminBlogFilter
        Page, title, category and deleted-state filters.
    user : UserRecord
        Authenticated admin; ADMIN accounts only see their own blogs.
    service : AdminService
        Admin service.

    Returns
    -------
    PageInfo[AdminBlogItem]
        One page of blogs, newest first.
    """
    return await service.blog_page(query, user)


@router.post(
    "/blogs/delete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Soft delete blogs",
    operation_id="admin_blogs_delete",
)
async def delete_blogs(
    body: IdsRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> list[int]:
    deleted = await service.delete_blogs(body.ids, user)
    background_tasks.add_task(search.delete_blogs, deleted)
    return deleted


@router.post(
    "/blogs/undelete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Restore blogs",
    operation_id="admin_blogs_undelete",
)
async def undelete_blogs(
    body: IdsRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> list[int]:
    docs = await service.restore_blogs(body.ids, user)
    background_tasks.add_task(search.index_blogs, docs)
    return [doc.id for doc in docs]


# --- categories ---


@router.get(
    "/categories",
    response_class=ORJSONResponse,
    response_model=PageInfo[AdminTaxonomyItem],
    summary="Admin category listing",
    operation_id="admin_categories",
)
async def admin_categories(
    query: ListFilterDep,
    user: AdminUserDep,
    service: AdminServiceDep,
) -> PageInfo[AdminTaxonomyItem]:
    return await service.category_page(query)


@router.put(
    "/categories/{category_id}",
    response_class=ORJSONResponse,
    response_model=CategoryItem,
    summary="Rename a category",
    operation_id="admin_categories_update",
)
async def update_category(
    category_id: int,
    body: NameRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
) -> CategoryItem:
    return await service.rename_category(category_id, body.name)


@router.post(
    "/categories/delete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Soft delete categories and their blogs",
    operation_id="admin_categories_delete",
)
async def delete_categories(
    body: IdsRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> list[int]:
    """
    Soft delete categories; their blogs are deleted with them.

    Returns
    -------
    list[int]
        Ids of the blogs that were deleted.
    """
    blog_ids = await service.delete_categories(body.ids)
    background_tasks.add_task(search.delete_blogs, blog_ids)
    return blog_ids


@router.post(
    "/categories/undelete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Restore categories and their blogs",
    operation_id="admin_categories_undelete",
)
async def undelete_categories(
    body: IdsRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> list[int]:
    docs = await service.restore_categories(body.ids)
    background_tasks.add_task(search.index_blogs, docs)
    return [doc.id for doc in docs]


# --- tags ---


@router.get(
    "/tags",
    response_class=ORJSONResponse,
    response_model=PageInfo[AdminTaxonomyItem],
    summary="Admin tag listing",
    operation_id="admin_tags",
)
async def admin_tags(
    query: ListFilterDep,
    user: AdminUserDep,
    service: AdminServiceDep,
) -> PageInfo[AdminTaxonomyItem]:
    return await service.tag_page(query)


@router.put(
    "/tags/{tag_id}",
    response_class=ORJSONResponse,
    response_model=TagItem,
    summary="Rename a tag",
    operation_id="admin_tags_update",
)
async def update_tag(
    tag_id: int,
    body: NameRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
) -> TagItem:
    return await service.rename_tag(tag_id, body.name)


@router.post(
    "/tags/delete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Soft delete tags",
    operation_id="admin_tags_delete",
)
async def delete_tags(body: IdsRequest, user: AdminUserDep, service: AdminServiceDep) -> list[int]:
    return await service.set_tags_deleted(body.ids, deleted=True)


@router.post(
    "/tags/undelete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Restore tags",
    operation_id="admin_tags_undelete",
)
async def undelete_tags(body: IdsRequest, user: AdminUserDep, service: AdminServiceDep) -> list[int]:
    return await service.set_tags_deleted(body.ids, deleted=False)


# --- topics ---


@router.get(
    "/topics",
    response_class=ORJSONResponse,
    response_model=PageInfo[AdminTaxonomyItem],
    summary="Admin topic listing",
    operation_id="admin_topics",
)
async def admin_topics(
    query: ListFilterDep,
    user: AdminUserDep,
    service: AdminServiceDep,
) -> PageInfo[AdminTaxonomyItem]:
    return await service.topic_page(query, user)


@router.put(
    "/topics/{topic_id}",
    response_class=ORJSONResponse,
    response_model=TopicItem,
    summary="Update a topic",
    operation_id="admin_topics_update",
)
async def update_topic(
    topic_id: int,
    body: TopicRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
) -> TopicItem:
    return await service.update_topic(topic_id, body, user)


@router.post(
    "/topics/delete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Soft delete topics and their blogs",
    operation_id="admin_topics_delete",
)
async def delete_topics(
    body: IdsRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> list[int]:
    blog_ids = await service.delete_topics(body.ids, user)
    background_tasks.add_task(search.delete_blogs, blog_ids)
    return blog_ids


@router.post(
    "/topics/undelete",
    response_class=ORJSONResponse,
    response_model=list[int],
    summary="Restore topics and their blogs",
    operation_id="admin_topics_undelete",
)
async def undelete_topics(
    body: IdsRequest,
    user: AdminUserDep,
    service: AdminServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> list[int]:
    docs = await service.restore_topics(body.ids, user)
    background_tasks.add_task(search.index_blogs, docs)
    return [doc.id for doc in docs]


# --- files ---


@router.get(
    "/files",
    response_class=ORJSONResponse,
    response_model=PageInfo[AdminFileItem],
    summary="Admin file listing",
    operation_id="admin_files",
)
async def admin_files(
    query: ListFilterDep,
    user: AdminUserDep,
    service: FileServiceDep,
) -> PageInfo[AdminFileItem]:
    return await service.admin_page(query.page, query.name, owner_scope(user))


@router.put(
    "/files/public",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Set the public flag of files",
    operation_id="admin_files_public",
)
async def set_files_public(
    body: FilePublicUpdate,
    user: AdminUserDep,
    service: FileServiceDep,
) -> MessageResponse:
    updated = await service.set_public(body.ids, is_public=body.is_public, owner_id=owner_scope(user))
    return MessageResponse(message=f"Updated {updated} files")


@router.post(
    "/files/delete",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Delete files",
    operation_id="admin_files_delete",
)
async def delete_files(body: IdsRequest, user: AdminUserDep, service: FileServiceDep) -> MessageResponse:
    deleted = await service.delete(body.ids, owner_scope(user))
    return MessageResponse(message=f"Deleted {deleted} files")


# --- site ---


@router.put(
    "/users/{username}/role",
    response_class=ORJSONResponse,
    response_model=UserPublic,
    summary="Change a user's role",
    operation_id="admin_users_role",
)
async def change_role(
    username: str,
    body: RoleUpdate,
    user: SuperAdminUserDep,
    service: UserServiceDep,
) -> UserPublic:
    return await service.change_role(username, body.role)


@router.put(
    "/recommend",
    response_class=ORJSONResponse,
    response_model=list[RecommendBlog],
    summary="Set the recommended blogs",
    responses={
        400: {
            "description": "Not exactly four blogs",
            "content": {
                "application/json": {
                    "example": {"detail": "Recommended blogs must contain exactly 4 posts, got 3"},
                },
            },
        },
    },
    operation_id="admin_recommend",
)
async def set_recommended(
    body: RecommendRequest,
    user: AdminUserDep,
    service: BlogServiceDep,
) -> list[RecommendBlog]:
    return await service.set_recommended(body.ids)


@router.put(
    "/website-config",
    response_class=ORJSONResponse,
    response_model=WebsiteConfig,
    summary="Update the site profile",
    operation_id="admin_website_config",
)
async def set_website_config(
    body: WebsiteConfig,
    user: AdminUserDep,
    service: UserServiceDep,
) -> WebsiteConfig:
    return await service.set_website_config(body)


# --- maintenance ---


@router.post(
    "/init-latest",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Rebuild the latest blogs on next read",
    operation_id="admin_init_latest",
)
async def init_latest(user: AdminUserDep, service: AdminServiceDep) -> MessageResponse:
    await service.reset_latest()
    return MessageResponse(message="Latest blogs reset")


@router.post(
    "/init-eye-count",
    response_class=ORJSONResponse,
    response_model=FlushReport,
    summary="Flush buffered view counts now",
    operation_id="admin_init_eye_count",
)
async def init_eye_count(user: SuperAdminUserDep, flusher: ViewCountFlusherDep) -> FlushReport:
    """
    Run the nightly view-count flush immediately.

    Returns
    -------
    FlushReport
        Flushed and failed post ids; ``skipped`` when another flush holds the lock.
    """
    return await flusher.flush()


@router.post(
    "/init-search",
    response_class=ORJSONResponse,
    response_model=MessageResponse,
    summary="Rebuild the search index",
    operation_id="admin_init_search",
)
async def init_search(
    user: SuperAdminUserDep,
    service: AdminServiceDep,
    search: SearchDep,
    background_tasks: BackgroundTasks,
) -> MessageResponse:
    docs = await service.search_documents()
    background_tasks.add_task(search.reindex, docs)
    logger.info(f"Search re-index of {len(docs)} blogs scheduled by {user.username}")
    return MessageResponse(message=f"Re-indexing {len(docs)} blogs")


@router.get(
    "/cache/health",
    response_class=ORJSONResponse,
    response_model=CacheHealthResponse,
    summary="Cache backend health",
    operation_id="admin_cache_health",
)
async def cache_health(user: AdminUserDep, cache: CacheDep) -> CacheHealthResponse:
    return await cache.health_check()
