# inkblog/dependencies/dependencies.py

"""
Application dependencies.

Long-lived clients live on ``app.state`` and are created by the lifespan.
Cache managers, repositories and services are cheap wrappers and are
built per request around them.
"""

from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlmodel.ext.asyncio.session import AsyncSession

from inkblog.clients.search_client import SearchClient
from inkblog.configs.settings import BlogCacheConfig, Settings
from inkblog.db import Database, get_session
from inkblog.errors import InvalidTokenError
from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.page_cache import PageCache
from inkblog.managers.taxonomy_cache import TaxonomyCache, TopicCache
from inkblog.managers.token_manager import decode_access_token
from inkblog.managers.user_cache import UserCache
from inkblog.managers.view_counter import ViewCounter
from inkblog.repositories import (
    BlogRepository,
    CategoryRepository,
    FileRepository,
    TagRepository,
    TopicRepository,
    UserRepository,
)
from inkblog.schemas.taxonomy import CategoryItem, TagItem
from inkblog.schemas.user import UserRecord
from inkblog.services import (
    AdminService,
    BlogService,
    CategoryService,
    FileService,
    LocalFileStorage,
    TagService,
    TopicService,
    UserService,
    ViewCountFlusher,
)
from inkblog.utils.cache_keys import CATEGORY_KEYS, TAG_KEYS

bearer_scheme = HTTPBearer(auto_error=False)

# --- app.state clients ---


def get_cache_manager(request: Request) -> CacheManager:
    """Dependency to get the application cache manager instance."""
    return request.app.state.cache_manager


def get_database(request: Request) -> Database:
    return request.app.state.database


def get_search_client(request: Request) -> SearchClient:
    return request.app.state.search_client


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_blog_cache_config(request: Request) -> BlogCacheConfig:
    return request.app.state.blog_cache_config


CacheDep = Annotated[CacheManager, Depends(get_cache_manager)]
DatabaseDep = Annotated[Database, Depends(get_database)]
SearchDep = Annotated[SearchClient, Depends(get_search_client)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
BlogCacheConfigDep = Annotated[BlogCacheConfig, Depends(get_blog_cache_config)]
SessionDep = Annotated[AsyncSession, Depends(get_session)]

# --- cache managers ---


def get_view_counter(cache: CacheDep, config: BlogCacheConfigDep) -> ViewCounter:
    return ViewCounter(cache, config.flush_lock_ttl)


def get_blog_cache(
    cache: CacheDep,
    config: BlogCacheConfigDep,
    view_counter: Annotated[ViewCounter, Depends(get_view_counter)],
) -> BlogCache:
    return BlogCache(cache, config, view_counter)


def get_page_cache(cache: CacheDep, config: BlogCacheConfigDep) -> PageCache:
    return PageCache(cache, config)


def get_category_cache(cache: CacheDep) -> TaxonomyCache[CategoryItem]:
    return TaxonomyCache(cache, CATEGORY_KEYS, CategoryItem)


def get_tag_cache(cache: CacheDep) -> TaxonomyCache[TagItem]:
    return TaxonomyCache(cache, TAG_KEYS, TagItem)


def get_topic_cache(cache: CacheDep) -> TopicCache:
    return TopicCache(cache)


def get_user_cache(cache: CacheDep) -> UserCache:
    return UserCache(cache)


BlogCacheDep = Annotated[BlogCache, Depends(get_blog_cache)]
PageCacheDep = Annotated[PageCache, Depends(get_page_cache)]
CategoryCacheDep = Annotated[TaxonomyCache[CategoryItem], Depends(get_category_cache)]
TagCacheDep = Annotated[TaxonomyCache[TagItem], Depends(get_tag_cache)]
TopicCacheDep = Annotated[TopicCache, Depends(get_topic_cache)]
UserCacheDep = Annotated[UserCache, Depends(get_user_cache)]

# --- services ---


def get_blog_service(
    session: SessionDep,
    blog_cache: BlogCacheDep,
    page_cache: PageCacheDep,
) -> BlogService:
    return BlogService(
        BlogRepository(session),
        CategoryRepository(session),
        TopicRepository(session),
        TagRepository(session),
        blog_cache,
        page_cache,
    )


def get_category_service(session: SessionDep, cache: CategoryCacheDep) -> CategoryService:
    return CategoryService(CategoryRepository(session), cache)


def get_tag_service(session: SessionDep, cache: TagCacheDep) -> TagService:
    return TagService(TagRepository(session), BlogRepository(session), cache)


def get_topic_service(session: SessionDep, cache: TopicCacheDep) -> TopicService:
    return TopicService(TopicRepository(session), BlogRepository(session), cache)


def get_user_service(
    session: SessionDep,
    user_cache: UserCacheDep,
    blog_cache: BlogCacheDep,
    page_cache: PageCacheDep,
) -> UserService:
    return UserService(UserRepository(session), BlogRepository(session), user_cache, blog_cache, page_cache)


def get_file_service(session: SessionDep, settings: SettingsDep) -> FileService:
    return FileService(FileRepository(session), LocalFileStorage(settings), settings)


def get_admin_service(
    session: SessionDep,
    blog_cache: BlogCacheDep,
    page_cache: PageCacheDep,
    category_cache: CategoryCacheDep,
    tag_cache: TagCacheDep,
    topic_cache: TopicCacheDep,
) -> AdminService:
    return AdminService(
        BlogRepository(session),
        CategoryRepository(session),
        TagRepository(session),
        TopicRepository(session),
        blog_cache,
        page_cache,
        category_cache,
        tag_cache,
        topic_cache,
    )


def get_view_count_flusher(
    database: DatabaseDep,
    view_counter: Annotated[ViewCounter, Depends(get_view_counter)],
) -> ViewCountFlusher:
    return ViewCountFlusher(database, view_counter)


BlogServiceDep = Annotated[BlogService, Depends(get_blog_service)]
CategoryServiceDep = Annotated[CategoryService, Depends(get_category_service)]
TagServiceDep = Annotated[TagService, Depends(get_tag_service)]
TopicServiceDep = Annotated[TopicService, Depends(get_topic_service)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
FileServiceDep = Annotated[FileService, Depends(get_file_service)]
AdminServiceDep = Annotated[AdminService, Depends(get_admin_service)]
ViewCountFlusherDep = Annotated[ViewCountFlusher, Depends(get_view_count_flusher)]

# --- authentication ---


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
    user_cache: UserCacheDep,
    user_service: UserServiceDep,
) -> UserRecord:
    """
    Get the user of the active session.

    A token is accepted only while it is the one cached for its user, so a
    newer login or a logout ends it. A cache outage rejects every token.

    Parameters
    ----------
    credentials : HTTPAuthorizationCredentials | None
        Bearer credentials from the ``Authorization`` header.
    user_cache : UserCache
        Session token store.
    user_service : UserService
        Loads the user record.

    Returns
    -------
    UserRecord
        Current authenticated user.

    Raises
    ------
    InvalidTokenError
        If the token is missing, invalid, replaced or its user is gone.
    """
    if credentials is None:
        raise InvalidTokenError
    token = credentials.credentials
    token_data = decode_access_token(token)
    if token_data is None:
        raise InvalidTokenError

    if await user_cache.get_token(token_data.username) != token:
        mssg = "Session expired or signed in elsewhere"
        raise InvalidTokenError(mssg)

    user = await user_service.get_record(token_data.username)
    if user is None:
        raise InvalidTokenError
    return user


CurrentUserDep = Annotated[UserRecord, Depends(get_current_user)]
