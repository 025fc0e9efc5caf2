"""Pytest configuration and fixtures for service tests."""

from collections.abc import AsyncGenerator
from datetime import UTC, datetime
from unittest.mock import MagicMock

import pytest

from inkblog.configs import BlogCacheConfig, CacheConfig
from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.page_cache import PageCache
from inkblog.managers.taxonomy_cache import TaxonomyCache, TopicCache
from inkblog.managers.user_cache import UserCache
from inkblog.models import BlogDB, Role
from inkblog.repositories import (
    BlogRepository,
    CategoryRepository,
    FileRepository,
    TagRepository,
    TopicRepository,
    UserRepository,
)
from inkblog.schemas.blog import BlogDetail
from inkblog.schemas.common import SimpleUser
from inkblog.schemas.taxonomy import CategoryItem, TagItem
from inkblog.schemas.user import UserRecord
from inkblog.utils.cache_keys import CATEGORY_KEYS, TAG_KEYS

STAMP = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _record(user_id: int, role: Role) -> UserRecord:
    return UserRecord(
        id=user_id,
        username=f"user{user_id}@example.com",
        password_hash="$argon2id$fake",
        nick_name=f"User {user_id}",
        role=role,
    )


@pytest.fixture
async def cache_manager() -> AsyncGenerator[CacheManager]:
    """In-memory cache manager, cleared per test."""
    manager = CacheManager(config=CacheConfig(enabled_redis=False))
    try:
        await manager.initialize()
        await manager.clear()
        yield manager
    finally:
        await manager.shutdown()


@pytest.fixture
def blog_cache(cache_manager: CacheManager) -> BlogCache:
    return BlogCache(cache_manager, BlogCacheConfig(page_cache_enabled=True))


@pytest.fixture
def page_cache(cache_manager: CacheManager) -> PageCache:
    return PageCache(cache_manager, BlogCacheConfig(page_cache_enabled=True))


@pytest.fixture
def category_cache(cache_manager: CacheManager) -> TaxonomyCache[CategoryItem]:
    return TaxonomyCache(cache_manager, CATEGORY_KEYS, CategoryItem)


@pytest.fixture
def tag_cache(cache_manager: CacheManager) -> TaxonomyCache[TagItem]:
    return TaxonomyCache(cache_manager, TAG_KEYS, TagItem)


@pytest.fixture
def topic_cache(cache_manager: CacheManager) -> TopicCache:
    return TopicCache(cache_manager)


@pytest.fixture
def user_cache(cache_manager: CacheManager) -> UserCache:
    return UserCache(cache_manager)


@pytest.fixture
def blog_repo() -> MagicMock:
    """BlogRepository double; async methods are AsyncMocks."""
    return MagicMock(spec=BlogRepository)


@pytest.fixture
def category_repo() -> MagicMock:
    return MagicMock(spec=CategoryRepository)


@pytest.fixture
def tag_repo() -> MagicMock:
    return MagicMock(spec=TagRepository)


@pytest.fixture
def topic_repo() -> MagicMock:
    return MagicMock(spec=TopicRepository)


@pytest.fixture
def user_repo() -> MagicMock:
    return MagicMock(spec=UserRepository)


@pytest.fixture
def file_repo() -> MagicMock:
    return MagicMock(spec=FileRepository)


@pytest.fixture
def author() -> UserRecord:
    return _record(1, Role.USER)


@pytest.fixture
def admin() -> UserRecord:
    return _record(2, Role.ADMIN)


@pytest.fixture
def super_admin() -> UserRecord:
    return _record(3, Role.SUPER_ADMIN)


@pytest.fixture
def blog_detail() -> BlogDetail:
    return BlogDetail(
        id=42,
        title="Caching notes",
        description="Cache-aside in practice",
        content="Body",
        view_count=100,
        created_at=STAMP,
        updated_at=STAMP,
        user=SimpleUser(id=1, nick_name="User 1"),
    )


@pytest.fixture
def blog_row() -> BlogDB:
    return BlogDB(
        id=42,
        user_id=1,
        category_id=1,
        title="Caching notes",
        description="Cache-aside in practice",
        content="Body",
        created_at=STAMP,
        updated_at=STAMP,
    )
