"""Pytest configuration and fixtures for cache tests."""

from collections.abc import AsyncGenerator, Callable
from datetime import UTC, datetime

import pytest

from inkblog.clients.memory_client import MemoryClient
from inkblog.configs import BlogCacheConfig, CacheConfig
from inkblog.managers.cache_manager import CacheManager
from inkblog.schemas.blog import BlogDetail
from inkblog.schemas.common import SimpleUser


class CountingLoader:
    """Async loader that records how often the store was hit."""

    def __init__(self, result: Callable[..., object]) -> None:
        self._result = result
        self.calls = 0

    async def __call__(self, *args: object) -> object:
        self.calls += 1
        return self._result(*args)


@pytest.fixture
async def cache_manager() -> AsyncGenerator[CacheManager]:
    """
    Create cache manager for testing.

    Runs on the in-memory backend; clears the cache and resets statistics
    before each test and shuts down on teardown.
    """
    manager = CacheManager(config=CacheConfig(enabled_redis=False))
    try:
        await manager.initialize()
        await manager.clear()
        manager.reset_statistics()
        yield manager
    finally:
        await manager.shutdown()


@pytest.fixture
def memory_client() -> MemoryClient:
    """In-memory cache client for tests that need no manager."""
    return MemoryClient()


@pytest.fixture
def blog_cache_config() -> BlogCacheConfig:
    return BlogCacheConfig(page_cache_enabled=True, negative_ttl=60, flush_lock_ttl=30)


@pytest.fixture
def make_detail() -> Callable[..., BlogDetail]:
    """Factory for post details with fixed timestamps."""
    stamp = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)

    def _make(blog_id: int, title: str = "Hello", view_count: int = 0) -> BlogDetail:
        return BlogDetail(
            id=blog_id,
            title=title,
            description="A post",
            content="Body",
            view_count=view_count,
            created_at=stamp,
            updated_at=stamp,
            user=SimpleUser(id=1, nick_name="ink"),
        )

    return _make


@pytest.fixture
def counting_loader() -> type[CountingLoader]:
    return CountingLoader
