"""Tests for the post detail cache, curated lists and drafts."""

from collections.abc import Callable
from unittest.mock import AsyncMock

import pytest
from redis.exceptions import RedisError

from inkblog.configs import BlogCacheConfig
from inkblog.errors import InvalidRecommendationError
from inkblog.managers.blog_cache import ABSENT_MARKER, BlogCache, is_absent_marker
from inkblog.managers.cache_manager import CacheManager
from inkblog.schemas.blog import BlogDetail, DraftContent, HotBlog, RecommendBlog
from inkblog.utils.cache_keys import HOT_BLOG_KEY, blog_key


@pytest.fixture
def blog_cache(cache_manager: CacheManager, blog_cache_config: BlogCacheConfig) -> BlogCache:
    return BlogCache(cache_manager, blog_cache_config)


@pytest.mark.asyncio
async def test_detail_is_read_through(
    blog_cache: BlogCache,
    make_detail: Callable[..., BlogDetail],
    counting_loader: type,
) -> None:
    """Test that a second read is served from the cache."""
    loader = counting_loader(make_detail)

    first = await blog_cache.get_detail(1, loader)
    second = await blog_cache.get_detail(1, loader)

    assert first == second
    assert second is not None
    assert second.title == "Hello"
    assert loader.calls == 1


@pytest.mark.asyncio
async def test_invalidate_forces_reload(
    blog_cache: BlogCache,
    make_detail: Callable[..., BlogDetail],
    counting_loader: type,
) -> None:
    """Test that a dropped detail is loaded again with fresh content."""
    titles = iter(["Old title", "New title"])
    loader = counting_loader(lambda blog_id: make_detail(blog_id, title=next(titles)))

    assert (await blog_cache.get_detail(3, loader)).title == "Old title"
    assert await blog_cache.invalidate(3) is True

    assert (await blog_cache.get_detail(3, loader)).title == "New title"
    assert loader.calls == 2


@pytest.mark.asyncio
async def test_missing_post_caches_absent_marker(
    blog_cache: BlogCache,
    cache_manager: CacheManager,
    blog_cache_config: BlogCacheConfig,
    counting_loader: type,
) -> None:
    """Test negative caching of a post that does not exist."""
    loader = counting_loader(lambda _blog_id: None)

    assert await blog_cache.get_detail(404, loader) is None
    assert await blog_cache.get_detail(404, loader) is None
    assert loader.calls == 1

    assert is_absent_marker(await cache_manager.get(blog_key(404)))
    assert 0 < await cache_manager.ttl(blog_key(404)) <= blog_cache_config.negative_ttl


@pytest.mark.asyncio
async def test_invalidate_clears_absent_marker(
    blog_cache: BlogCache,
    cache_manager: CacheManager,
    make_detail: Callable[..., BlogDetail],
) -> None:
    """Test that creating a post after a miss makes it visible at once."""
    await cache_manager.set(blog_key(8), ABSENT_MARKER, 60)
    await blog_cache.invalidate(8)

    detail = await blog_cache.get_detail(8, AsyncMock(return_value=make_detail(8)))
    assert detail is not None
    assert detail.id == 8


@pytest.mark.asyncio
async def test_corrupt_entry_is_a_miss_and_dropped(
    blog_cache: BlogCache,
    cache_manager: CacheManager,
    make_detail: Callable[..., BlogDetail],
) -> None:
    """Test that undecodable JSON falls through to the loader."""
    await cache_manager.memory_client.set(cache_manager._build_key(blog_key(5)), "{broken")

    detail = await blog_cache.get_detail(5, AsyncMock(return_value=make_detail(5)))

    assert detail is not None
    assert detail.id == 5
    assert (await cache_manager.get(blog_key(5)))["id"] == 5


@pytest.mark.asyncio
async def test_schema_mismatch_is_a_miss(
    blog_cache: BlogCache,
    cache_manager: CacheManager,
    make_detail: Callable[..., BlogDetail],
) -> None:
    """Test that valid JSON of the wrong shape is treated as a miss."""
    await cache_manager.set(blog_key(6), {"unexpected": True})

    detail = await blog_cache.get_detail(6, AsyncMock(return_value=make_detail(6)))

    assert detail is not None
    assert detail.id == 6


@pytest.mark.asyncio
async def test_cache_outage_falls_back_to_loader(
    blog_cache: BlogCache,
    cache_manager: CacheManager,
    make_detail: Callable[..., BlogDetail],
) -> None:
    """Test that reads keep working when every cache call fails."""
    failing = AsyncMock(side_effect=RedisError("down"))
    cache_manager._client.get = failing
    cache_manager._client.set = failing

    detail = await blog_cache.get_detail(2, AsyncMock(return_value=make_detail(2)))

    assert detail is not None
    assert detail.id == 2


@pytest.mark.asyncio
async def test_hot_list_has_ttl(
    blog_cache: BlogCache,
    cache_manager: CacheManager,
    blog_cache_config: BlogCacheConfig,
) -> None:
    """Test hot posts are cached with their expiry."""
    hot = [HotBlog(id=1, title="a", view_count=10)]
    loader = AsyncMock(return_value=hot)

    assert await blog_cache.get_hot(loader) == hot
    assert await blog_cache.get_hot(loader) == hot
    loader.assert_awaited_once()
    assert 0 < await cache_manager.ttl(HOT_BLOG_KEY) <= blog_cache_config.hot_ttl


@pytest.mark.asyncio
async def test_recommended_requires_four_posts(blog_cache: BlogCache) -> None:
    """Test the recommended set size rule."""
    items = [RecommendBlog(id=i, title=f"post {i}") for i in range(1, 4)]

    with pytest.raises(InvalidRecommendationError):
        await blog_cache.set_recommended(items)
    assert await blog_cache.get_recommended() == []

    items.append(RecommendBlog(id=4, title="post 4"))
    assert await blog_cache.set_recommended(items) is True
    assert [item.id for item in await blog_cache.get_recommended()] == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_draft_lifecycle(blog_cache: BlogCache) -> None:
    """Test save, read and discard of a user's draft."""
    assert await blog_cache.get_draft(1) is None

    await blog_cache.save_draft(1, DraftContent(content="# Work in progress"))
    draft = await blog_cache.get_draft(1)
    assert draft is not None
    assert draft.content == "# Work in progress"
    assert await blog_cache.get_draft(2) is None

    await blog_cache.discard_draft(1)
    assert await blog_cache.get_draft(1) is None
