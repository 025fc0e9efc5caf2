"""Tests for the category, tag and topic caches."""

from datetime import UTC, datetime
from unittest.mock import AsyncMock

import pytest

from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.taxonomy_cache import TaxonomyCache, TopicCache
from inkblog.schemas.common import PageInfo, SimpleUser
from inkblog.schemas.taxonomy import CategoryItem, TagItem, TopicDetail
from inkblog.utils.cache_keys import CATEGORY_KEYS, TAG_KEYS, TOPIC_FIRST_PAGE_KEY

TAGS = [TagItem(id=i, name=f"tag-{i}") for i in range(1, 6)]


@pytest.fixture
def tag_cache(cache_manager: CacheManager) -> TaxonomyCache[TagItem]:
    return TaxonomyCache(cache_manager, TAG_KEYS, TagItem)


@pytest.fixture
def category_cache(cache_manager: CacheManager) -> TaxonomyCache[CategoryItem]:
    return TaxonomyCache(cache_manager, CATEGORY_KEYS, CategoryItem)


@pytest.mark.asyncio
async def test_list_is_read_through(category_cache: TaxonomyCache[CategoryItem]) -> None:
    """Test the category list is loaded once."""
    loader = AsyncMock(return_value=[CategoryItem(id=1, name="python")])

    assert await category_cache.get_list(loader) == [CategoryItem(id=1, name="python")]
    await category_cache.get_list(loader)

    loader.assert_awaited_once()


@pytest.mark.asyncio
async def test_invalidate_reloads_list(category_cache: TaxonomyCache[CategoryItem]) -> None:
    """Test that a write to the kind makes the next read fresh."""
    await category_cache.get_list(AsyncMock(return_value=[CategoryItem(id=1, name="old")]))
    assert await category_cache.invalidate() is True

    fresh = await category_cache.get_list(AsyncMock(return_value=[CategoryItem(id=1, name="new")]))
    assert fresh[0].name == "new"


@pytest.mark.asyncio
async def test_get_by_id_uses_hash(tag_cache: TaxonomyCache[TagItem]) -> None:
    """Test single tag lookups are cached in the tag hash."""
    loader = AsyncMock(return_value=TAGS[0])

    assert await tag_cache.get_by_id(1, loader) == TAGS[0]
    assert await tag_cache.get_by_id(1, loader) == TAGS[0]
    loader.assert_awaited_once_with(1)


@pytest.mark.asyncio
async def test_get_by_id_does_not_cache_missing(tag_cache: TaxonomyCache[TagItem]) -> None:
    """Test that unknown ids always reach the loader."""
    loader = AsyncMock(return_value=None)

    assert await tag_cache.get_by_id(99, loader) is None
    assert await tag_cache.get_by_id(99, loader) is None
    assert loader.await_count == 2


@pytest.mark.asyncio
async def test_category_without_map_goes_to_loader(
    category_cache: TaxonomyCache[CategoryItem],
) -> None:
    """Test kinds without a hash never cache single items."""
    loader = AsyncMock(return_value=CategoryItem(id=2, name="go"))

    await category_cache.get_by_id(2, loader)
    await category_cache.get_by_id(2, loader)

    assert loader.await_count == 2


@pytest.mark.asyncio
async def test_random_sample(tag_cache: TaxonomyCache[TagItem]) -> None:
    """Test random tags come from the loaded set and the set is filled once."""
    loader = AsyncMock(return_value=TAGS)

    sample = await tag_cache.random_sample(3, loader)
    again = await tag_cache.random_sample(10, loader)

    assert len(sample) == 3
    assert {tag.id for tag in sample} <= {tag.id for tag in TAGS}
    assert len(again) == len(TAGS)
    loader.assert_awaited_once()


@pytest.mark.asyncio
async def test_random_sample_with_no_tags(tag_cache: TaxonomyCache[TagItem]) -> None:
    """Test an empty store yields an empty sample."""
    assert await tag_cache.random_sample(3, AsyncMock(return_value=[])) == []


@pytest.mark.asyncio
async def test_invalidate_drops_every_tag_key(
    tag_cache: TaxonomyCache[TagItem],
    cache_manager: CacheManager,
) -> None:
    """Test list, hash and random set are dropped together."""
    await tag_cache.get_list(AsyncMock(return_value=TAGS))
    await tag_cache.get_by_id(1, AsyncMock(return_value=TAGS[0]))
    await tag_cache.random_sample(2, AsyncMock(return_value=TAGS))

    await tag_cache.invalidate()

    assert await cache_manager.exists(*TAG_KEYS.all_keys()) == 0


@pytest.mark.asyncio
async def test_topic_first_page(cache_manager: CacheManager) -> None:
    """Test the first topic page is cached and dropped with the topic keys."""
    topic_cache = TopicCache(cache_manager)
    first_page = PageInfo[TopicDetail](
        page=1,
        size=20,
        total=1,
        data=[
            TopicDetail(
                id=1,
                name="rust",
                description="d",
                created_at=datetime(2026, 3, 1, tzinfo=UTC),
                user=SimpleUser(id=1, nick_name="ink"),
            ),
        ],
    )
    loader = AsyncMock(return_value=first_page)

    assert await topic_cache.get_first_page(loader) == first_page
    await topic_cache.get_first_page(loader)
    loader.assert_awaited_once()
    assert await cache_manager.ttl(TOPIC_FIRST_PAGE_KEY) > 0

    await topic_cache.invalidate()
    assert await cache_manager.exists(TOPIC_FIRST_PAGE_KEY) == 0
