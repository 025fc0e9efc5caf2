"""Tests for buffered view counts and the swap-then-drain flush."""

from asyncio import gather

import pytest
from pytest_mock import MockerFixture
from redis.exceptions import RedisError

from inkblog.errors import DatabaseError
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.view_counter import ViewCounter
from inkblog.utils.cache_keys import (
    VIEW_COUNT_DRAINING_KEY,
    VIEW_COUNT_LOCK_KEY,
    VIEW_COUNT_MAP_KEY,
    blog_key,
)


class FakeStore:
    """Relational view counts keyed by post id."""

    def __init__(self, counts: dict[int, int] | None = None, failing: set[int] | None = None) -> None:
        self.counts = dict(counts or {})
        self.failing = failing or set()
        self.writes: list[tuple[int, int]] = []

    async def persist(self, blog_id: int, total: int) -> None:
        if blog_id in self.failing:
            mssg = f"update failed for {blog_id}"
            raise DatabaseError(mssg)
        self.writes.append((blog_id, total))
        self.counts[blog_id] = total


@pytest.fixture
def view_counter(cache_manager: CacheManager) -> ViewCounter:
    return ViewCounter(cache_manager, lock_ttl=30)


@pytest.mark.asyncio
@pytest.mark.parametrize("views", [2, 10, 100])
async def test_concurrent_increments_lose_nothing(view_counter: ViewCounter, views: int) -> None:
    """Test N concurrent views on a fresh post end at seed + N."""
    await gather(*(view_counter.increase(7, 100) for _ in range(views)))
    assert await view_counter.pending(7) == 100 + views


@pytest.mark.asyncio
async def test_two_concurrent_views_of_post_42(view_counter: ViewCounter) -> None:
    """Test that two first views of a post counted 100 end at 102."""
    results = await gather(view_counter.increase(42, 100), view_counter.increase(42, 100))

    assert sorted(results) == [101, 102]
    assert await view_counter.pending(42) == 102


@pytest.mark.asyncio
async def test_seed_is_ignored_once_buffered(view_counter: ViewCounter) -> None:
    """Test that later calls increment the buffered total, not the stale seed."""
    await view_counter.increase(1, 10)
    assert await view_counter.increase(1, 10) == 12
    assert await view_counter.pending(2) is None


@pytest.mark.asyncio
async def test_flush_writes_totals_and_clears_map(
    view_counter: ViewCounter,
    cache_manager: CacheManager,
) -> None:
    """Test a flush persists totals, drops details and empties the map."""
    store = FakeStore({1: 5, 2: 0})
    await view_counter.increase(1, 5)
    await view_counter.increase(2, 0)
    await view_counter.increase(2, 0)
    await cache_manager.set(blog_key(1), {"id": 1})

    report = await view_counter.flush(store.persist)

    assert sorted(report.flushed) == [1, 2]
    assert report.failed == []
    assert store.counts == {1: 6, 2: 2}
    assert await cache_manager.hgetall_raw(VIEW_COUNT_MAP_KEY) == {}
    assert await cache_manager.exists(VIEW_COUNT_DRAINING_KEY, blog_key(1)) == 0


@pytest.mark.asyncio
async def test_second_flush_is_a_no_op(view_counter: ViewCounter) -> None:
    """Test flush idempotence with no views in between."""
    store = FakeStore({3: 9})
    await view_counter.increase(3, 9)

    await view_counter.flush(store.persist)
    writes_after_first = list(store.writes)
    report = await view_counter.flush(store.persist)

    assert report.flushed == []
    assert report.skipped is False
    assert store.writes == writes_after_first
    assert store.counts == {3: 10}


@pytest.mark.asyncio
async def test_failed_rows_are_kept_for_the_next_flush(view_counter: ViewCounter) -> None:
    """Test that a failed row is restored to the live map and retried."""
    store = FakeStore({1: 0, 2: 0}, failing={2})
    await view_counter.increase(1, 0)
    await view_counter.increase(2, 0)

    report = await view_counter.flush(store.persist)

    assert report.flushed == [1]
    assert report.failed == [2]
    assert await view_counter.pending(2) == 1
    assert await view_counter.pending(1) is None

    store.failing.clear()
    retry = await view_counter.flush(store.persist)
    assert retry.flushed == [2]
    assert store.counts[2] == 1


@pytest.mark.asyncio
async def test_failed_row_does_not_overwrite_newer_total(
    view_counter: ViewCounter,
    cache_manager: CacheManager,
) -> None:
    """Test that views counted during the flush win over the restored total."""
    await view_counter.increase(4, 0)

    async def persist(blog_id: int, total: int) -> None:
        await view_counter.increase(blog_id, 0)
        mssg = "write failed"
        raise DatabaseError(mssg)

    report = await view_counter.flush(persist)

    assert report.failed == [4]
    assert await cache_manager.hgetall_raw(VIEW_COUNT_MAP_KEY) == {"4": "2"}


@pytest.mark.asyncio
async def test_views_during_drain_seed_from_draining_total(view_counter: ViewCounter) -> None:
    """Test a view arriving mid-flush continues from the draining total."""
    seen: dict[int, int] = {}

    async def persist(blog_id: int, total: int) -> None:
        seen[blog_id] = await view_counter.increase(blog_id, 0)

    await view_counter.increase(9, 50)
    await view_counter.flush(persist)

    assert seen == {9: 52}
    assert await view_counter.pending(9) == 52


@pytest.mark.asyncio
async def test_flush_skips_when_locked(
    view_counter: ViewCounter,
    cache_manager: CacheManager,
) -> None:
    """Test that a second flush backs off while the lock is held."""
    await cache_manager.set(VIEW_COUNT_LOCK_KEY, "someone-else", 30)
    await view_counter.increase(1, 0)
    store = FakeStore()

    report = await view_counter.flush(store.persist)

    assert report.skipped is True
    assert store.writes == []
    assert await cache_manager.get(VIEW_COUNT_LOCK_KEY) == "someone-else"


@pytest.mark.asyncio
async def test_flush_releases_its_lock(
    view_counter: ViewCounter,
    cache_manager: CacheManager,
) -> None:
    """Test that the lock is gone after a flush."""
    await view_counter.flush(FakeStore().persist)
    assert await cache_manager.exists(VIEW_COUNT_LOCK_KEY) == 0


@pytest.mark.asyncio
async def test_interrupted_flush_is_recovered(
    view_counter: ViewCounter,
    cache_manager: CacheManager,
) -> None:
    """Test that a draining map left behind is merged and flushed."""
    await cache_manager.hsetnx_raw(VIEW_COUNT_DRAINING_KEY, "11", "30")
    store = FakeStore()

    report = await view_counter.flush(store.persist)

    assert report.flushed == [11]
    assert store.counts == {11: 30}


@pytest.mark.asyncio
async def test_increase_falls_back_when_cache_is_down(
    view_counter: ViewCounter,
    cache_manager: CacheManager,
    mocker: MockerFixture,
) -> None:
    """Test that a failing cache returns the stored count."""
    mocker.patch.object(
        cache_manager.memory_client,
        "hincrby_seeded",
        side_effect=RedisError("down"),
    )
    assert await view_counter.increase(1, 77) == 77
