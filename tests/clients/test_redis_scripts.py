"""Tests running the seeded increment script and the view count flush on a fake Redis server."""

from asyncio import gather
from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from fakeredis import FakeServer
from fakeredis.aioredis import FakeRedis
from pytest_mock import MockerFixture

from inkblog.clients.redis_client import RedisClient
from inkblog.configs import CacheConfig
from inkblog.errors import DatabaseError
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.view_counter import ViewCounter
from inkblog.utils.cache_keys import (
    VIEW_COUNT_DRAINING_KEY,
    VIEW_COUNT_LOCK_KEY,
    VIEW_COUNT_MAP_KEY,
    blog_key,
)


@pytest.fixture
def fake_redis(mocker: MockerFixture) -> FakeRedis:
    """Lua-capable fake server that RedisClient.connect() is routed to."""
    fake = FakeRedis(server=FakeServer(), decode_responses=True)
    mocker.patch(
        "inkblog.clients.redis_client.ConnectionPool",
        return_value=MagicMock(disconnect=AsyncMock()),
    )
    mocker.patch("inkblog.clients.redis_client.Redis", return_value=fake)
    return fake


@pytest.fixture
async def redis_client(fake_redis: FakeRedis) -> AsyncGenerator[RedisClient]:
    client = RedisClient()
    await client.connect()
    yield client
    await client.disconnect()


@pytest.fixture
async def redis_cache(fake_redis: FakeRedis) -> AsyncGenerator[CacheManager]:
    manager = CacheManager(config=CacheConfig(enabled_redis=True))
    await manager.initialize()
    yield manager
    await manager.shutdown()


@pytest.fixture
def view_counter(redis_cache: CacheManager) -> ViewCounter:
    return ViewCounter(redis_cache, lock_ttl=30)


class TestSeededIncrementScript:
    """The Lua script behind RedisClient.hincrby_seeded."""

    @pytest.mark.asyncio
    async def test_missing_field_starts_from_seed(self, redis_client: RedisClient, fake_redis: FakeRedis) -> None:
        """Test the first increment starts at seed + 1 and later ones use HINCRBY."""
        assert await redis_client.hincrby_seeded("views", "42", 100) == 101
        assert await redis_client.hincrby_seeded("views", "42", 100) == 102
        assert await fake_redis.hget("views", "42") == "102"

    @pytest.mark.asyncio
    async def test_larger_shadow_total_wins(self, redis_client: RedisClient, fake_redis: FakeRedis) -> None:
        """Test a draining total above the seed is the starting point."""
        await fake_redis.hset("draining", "7", "50")
        assert await redis_client.hincrby_seeded("views", "7", 10, "draining") == 51

    @pytest.mark.asyncio
    async def test_smaller_shadow_total_loses(self, redis_client: RedisClient, fake_redis: FakeRedis) -> None:
        """Test the seed wins when the draining total is lower."""
        await fake_redis.hset("draining", "8", "5")
        assert await redis_client.hincrby_seeded("views", "8", 10, "draining") == 11

    @pytest.mark.asyncio
    async def test_buffered_field_ignores_shadow(self, redis_client: RedisClient, fake_redis: FakeRedis) -> None:
        """Test an existing live field is incremented whatever the draining map holds."""
        await fake_redis.hset("views", "9", "3")
        await fake_redis.hset("draining", "9", "50")
        assert await redis_client.hincrby_seeded("views", "9", 0, "draining") == 4

    @pytest.mark.asyncio
    async def test_rename_missing_source(self, redis_client: RedisClient) -> None:
        """Test renaming an absent key reports False and a present one moves it."""
        assert await redis_client.rename("nothing", "other") is False

        await redis_client.set("source", "v")
        assert await redis_client.rename("source", "other") is True
        assert await redis_client.get("other") == "v"
        assert await redis_client.exists("source") == 0


class TestViewCounterOnRedis:
    """ViewCounter over a CacheManager backed by Redis."""

    @pytest.mark.asyncio
    async def test_manager_uses_redis(self, redis_cache: CacheManager) -> None:
        """Test the manager picked the Redis backend."""
        assert redis_cache.is_redis_available is True

    @pytest.mark.asyncio
    @pytest.mark.parametrize("views", [2, 10, 100])
    async def test_concurrent_increments_lose_nothing(self, view_counter: ViewCounter, views: int) -> None:
        """Test N concurrent views on a fresh post end at seed + N."""
        await gather(*(view_counter.increase(7, 100) for _ in range(views)))
        assert await view_counter.pending(7) == 100 + views

    @pytest.mark.asyncio
    async def test_two_concurrent_views_of_post_42(self, view_counter: ViewCounter) -> None:
        """Test that two first views of a post counted 100 end at 102."""
        results = await gather(view_counter.increase(42, 100), view_counter.increase(42, 100))

        assert sorted(results) == [101, 102]
        assert await view_counter.pending(42) == 102

    @pytest.mark.asyncio
    async def test_flush_persists_and_restores_failures(
        self,
        view_counter: ViewCounter,
        redis_cache: CacheManager,
    ) -> None:
        """Test a flush writes totals, drops details and puts failed rows back."""
        await view_counter.increase(1, 5)
        await view_counter.increase(2, 0)
        await view_counter.increase(2, 0)
        await view_counter.increase(3, 7)
        await redis_cache.set(blog_key(1), {"id": 1})
        writes: dict[int, int] = {}

        async def persist(blog_id: int, total: int) -> None:
            if blog_id == 3:
                mssg = "update failed for 3"
                raise DatabaseError(mssg)
            writes[blog_id] = total

        report = await view_counter.flush(persist)

        assert sorted(report.flushed) == [1, 2]
        assert report.failed == [3]
        assert writes == {1: 6, 2: 2}
        assert await redis_cache.exists(blog_key(1), VIEW_COUNT_DRAINING_KEY, VIEW_COUNT_LOCK_KEY) == 0
        assert await redis_cache.hgetall_raw(VIEW_COUNT_MAP_KEY) == {"3": "8"}

    @pytest.mark.asyncio
    async def test_view_during_drain_continues_from_draining_total(self, view_counter: ViewCounter) -> None:
        """Test a view counted mid-flush starts from the draining total, not the stale seed."""
        await view_counter.increase(1, 5)
        await view_counter.increase(1, 5)

        async def persist(blog_id: int, total: int) -> None:
            await view_counter.increase(blog_id, 5)

        report = await view_counter.flush(persist)

        assert report.flushed == [1]
        assert await view_counter.pending(1) == 8

    @pytest.mark.asyncio
    async def test_second_flush_is_empty(self, view_counter: ViewCounter) -> None:
        """Test a flush with nothing buffered finds no live map."""
        await view_counter.increase(4, 0)

        async def persist(blog_id: int, total: int) -> None:
            return None

        assert (await view_counter.flush(persist)).flushed == [4]
        report = await view_counter.flush(persist)
        assert report.flushed == []
        assert report.skipped is False

    @pytest.mark.asyncio
    async def test_flush_skipped_while_locked(self, view_counter: ViewCounter, redis_cache: CacheManager) -> None:
        """Test a held lock makes a second flusher back off."""
        await redis_cache.set(VIEW_COUNT_LOCK_KEY, "other-worker", 30, nx=True)
        await view_counter.increase(5, 0)

        async def persist(blog_id: int, total: int) -> None:
            return None

        report = await view_counter.flush(persist)

        assert report.skipped is True
        assert await view_counter.pending(5) == 1
