# inkblog/clients/redis_client.py
"""Redis client module for cache operations."""

from collections.abc import AsyncGenerator, Awaitable
from logging import getLogger
from time import perf_counter
from typing import Any

from redis.asyncio import ConnectionPool, Redis
from redis.commands.core import AsyncScript
from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError, ResponseError
from redis.exceptions import TimeoutError as RedisTimeoutError

from inkblog.configs import RedisCacheConfig, pool_kwargs
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

# KEYS[1] live hash, KEYS[2] shadow hash consulted for a missing field.
# ARGV[1] field, ARGV[2] seed.
SEEDED_HINCRBY_SCRIPT = """
if redis.call('HEXISTS', KEYS[1], ARGV[1]) == 1 then
    return redis.call('HINCRBY', KEYS[1], ARGV[1], 1)
end
local start = tonumber(ARGV[2])
if #KEYS > 1 then
    local pending = redis.call('HGET', KEYS[2], ARGV[1])
    if pending then
        pending = tonumber(pending)
        if pending and pending > start then
            start = pending
        end
    end
end
redis.call('HSET', KEYS[1], ARGV[1], start + 1)
return start + 1
"""


class RedisClient:
    """Async Redis client wrapper with connection pooling."""

    def __init__(self, config: RedisCacheConfig | None = None) -> None:
        """Initialize Redis client."""
        self.config = pool_kwargs(config)
        self._pool: ConnectionPool | None = None
        self._redis: Redis | None = None
        self._seeded_hincrby: AsyncScript | None = None

    async def connect(self) -> None:
        """Establish Redis connection pool."""
        try:
            self._pool = ConnectionPool(**self.config)
            self._redis = Redis(connection_pool=self._pool)
            self._seeded_hincrby = self._redis.register_script(SEEDED_HINCRBY_SCRIPT)
            if not await self.ping():
                mssg = "Redis ping returned False"
                raise RedisConnectionError(mssg)
            logger.info("Redis connection successful. Cache is using Redis.")
        except (ConnectionError, RedisTimeoutError, RedisError) as e:
            logger.exception("Failed to connect to Redis")
            mssg = f"Cannot connect to Redis at {self.config.get('host')}:{self.config.get('port')}"
            raise RedisConnectionError(mssg) from e

    async def disconnect(self) -> None:
        """Close Redis connection pool."""
        if self._redis is not None:
            await self._redis.aclose()
            self._redis = None
            logger.info("Redis connection closed.")
        if self._pool is not None:
            await self._pool.disconnect()
            self._pool = None

    @property
    def client(self) -> Redis:
        """Get Redis client instance."""
        if self._redis is None:
            mssg = "Redis client not initialized. Call connect() first."
            raise RuntimeError(mssg)
        return self._redis

    async def _execute[T](self, operation: str, target: str, awaitable: Awaitable[T]) -> T:
        try:
            return await awaitable
        except RedisError as e:
            logger.exception(f"Redis {operation} failed for {target}")
            mssg = f"Cache {operation} operation failed for {target}: {e}"
            raise RedisConnectionError(mssg) from e

    async def get(self, key: str) -> str | None:
        """Get value from cache."""
        return await self._execute("get", key, self.client.get(key))

    async def set(self, key: str, value: str, ex: int | None = None, *, nx: bool = False) -> bool:
        """Set value in cache."""
        result = await self._execute("set", key, self.client.set(key, value, ex=ex, nx=nx))
        return bool(result)

    async def delete(self, *keys: str) -> int:
        """Delete keys from cache."""
        if not keys:
            return 0
        return await self._execute("delete", str(keys), self.client.delete(*keys))

    async def exists(self, *keys: str) -> int:
        """Check if keys exist in cache."""
        if not keys:
            return 0
        return await self._execute("exists", str(keys), self.client.exists(*keys))

    async def expire(self, key: str, seconds: int) -> bool:
        """Set expiration on key."""
        return bool(await self._execute("expire", key, self.client.expire(key, seconds)))

    async def ttl(self, key: str) -> int:
        """Get remaining time to live."""
        return await self._execute("ttl", key, self.client.ttl(key))

    async def rename(self, src: str, dst: str) -> bool:
        """Rename ``src`` to ``dst``, overwriting ``dst``. False when ``src`` is missing."""
        try:
            await self.client.rename(src, dst)
        except ResponseError as e:
            if "no such key" in str(e).lower():
                return False
            logger.exception(f"Failed to rename {src} to {dst}")
            mssg = f"Cache rename operation failed for {src}: {e}"
            raise RedisConnectionError(mssg) from e
        except RedisError as e:
            logger.exception(f"Failed to rename {src} to {dst}")
            mssg = f"Cache rename operation failed for {src}: {e}"
            raise RedisConnectionError(mssg) from e
        return True

    async def hget(self, key: str, field: str) -> str | None:
        return await self._execute("hget", key, self.client.hget(key, field))

    async def hset(self, key: str, field: str, value: str) -> int:
        return await self._execute("hset", key, self.client.hset(key, field, value))

    async def hsetnx(self, key: str, field: str, value: str) -> bool:
        return bool(await self._execute("hsetnx", key, self.client.hsetnx(key, field, value)))

    async def hdel(self, key: str, *fields: str) -> int:
        if not fields:
            return 0
        return await self._execute("hdel", key, self.client.hdel(key, *fields))

    async def hgetall(self, key: str) -> dict[str, str]:
        return await self._execute("hgetall", key, self.client.hgetall(key))

    async def hincrby_seeded(
        self,
        key: str,
        field: str,
        seed: int,
        shadow_key: str | None = None,
    ) -> int:
        """Run the seeded increment script; one round trip, atomic on the server."""
        if self._seeded_hincrby is None:
            mssg = "Redis client not initialized. Call connect() first."
            raise RuntimeError(mssg)
        result = await self._execute(
            "hincrby_seeded",
            key,
            self._seeded_hincrby(keys=[key, shadow_key] if shadow_key else [key], args=[field, seed]),
        )
        return int(result)

    async def sadd(self, key: str, *members: str) -> int:
        if not members:
            return 0
        return await self._execute("sadd", key, self.client.sadd(key, *members))

    async def srandmember(self, key: str, count: int) -> list[str]:
        result = await self._execute("srandmember", key, self.client.srandmember(key, count))
        return list(result or [])

    async def scard(self, key: str) -> int:
        return await self._execute("scard", key, self.client.scard(key))

    async def ping(self) -> bool:
        """Ping Redis server."""
        return bool(await self._execute("ping", "server", self.client.ping()))

    async def info(self) -> dict[str, Any]:
        """Get Redis server info."""
        info = await self._execute("info", "server", self.client.info())
        return info if isinstance(info, dict) else {}

    async def health_check(self) -> dict[str, Any]:
        """Ping with latency plus a few server stats."""
        start = perf_counter()
        healthy = await self.ping()
        latency_ms = (perf_counter() - start) * 1000
        info = await self.info()
        return {
            "status": "healthy" if healthy else "unhealthy",
            "latency_ms": round(latency_ms, 2),
            "connected_clients": info.get("connected_clients"),
            "used_memory_human": info.get("used_memory_human"),
            "uptime_seconds": info.get("uptime_in_seconds"),
            "redis_version": info.get("redis_version"),
        }

    async def scan_iter(self, pattern: str, count: int = 100) -> AsyncGenerator[str]:
        """Yield keys matching the pattern with a SCAN cursor loop."""
        cursor = 0
        while True:
            try:
                cursor, keys = await self.client.scan(cursor, match=pattern, count=count)
            except RedisError as e:
                logger.exception(f"Failed to scan keys with pattern {pattern}")
                mssg = f"Cache scan_iter operation failed for pattern {pattern}: {e}"
                raise RedisConnectionError(mssg) from e

            for key in keys:
                yield key.decode("utf-8") if isinstance(key, bytes) else key

            if cursor == 0:
                break
