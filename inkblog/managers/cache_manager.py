# inkblog/managers/cache_manager.py
"""Cache manager wrapping Redis (or the in-memory fallback) with JSON encoding."""

from collections.abc import Awaitable
from logging import DEBUG, getLogger
from typing import Any

from redis.exceptions import ConnectionError as RedisConnectionError
from redis.exceptions import RedisError

from inkblog.clients.memory_client import MemoryClient
from inkblog.clients.protocols import CacheClientProtocol
from inkblog.clients.redis_client import RedisClient
from inkblog.configs import CacheConfig
from inkblog.data import CacheStatistics
from inkblog.errors import BASE_EXCEPTION, CacheKeyError
from inkblog.schemas.cache import CacheHealthResponse, CacheStatisticsData
from inkblog.utils.cache_serializer import (
    compress,
    decompress,
    deserialize,
    do_compress,
    serialize,
)
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

BACKEND_ERRORS = (RedisError, *BASE_EXCEPTION)


class CacheManager:
    """
    Key-value access for the cache-aside layer.

    Values are encoded as JSON (orjson) and gzip-compressed above a size
    threshold. Keys are namespaced with the configured prefix. Every backend
    failure surfaces as ``CacheKeyError``; a payload that cannot be decoded
    surfaces as ``CacheDeserializationError`` or ``CacheDecompressionError``.
    Deciding whether a failure is fatal is left to the caller.

    Features:
        - Automatic fallback to in-memory cache when Redis is unavailable at startup
        - Compression for large values
        - Statistics tracking
        - Hash, set, rename and seeded-increment primitives
    """

    def __init__(
        self,
        redis_client: RedisClient | None = None,
        memory_client: MemoryClient | None = None,
        config: CacheConfig | None = None,
    ) -> None:
        """
        Initialize cache manager.

        Args:
            redis_client: Redis client to use when Redis is enabled.
            memory_client: In-memory client used when Redis is disabled or down.
            config: Cache configuration; defaults to values from settings.
        """
        self.cache_config = config or CacheConfig()
        self.redis_client = redis_client or RedisClient()
        self.memory_client = memory_client or MemoryClient(
            cleanup_interval=self.cache_config.cleanup_interval,
        )
        self._client: CacheClientProtocol = self.memory_client
        self.is_redis_available = False
        self.statistics = CacheStatistics()

    async def initialize(self) -> None:
        """
        Connect to Redis when enabled.

        If Redis is disabled or the connection fails, it falls back to the
        in-memory cache.
        """
        try:
            if self.cache_config.enabled_redis:
                await self.redis_client.connect()
                self._client = self.redis_client
                self.is_redis_available = True
                logger.info("Cache manager initialized with Redis.")
                return
            logger.info("Redis disabled. Using in-memory cache.")
        except RedisConnectionError as e:
            logger.warning(f"Redis connection failed: {e}. Falling back to in-memory cache.")
        self._client = self.memory_client
        self.is_redis_available = False
        await self.memory_client.start_lifecycle()
        logger.info("Cache manager initialized with in-memory cache.")

    async def shutdown(self) -> None:
        """Close the active client connections."""
        if self.is_redis_available:
            await self.redis_client.disconnect()
        await self.memory_client.close()
        logger.info("Cache manager shutdown successfully.")

    @property
    def backend(self) -> str:
        return "redis" if self.is_redis_available else "in-memory"

    def _build_key(self, key: str) -> str:
        """Build full cache key with prefix."""
        return f"{self.cache_config.key_prefix}:{key}"

    def _encode(self, value: object) -> str:
        serialized = serialize(value)
        if self.cache_config.compression_enabled and do_compress(
            serialized,
            self.cache_config.compression_threshold,
        ):
            serialized = compress(serialized)
        return serialized

    @staticmethod
    def _decode(raw: str) -> Any:
        return deserialize(decompress(raw))

    async def _guard[T](self, operation: str, key: str, awaitable: Awaitable[T]) -> T:
        """Await a client call, converting backend failures into CacheKeyError."""
        try:
            return await awaitable
        except BACKEND_ERRORS as e:
            logger.warning("Cache %s failed for key %s: %s", operation, key, e)
            self.statistics.record_error()
            raise CacheKeyError(operation, key) from e

    # --- plain values ---

    async def get(self, key: str) -> Any | None:
        """
        Get a decoded value.

        Returns:
            The cached value, or None on a miss.

        Raises:
            CacheKeyError: When the backend fails.
            CacheDeserializationError: When the payload is not valid JSON.
        """
        full_key = self._build_key(key)
        if logger.isEnabledFor(DEBUG):
            logger.debug("Getting from cache: %s", full_key)
        raw = await self._guard("get", key, self._client.get(full_key))

        if raw is None:
            self.statistics.record_miss()
            return None

        self.statistics.record_hit(len(raw.encode("utf-8")))
        return self._decode(raw)

    async def set(
        self,
        key: str,
        value: object,
        ttl: int | None = None,
        *,
        nx: bool = False,
    ) -> bool:
        """
        Encode and store a value.

        Args:
            key: Cache key without the global prefix.
            value: JSON-serializable value or pydantic model.
            ttl: Seconds to live; None keeps the key until deleted.
            nx: Only write when the key does not exist.

        Returns:
            True when the value was written.
        """
        encoded = self._encode(value)
        written = await self._guard(
            "set",
            key,
            self._client.set(self._build_key(key), encoded, ex=ttl, nx=nx),
        )
        if written:
            self.statistics.record_set(len(encoded.encode("utf-8")))
        return written

    async def delete(self, *keys: str) -> int:
        """Delete keys; returns how many existed."""
        if not keys:
            return 0
        full_keys = [self._build_key(key) for key in keys]
        deleted_count = await self._guard("delete", ",".join(keys), self._client.delete(*full_keys))
        if deleted_count:
            self.statistics.record_delete(deleted_count)
        return deleted_count

    async def exists(self, *keys: str) -> int:
        full_keys = [self._build_key(key) for key in keys]
        return await self._guard("exists", ",".join(keys), self._client.exists(*full_keys))

    async def expire(self, key: str, seconds: int) -> bool:
        return await self._guard("expire", key, self._client.expire(self._build_key(key), seconds))

    async def ttl(self, key: str) -> int:
        return await self._guard("ttl", key, self._client.ttl(self._build_key(key)))

    async def rename(self, src: str, dst: str) -> bool:
        """Atomically move ``src`` onto ``dst``. False when ``src`` does not exist."""
        return await self._guard(
            "rename",
            src,
            self._client.rename(self._build_key(src), self._build_key(dst)),
        )

    # --- hashes ---

    async def hget(self, key: str, field: str) -> Any | None:
        """Get a decoded hash field, or None when the field is missing."""
        raw = await self._guard("hget", key, self._client.hget(self._build_key(key), field))
        if raw is None:
            self.statistics.record_miss()
            return None
        self.statistics.record_hit(len(raw.encode("utf-8")))
        return self._decode(raw)

    async def hset(self, key: str, field: str, value: object) -> int:
        encoded = self._encode(value)
        added = await self._guard("hset", key, self._client.hset(self._build_key(key), field, encoded))
        self.statistics.record_set(len(encoded.encode("utf-8")))
        return added

    async def hdel(self, key: str, *fields: str) -> int:
        return await self._guard("hdel", key, self._client.hdel(self._build_key(key), *fields))

    async def hgetall_raw(self, key: str) -> dict[str, str]:
        """Read a whole hash without decoding; used for counter maps."""
        return await self._guard("hgetall", key, self._client.hgetall(self._build_key(key)))

    async def hsetnx_raw(self, key: str, field: str, value: str) -> bool:
        return await self._guard(
            "hsetnx",
            key,
            self._client.hsetnx(self._build_key(key), field, value),
        )

    async def hincrby_seeded(
        self,
        key: str,
        field: str,
        seed: int,
        shadow_key: str | None = None,
    ) -> int:
        """
        Increment a counter field by one in a single atomic step.

        A missing field starts from ``max(seed, shadow_key[field])``.
        """
        return await self._guard(
            "hincrby_seeded",
            key,
            self._client.hincrby_seeded(
                self._build_key(key),
                field,
                seed,
                self._build_key(shadow_key) if shadow_key else None,
            ),
        )

    # --- sets ---

    async def sadd(self, key: str, *members: object) -> int:
        encoded = [self._encode(member) for member in members]
        return await self._guard("sadd", key, self._client.sadd(self._build_key(key), *encoded))

    async def srandmember(self, key: str, count: int) -> list[Any]:
        raw = await self._guard(
            "srandmember",
            key,
            self._client.srandmember(self._build_key(key), count),
        )
        return [self._decode(member) for member in raw]

    async def scard(self, key: str) -> int:
        return await self._guard("scard", key, self._client.scard(self._build_key(key)))

    # --- bulk ---

    async def delete_pattern(self, pattern: str) -> int:
        """
        Delete every key matching a glob pattern (prefix added).

        Uses SCAN with batched deletes so memory stays bounded.

        Returns:
            Number of deleted keys.
        """
        full_pattern = self._build_key(pattern)
        batch_size = self.cache_config.scan_batch_size
        deleted_total = 0
        keys_batch: list[str] = []
        try:
            async for key in self._client.scan_iter(full_pattern, count=batch_size):
                keys_batch.append(key)
                if len(keys_batch) >= batch_size:
                    deleted_total += await self._client.delete(*keys_batch)
                    keys_batch = []

            if keys_batch:
                deleted_total += await self._client.delete(*keys_batch)
        except BACKEND_ERRORS as e:
            logger.warning("Cache delete_pattern failed for %s: %s", full_pattern, e)
            self.statistics.record_error()
            raise CacheKeyError("delete_pattern", pattern) from e

        if deleted_total:
            self.statistics.record_delete(deleted_total)
            logger.info("Cleared %d keys for pattern '%s'.", deleted_total, full_pattern)
        return deleted_total

    async def clear(self) -> int:
        """Delete every key under this manager's prefix."""
        deleted = await self.delete_pattern("*")
        self.statistics.reset()
        return deleted

    # --- health ---

    async def ping(self) -> bool:
        try:
            return await self._client.ping()
        except BACKEND_ERRORS:
            logger.exception("Cache ping failed")
            return False

    async def health_check(self) -> CacheHealthResponse:
        """Report backend, statistics and reachability."""
        result: dict[str, Any] = {
            "backend": self.backend,
            "statistics": self.get_statistics(),
        }

        try:
            if self.is_redis_available:
                result.update(await self.redis_client.health_check())
            else:
                result["status"] = "healthy" if await self._client.ping() else "unhealthy"
                result["info"] = await self._client.info()
        except BACKEND_ERRORS as e:
            result["status"] = "unhealthy"
            result["error"] = str(e)

        return CacheHealthResponse(**result)

    def get_statistics(self) -> CacheStatisticsData:
        return self.statistics.to_data()

    def reset_statistics(self) -> None:
        self.statistics.reset()
        logger.info("Cache statistics reset.")
