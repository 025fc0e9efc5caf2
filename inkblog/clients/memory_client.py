"""In-memory cache client for fallback when Redis is not available."""

from asyncio import CancelledError, Lock, Task, create_task
from asyncio import sleep as asyncio_sleep
from collections import OrderedDict
from collections.abc import AsyncGenerator
from contextlib import suppress
from fnmatch import fnmatchcase
from logging import DEBUG, getLogger
from random import sample
from sys import getsizeof
from time import time

from redis.exceptions import ResponseError

from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

type MemoryValue = str | dict[str, str] | set[str]

WRONGTYPE = "WRONGTYPE Operation against a key holding the wrong kind of value"


class MemoryClient:
    """
    An asynchronous in-memory cache client that mimics RedisClient.

    Strings, hashes and sets are supported. Every operation runs inside one
    critical section with no await in between, which gives the same
    per-command atomicity Redis provides.

    Features:
        - Active expiration via background cleanup task
        - Memory limits with LRU eviction
        - Entry count limits
        - Pattern-based key scanning
    """

    DEFAULT_MAX_ENTRIES: int = 100_000
    DEFAULT_MAX_MEMORY_MB: int = 100
    DEFAULT_CLEANUP_INTERVAL: int = 60  # seconds
    DEFAULT_CLEANUP_BATCH_SIZE: int = 1000

    def __init__(
        self,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        max_memory_mb: int = DEFAULT_MAX_MEMORY_MB,
        cleanup_interval: int = DEFAULT_CLEANUP_INTERVAL,
    ) -> None:
        """
        Initialize the MemoryClient with configurable limits.

        Args:
            max_entries: Maximum number of cache entries before LRU eviction.
            max_memory_mb: Maximum memory usage in megabytes before eviction.
            cleanup_interval: Interval in seconds for background cleanup.
        """
        self._cache: OrderedDict[str, MemoryValue] = OrderedDict()
        self._sizes: dict[str, int] = {}
        self._ttl: dict[str, float] = {}
        self.is_connected: bool = True
        self._cleanup_task: Task[None] | None = None

        self._max_entries = max_entries
        self._max_memory_bytes = max_memory_mb * 1024 * 1024
        self._cleanup_interval = cleanup_interval
        self._cleanup_batch_size = self.DEFAULT_CLEANUP_BATCH_SIZE

        self._current_memory: int = 0
        self._lock = Lock()

    async def start_lifecycle(self) -> None:
        """Start background maintenance tasks."""
        async with self._lock:
            if not self._cleanup_task:
                self.is_connected = True
                self._cleanup_task = create_task(self._cleanup_loop())
                logger.info("MemoryClient active expiration task started.")

    async def _cleanup_loop(self) -> None:
        while self.is_connected:
            try:
                await asyncio_sleep(self._cleanup_interval)
                await self._active_expire()
            except CancelledError:
                break
            except Exception:
                logger.exception("Error in memory cleanup loop")

    async def _active_expire(self) -> None:
        """Scan and remove expired keys in batches."""
        async with self._lock:
            if not self._ttl:
                return

            keys = list(self._ttl.keys())
            expired_keys: list[str] = []

            for i in range(0, len(keys), self._cleanup_batch_size):
                batch = keys[i : i + self._cleanup_batch_size]
                expired_keys.extend(k for k in batch if self._is_expired(k))

            if expired_keys:
                count = self._delete_internal(*expired_keys)
                if logger.isEnabledFor(DEBUG):
                    logger.debug("Memory cleanup: removed %d expired keys.", count)

    # --- internal helpers, caller holds the lock ---

    def _is_expired(self, key: str) -> bool:
        if key in self._ttl:
            return time() > self._ttl[key]
        return False

    def _live(self, key: str) -> MemoryValue | None:
        if self._is_expired(key):
            self._delete_internal(key)
            return None
        value = self._cache.get(key)
        if value is not None:
            self._cache.move_to_end(key)
        return value

    @staticmethod
    def _estimate_entry_size(key: str, value: MemoryValue) -> int:
        size = getsizeof(key) + getsizeof(value)
        if isinstance(value, dict):
            size += sum(getsizeof(k) + getsizeof(v) for k, v in value.items())
        elif isinstance(value, set):
            size += sum(getsizeof(m) for m in value)
        return size

    def _evict_oldest(self) -> None:
        """Evict the least recently used entry."""
        if self._cache:
            key, _ = self._cache.popitem(last=False)
            self._current_memory -= self._sizes.pop(key, 0)
            self._ttl.pop(key, None)

    def _store(self, key: str, value: MemoryValue) -> None:
        """Insert or replace ``key`` keeping memory accounting and LRU order."""
        entry_size = self._estimate_entry_size(key, value)
        self._current_memory -= self._sizes.pop(key, 0)
        is_new = key not in self._cache
        if is_new:
            while (
                len(self._cache) >= self._max_entries
                or self._current_memory + entry_size > self._max_memory_bytes
            ) and self._cache:
                self._evict_oldest()
        self._cache[key] = value
        self._cache.move_to_end(key)
        self._sizes[key] = entry_size
        self._current_memory += entry_size

    def _set_field(self, key: str, mapping: dict[str, str], field: str, value: str) -> None:
        """Write one field of a stored hash in place, adjusting its size by the delta."""
        previous = mapping.get(field)
        if previous is None:
            delta = getsizeof(field) + getsizeof(value)
        else:
            delta = getsizeof(value) - getsizeof(previous)
        mapping[field] = value
        self._sizes[key] = self._sizes.get(key, 0) + delta
        self._current_memory += delta

    def _delete_internal(self, *keys: str) -> int:
        count = 0
        for key in keys:
            if key in self._cache:
                del self._cache[key]
                self._current_memory -= self._sizes.pop(key, 0)
                self._ttl.pop(key, None)
                count += 1
        return count

    def _hash(self, key: str) -> dict[str, str] | None:
        value = self._live(key)
        if value is not None and not isinstance(value, dict):
            raise ResponseError(WRONGTYPE)
        return value

    def _set_members(self, key: str) -> set[str] | None:
        value = self._live(key)
        if value is not None and not isinstance(value, set):
            raise ResponseError(WRONGTYPE)
        return value

    # --- strings ---

    async def get(self, key: str) -> str | None:
        """Get a value from the cache."""
        async with self._lock:
            value = self._live(key)
            if value is not None and not isinstance(value, str):
                raise ResponseError(WRONGTYPE)
            return value

    async def set(self, key: str, value: str, ex: int | None = None, *, nx: bool = False) -> bool:
        """Set a value with optional TTL. With ``nx`` only when the key is absent."""
        async with self._lock:
            if nx and self._live(key) is not None:
                return False
            self._store(key, value)
            if ex:
                self._ttl[key] = time() + ex
            else:
                # Redis SET removes TTL unless KEEPTTL is used
                self._ttl.pop(key, None)
            return True

    async def delete(self, *keys: str) -> int:
        """Delete one or more keys from the cache."""
        async with self._lock:
            return self._delete_internal(*keys)

    async def exists(self, *keys: str) -> int:
        """Count how many of the keys exist."""
        async with self._lock:
            return sum(1 for key in keys if self._live(key) is not None)

    async def rename(self, src: str, dst: str) -> bool:
        """Move ``src`` onto ``dst`` with its TTL. False when ``src`` is missing."""
        async with self._lock:
            value = self._live(src)
            if value is None:
                return False
            expires_at = self._ttl.get(src)
            self._delete_internal(src, dst)
            self._store(dst, value)
            if expires_at is not None:
                self._ttl[dst] = expires_at
            return True

    # --- hashes ---

    async def hget(self, key: str, field: str) -> str | None:
        async with self._lock:
            mapping = self._hash(key)
            return mapping.get(field) if mapping else None

    async def hset(self, key: str, field: str, value: str) -> int:
        async with self._lock:
            mapping = dict(self._hash(key) or {})
            added = int(field not in mapping)
            mapping[field] = value
            self._store(key, mapping)
            return added

    async def hsetnx(self, key: str, field: str, value: str) -> bool:
        async with self._lock:
            mapping = dict(self._hash(key) or {})
            if field in mapping:
                return False
            mapping[field] = value
            self._store(key, mapping)
            return True

    async def hdel(self, key: str, *fields: str) -> int:
        async with self._lock:
            mapping = self._hash(key)
            if not mapping:
                return 0
            remaining = {k: v for k, v in mapping.items() if k not in fields}
            removed = len(mapping) - len(remaining)
            if remaining:
                self._store(key, remaining)
            else:
                self._delete_internal(key)
            return removed

    async def hgetall(self, key: str) -> dict[str, str]:
        async with self._lock:
            return dict(self._hash(key) or {})

    async def hincrby_seeded(
        self,
        key: str,
        field: str,
        seed: int,
        shadow_key: str | None = None,
    ) -> int:
        """Increment ``field`` by one; a missing field starts from the seed."""
        async with self._lock:
            mapping = self._hash(key)
            if mapping is not None and field in mapping:
                current = int(mapping[field])
            else:
                current = seed
                shadow = self._hash(shadow_key) if shadow_key else None
                if shadow and field in shadow:
                    current = max(current, int(shadow[field]))
            total = str(current + 1)
            if mapping is None:
                self._store(key, {field: total})
            else:
                self._set_field(key, mapping, field, total)
            return current + 1

    # --- sets ---

    async def sadd(self, key: str, *members: str) -> int:
        async with self._lock:
            current = set(self._set_members(key) or set())
            added = len(set(members) - current)
            current.update(members)
            if current:
                self._store(key, current)
            return added

    async def srandmember(self, key: str, count: int) -> list[str]:
        async with self._lock:
            members = self._set_members(key)
            if not members:
                return []
            return sample(sorted(members), min(count, len(members)))

    async def scard(self, key: str) -> int:
        async with self._lock:
            return len(self._set_members(key) or ())

    # --- keyspace ---

    async def ping(self) -> bool:
        """Check if the cache is alive."""
        return self.is_connected

    async def info(self) -> dict[str, str | int]:
        """Get information about the in-memory cache."""
        async with self._lock:
            return {
                "server": "In-Memory Cache",
                "connected_clients": 1,
                "used_memory_bytes": self._current_memory,
                "used_memory_human": f"{self._current_memory / 1024 / 1024:.2f}MB",
                "total_keys": len(self._cache),
                "max_entries": self._max_entries,
                "max_memory_mb": self._max_memory_bytes // 1024 // 1024,
            }

    async def ttl(self, key: str) -> int:
        """Get the remaining time to live of a key."""
        async with self._lock:
            if self._live(key) is None:
                return -2
            if key not in self._ttl:
                return -1
            return int(self._ttl[key] - time())

    async def expire(self, key: str, seconds: int) -> bool:
        """Set an expiration time on a key."""
        async with self._lock:
            if self._live(key) is None:
                return False
            self._ttl[key] = time() + seconds
            return True

    async def scan_iter(
        self,
        pattern: str,
        count: int = 100,  # noqa: ARG002 - kept for API compatibility with RedisClient
    ) -> AsyncGenerator[str]:
        """
        Yield keys matching the pattern.

        Uses glob matching (``*``, ``?`` and ``[...]``) like Redis SCAN MATCH.
        """
        async with self._lock:
            keys = [key for key in self._cache if not self._is_expired(key)]

        for key in keys:
            if fnmatchcase(key, pattern):
                yield key

    async def close(self) -> None:
        """Stop the client and cleanup tasks."""
        async with self._lock:
            self.is_connected = False
            task, self._cleanup_task = self._cleanup_task, None
        if task:
            task.cancel()
            with suppress(CancelledError):
                await task
