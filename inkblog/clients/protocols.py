"""Protocol definitions for cache client implementations."""

from collections.abc import AsyncIterator, Awaitable
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class CacheClientProtocol(Protocol):
    """
    Protocol for cache client implementations.

    Both RedisClient and MemoryClient conform to this protocol. Values are
    opaque strings; callers handle their own encoding.
    """

    def get(self, key: str) -> Awaitable[str | None]:
        """Get a value from the cache."""
        ...

    def set(
        self,
        key: str,
        value: str,
        ex: int | None = None,
        *,
        nx: bool = False,
    ) -> Awaitable[bool]:
        """Set a value with optional TTL. With ``nx`` only set when absent."""
        ...

    def delete(self, *keys: str) -> Awaitable[int]:
        """Delete one or more keys from the cache."""
        ...

    def exists(self, *keys: str) -> Awaitable[int]:
        """Count how many of the keys exist."""
        ...

    def expire(self, key: str, seconds: int) -> Awaitable[bool]:
        """Set an expiration time on a key."""
        ...

    def ttl(self, key: str) -> Awaitable[int]:
        """Get the remaining TTL of a key (-1 no expiry, -2 missing)."""
        ...

    def rename(self, src: str, dst: str) -> Awaitable[bool]:
        """Atomically rename ``src`` to ``dst``. False when ``src`` is missing."""
        ...

    def hget(self, key: str, field: str) -> Awaitable[str | None]:
        """Read one hash field."""
        ...

    def hset(self, key: str, field: str, value: str) -> Awaitable[int]:
        """Write one hash field."""
        ...

    def hsetnx(self, key: str, field: str, value: str) -> Awaitable[bool]:
        """Write one hash field only when it does not exist."""
        ...

    def hdel(self, key: str, *fields: str) -> Awaitable[int]:
        """Delete hash fields."""
        ...

    def hgetall(self, key: str) -> Awaitable[dict[str, str]]:
        """Read a whole hash."""
        ...

    def hincrby_seeded(
        self,
        key: str,
        field: str,
        seed: int,
        shadow_key: str | None = None,
    ) -> Awaitable[int]:
        """
        Atomically increment a hash field by one, initialising a missing field.

        A missing field starts from ``max(seed, shadow_key[field])`` so the
        result is that value plus one.
        """
        ...

    def sadd(self, key: str, *members: str) -> Awaitable[int]:
        """Add members to a set."""
        ...

    def srandmember(self, key: str, count: int) -> Awaitable[list[str]]:
        """Return up to ``count`` distinct random members."""
        ...

    def scard(self, key: str) -> Awaitable[int]:
        """Return the set cardinality."""
        ...

    def scan_iter(self, pattern: str, count: int = 100) -> AsyncIterator[str]:
        """Yield keys matching a glob pattern."""
        ...

    def ping(self) -> Awaitable[bool]:
        """Check if the cache server is reachable."""
        ...

    def info(self) -> Awaitable[dict[str, Any]]:
        """Get information about the cache."""
        ...
