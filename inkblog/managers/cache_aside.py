"""Fail-open building blocks shared by the domain cache managers."""

from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import Any

from pydantic import TypeAdapter, ValidationError
from redis.exceptions import RedisError

from inkblog.errors import (
    BASE_EXCEPTION,
    CacheExceptionError,
    CachePayloadError,
)
from inkblog.managers.cache_manager import CacheManager
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

CACHE_FAILURES = (CacheExceptionError, RedisError, *BASE_EXCEPTION)


class CacheAside:
    """
    Read-through and invalidate helpers over a CacheManager.

    Reads never raise: a backend failure is a miss, and a payload that fails
    to decode or validate is a miss whose key is then dropped. Writes and
    deletes never raise either; they log and return False.
    """

    def __init__(self, cache: CacheManager) -> None:
        self.cache = cache

    async def _read(self, key: str) -> Any | None:
        try:
            return await self.cache.get(key)
        except CachePayloadError:
            logger.warning("Corrupt cache entry %s, dropping it", key)
            await self._drop(key)
        except CACHE_FAILURES as e:
            logger.warning("Cache read failed for %s: %s", key, e)
        return None

    async def _read_as[T](self, key: str, adapter: TypeAdapter[T]) -> T | None:
        raw = await self._read(key)
        if raw is None:
            return None
        return await self._validate(key, adapter, raw)

    async def _validate[T](self, key: str, adapter: TypeAdapter[T], raw: object) -> T | None:
        try:
            return adapter.validate_python(raw)
        except ValidationError:
            logger.warning("Cached value for %s does not match its schema, dropping it", key)
            await self._drop(key)
            return None

    async def _write[T](
        self,
        key: str,
        value: T,
        adapter: TypeAdapter[T] | None = None,
        ttl: int | None = None,
    ) -> bool:
        payload = adapter.dump_python(value, mode="json") if adapter else value
        try:
            return await self.cache.set(key, payload, ttl)
        except CACHE_FAILURES as e:
            logger.warning("Cache write failed for %s: %s", key, e)
            return False

    async def _drop(self, *keys: str) -> bool:
        if not keys:
            return True
        try:
            await self.cache.delete(*keys)
        except CACHE_FAILURES as e:
            logger.warning("Cache invalidation failed for %s: %s", keys, e)
            return False
        return True

    async def _read_through[T](
        self,
        key: str,
        adapter: TypeAdapter[T],
        loader: Callable[[], Awaitable[T]],
        ttl: int | None = None,
    ) -> T:
        """Return the cached value or load, store and return it."""
        cached = await self._read_as(key, adapter)
        if cached is not None:
            return cached

        value = await loader()
        await self._write(key, value, adapter, ttl)
        return value
