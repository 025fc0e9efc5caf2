"""Buffered view counters and their swap-then-drain flush."""

from collections.abc import Awaitable, Callable
from logging import getLogger
from uuid import uuid4

from inkblog.errors import BASE_EXCEPTION, DatabaseError
from inkblog.managers.cache_aside import CACHE_FAILURES, CacheAside
from inkblog.managers.cache_manager import CacheManager
from inkblog.schemas.cache import FlushReport
from inkblog.utils.cache_keys import (
    VIEW_COUNT_DRAINING_KEY,
    VIEW_COUNT_LOCK_KEY,
    VIEW_COUNT_MAP_KEY,
    blog_key,
    view_count_field,
)
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

type PersistViewCount = Callable[[int, int], Awaitable[None]]


class ViewCounter(CacheAside):
    """
    View counts buffered in a cache hash between nightly flushes.

    Each field of ``{eye-count-map}`` holds the running total for a post,
    not an increment. The flush moves the live map aside with RENAME, so
    views that arrive while it drains start a fresh map seeded from the
    draining value and never go backwards.
    """

    def __init__(self, cache: CacheManager, lock_ttl: int = 600) -> None:
        super().__init__(cache)
        self.lock_ttl = lock_ttl

    async def increase(self, blog_id: int, fallback_count: int) -> int:
        """
        Count one view and return the new total.

        Args:
            blog_id: Post being viewed.
            fallback_count: Stored count, used to seed a post not yet in the map.

        Returns:
            The buffered total, or ``fallback_count`` when the cache is down.
        """
        try:
            return await self.cache.hincrby_seeded(
                VIEW_COUNT_MAP_KEY,
                view_count_field(blog_id),
                fallback_count,
                shadow_key=VIEW_COUNT_DRAINING_KEY,
            )
        except CACHE_FAILURES as e:
            logger.warning("View count increment failed for blog %s: %s", blog_id, e)
            return fallback_count

    async def pending(self, blog_id: int) -> int | None:
        """Buffered total for a post, or None when nothing is buffered."""
        try:
            value = await self.cache.hget(VIEW_COUNT_MAP_KEY, view_count_field(blog_id))
        except CACHE_FAILURES as e:
            logger.warning("View count read failed for blog %s: %s", blog_id, e)
            return None
        return int(value) if value is not None else None

    async def flush(self, persist: PersistViewCount) -> FlushReport:
        """
        Write every buffered total to the store.

        A second flush with no views in between finds no live map and
        returns an empty report. Rows that fail to persist are merged back
        into the live map, unless a newer total already sits there.

        Args:
            persist: Writes one ``(blog_id, total)`` pair; raising marks the row failed.

        Returns:
            Which ids were flushed and which failed, or ``skipped`` when
            another flush holds the lock.
        """
        token = uuid4().hex
        try:
            acquired = await self.cache.set(VIEW_COUNT_LOCK_KEY, token, self.lock_ttl, nx=True)
        except CACHE_FAILURES as e:
            logger.warning("View count flush could not take its lock: %s", e)
            return FlushReport(skipped=True)
        if not acquired:
            logger.info("View count flush already running elsewhere, skipping.")
            return FlushReport(skipped=True)

        try:
            return await self._drain(persist)
        finally:
            await self._release(token)

    async def _drain(self, persist: PersistViewCount) -> FlushReport:
        await self._recover()

        if not await self.cache.rename(VIEW_COUNT_MAP_KEY, VIEW_COUNT_DRAINING_KEY):
            logger.info("No buffered view counts to flush.")
            return FlushReport()

        entries = await self.cache.hgetall_raw(VIEW_COUNT_DRAINING_KEY)
        report = FlushReport()
        failed_entries: dict[str, str] = {}

        for field, raw_total in entries.items():
            blog_id = int(field)
            try:
                await persist(blog_id, int(raw_total))
            except (DatabaseError, ValueError, *BASE_EXCEPTION):
                logger.exception("Persisting view count for blog %s failed", blog_id)
                failed_entries[field] = raw_total
                report.failed.append(blog_id)
            else:
                report.flushed.append(blog_id)

        await self._drop(*(blog_key(blog_id) for blog_id in report.flushed))

        for field, raw_total in failed_entries.items():
            await self.cache.hsetnx_raw(VIEW_COUNT_MAP_KEY, field, raw_total)

        await self.cache.delete(VIEW_COUNT_DRAINING_KEY)
        logger.info(
            "Flushed %d view counts, %d failed.",
            len(report.flushed),
            len(report.failed),
        )
        return report

    async def _recover(self) -> None:
        """Merge a draining map left behind by an interrupted flush."""
        leftovers = await self.cache.hgetall_raw(VIEW_COUNT_DRAINING_KEY)
        if not leftovers:
            return
        logger.warning("Recovering %d view counts from an interrupted flush.", len(leftovers))
        for field, raw_total in leftovers.items():
            await self.cache.hsetnx_raw(VIEW_COUNT_MAP_KEY, field, raw_total)
        await self.cache.delete(VIEW_COUNT_DRAINING_KEY)

    async def _release(self, token: str) -> None:
        try:
            if await self.cache.get(VIEW_COUNT_LOCK_KEY) == token:
                await self.cache.delete(VIEW_COUNT_LOCK_KEY)
        except CACHE_FAILURES as e:
            logger.warning("Releasing the view count flush lock failed: %s", e)
