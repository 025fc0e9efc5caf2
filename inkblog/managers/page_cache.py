"""Listing-page cache for the public blog index."""

from collections.abc import Awaitable, Callable
from logging import getLogger

from pydantic import TypeAdapter

from inkblog.configs import BlogCacheConfig
from inkblog.managers.cache_aside import CACHE_FAILURES, CacheAside
from inkblog.managers.cache_manager import CacheManager
from inkblog.schemas.blog import BlogPageQuery, BlogSummary
from inkblog.schemas.common import PageInfo
from inkblog.utils.cache_keys import PAGE_KEY_PATTERN, page_key
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

_page = TypeAdapter(PageInfo[BlogSummary])


class PageCache(CacheAside):
    """
    One cache entry per ``(page, sort, category)`` listing.

    Any post write can move rows across pages, so pages are never patched:
    every entry under ``page:*`` is dropped at once.
    """

    def __init__(self, cache: CacheManager, config: BlogCacheConfig | None = None) -> None:
        super().__init__(cache)
        self.config = config or BlogCacheConfig()

    @property
    def enabled(self) -> bool:
        return self.config.page_cache_enabled

    async def get_or_compute(
        self,
        query: BlogPageQuery,
        compute: Callable[[BlogPageQuery], Awaitable[PageInfo[BlogSummary]]],
    ) -> PageInfo[BlogSummary]:
        if not self.enabled:
            return await compute(query)
        return await self._read_through(
            page_key(query),
            _page,
            lambda: compute(query),
            self.config.page_cache_ttl,
        )

    async def invalidate_all(self) -> int:
        """
        Drop every cached listing page.

        Returns:
            Number of deleted keys; 0 when page caching is off or the cache failed.
        """
        if not self.enabled:
            return 0
        try:
            return await self.cache.delete_pattern(PAGE_KEY_PATTERN)
        except CACHE_FAILURES as e:
            logger.warning("Listing page invalidation failed: %s", e)
            return 0
