"""Category, tag and topic caches."""

from collections.abc import Awaitable, Callable
from logging import getLogger

from pydantic import TypeAdapter, ValidationError

from inkblog.configs.settings import FIRST_TOPIC_PAGE_TTL
from inkblog.managers.cache_aside import CACHE_FAILURES, CacheAside
from inkblog.managers.cache_manager import CacheManager
from inkblog.schemas.common import PageInfo
from inkblog.schemas.taxonomy import TopicDetail, TopicItem
from inkblog.utils.cache_keys import TOPIC_FIRST_PAGE_KEY, TOPIC_KEYS, TaxonomyKeys
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class TaxonomyCache[ItemT](CacheAside):
    """
    Cache for one taxonomy kind, driven by its ``TaxonomyKeys``.

    Lists and per-id entries are kept without expiry. Any write to the kind
    invalidates every key of that kind at once.
    """

    def __init__(self, cache: CacheManager, keys: TaxonomyKeys, item_type: type[ItemT]) -> None:
        super().__init__(cache)
        self.keys = keys
        self._item = TypeAdapter(item_type)
        self._items = TypeAdapter(list[item_type])

    async def get_list(self, loader: Callable[[], Awaitable[list[ItemT]]]) -> list[ItemT]:
        return await self._read_through(self.keys.list_key, self._items, loader)

    async def get_by_id(
        self,
        item_id: int,
        loader: Callable[[int], Awaitable[ItemT | None]],
    ) -> ItemT | None:
        """
        Read one item through the kind's hash.

        Only found items are written; a missing id always goes to the loader.
        """
        if not self.keys.map_key:
            return await loader(item_id)

        field = str(item_id)
        try:
            raw = await self.cache.hget(self.keys.map_key, field)
            if raw is not None:
                return self._item.validate_python(raw)
        except (*CACHE_FAILURES, ValidationError) as e:
            logger.warning("%s map read failed for %s: %s", self.keys.kind, item_id, e)

        item = await loader(item_id)
        if item is None:
            return None
        try:
            await self.cache.hset(self.keys.map_key, field, self._item.dump_python(item, mode="json"))
        except CACHE_FAILURES as e:
            logger.warning("%s map write failed for %s: %s", self.keys.kind, item_id, e)
        return item

    async def random_sample(
        self,
        count: int,
        loader: Callable[[], Awaitable[list[ItemT]]],
    ) -> list[ItemT]:
        """
        Return up to ``count`` random items.

        The random set is filled from ``loader`` the first time it is found
        empty. With the cache down the first ``count`` loaded items are returned.
        """
        if not self.keys.random_key:
            return (await loader())[:count]

        try:
            if not await self.cache.scard(self.keys.random_key):
                items = await loader()
                if not items:
                    return []
                await self.cache.sadd(
                    self.keys.random_key,
                    *self._items.dump_python(items, mode="json"),
                )
            members = await self.cache.srandmember(self.keys.random_key, count)
            return self._items.validate_python(members)
        except (*CACHE_FAILURES, ValidationError) as e:
            logger.warning("Random %s sample failed: %s", self.keys.kind, e)
            return (await loader())[:count]

    async def invalidate(self) -> bool:
        """Drop the list, the hash, the random set and any extra keys of this kind."""
        return await self._drop(*self.keys.all_keys())


class TopicCache(TaxonomyCache[TopicItem]):
    """Topic cache plus the first page of the topic index, kept for eight hours."""

    _first_page = TypeAdapter(PageInfo[TopicDetail])

    def __init__(self, cache: CacheManager) -> None:
        super().__init__(cache, TOPIC_KEYS, TopicItem)

    async def get_first_page(
        self,
        loader: Callable[[], Awaitable[PageInfo[TopicDetail]]],
    ) -> PageInfo[TopicDetail]:
        return await self._read_through(
            TOPIC_FIRST_PAGE_KEY,
            self._first_page,
            loader,
            FIRST_TOPIC_PAGE_TTL,
        )
