"""Blog detail, curated sets and draft buffer kept in the cache."""

from collections.abc import Awaitable, Callable
from logging import getLogger
from typing import Any

from pydantic import TypeAdapter, ValidationError

from inkblog.configs import BlogCacheConfig
from inkblog.configs.settings import RECOMMEND_BLOG_COUNT
from inkblog.errors import InvalidRecommendationError
from inkblog.managers.cache_aside import CACHE_FAILURES, CacheAside
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.view_counter import ViewCounter
from inkblog.schemas.blog import BlogDetail, DraftContent, HotBlog, RecommendBlog, SimpleBlog
from inkblog.utils.cache_keys import (
    DRAFT_MAP_KEY,
    HOT_BLOG_KEY,
    LATEST_BLOG_KEY,
    RECOMMEND_BLOG_KEY,
    blog_key,
    draft_field,
)
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

ABSENT_MARKER: dict[str, bool] = {"__absent__": True}

_detail = TypeAdapter(BlogDetail)
_hot = TypeAdapter(list[HotBlog])
_latest = TypeAdapter(list[SimpleBlog])
_recommended = TypeAdapter(list[RecommendBlog])
_draft = TypeAdapter(DraftContent)


def is_absent_marker(value: Any) -> bool:
    return isinstance(value, dict) and value.get("__absent__") is True


class BlogCache(CacheAside):
    """
    Cache-aside access to post details and the small curated lists.

    Details are cached without expiry and dropped on every write to the
    post. A lookup for a missing post caches a typed absent marker for
    ``negative_ttl`` seconds so repeated misses stay off the database.
    """

    def __init__(
        self,
        cache: CacheManager,
        config: BlogCacheConfig | None = None,
        view_counter: ViewCounter | None = None,
    ) -> None:
        super().__init__(cache)
        self.config = config or BlogCacheConfig()
        self.view_counter = view_counter or ViewCounter(cache, self.config.flush_lock_ttl)

    # --- detail ---

    async def get_detail(
        self,
        blog_id: int,
        loader: Callable[[int], Awaitable[BlogDetail | None]],
    ) -> BlogDetail | None:
        """
        Read a post detail through the cache.

        Args:
            blog_id: Post id.
            loader: Loads the detail from the store; returns None when missing.

        Returns:
            The detail, or None when the post does not exist.
        """
        key = blog_key(blog_id)
        raw = await self._read(key)
        if is_absent_marker(raw):
            return None
        if raw is not None:
            cached = await self._validate(key, _detail, raw)
            if cached is not None:
                return cached

        detail = await loader(blog_id)
        if detail is None:
            await self._write(key, ABSENT_MARKER, ttl=self.config.negative_ttl)
            return None

        await self._write(key, detail, _detail)
        return detail

    async def invalidate(self, *blog_ids: int) -> bool:
        """Drop cached details (and absent markers) for the given posts."""
        return await self._drop(*(blog_key(blog_id) for blog_id in blog_ids))

    async def increase_view(self, blog_id: int, fallback_count: int) -> int:
        return await self.view_counter.increase(blog_id, fallback_count)

    # --- curated lists ---

    async def get_hot(self, loader: Callable[[], Awaitable[list[HotBlog]]]) -> list[HotBlog]:
        return await self._read_through(HOT_BLOG_KEY, _hot, loader, self.config.hot_ttl)

    async def get_latest(
        self,
        loader: Callable[[], Awaitable[list[SimpleBlog]]],
    ) -> list[SimpleBlog]:
        return await self._read_through(LATEST_BLOG_KEY, _latest, loader, self.config.latest_ttl)

    async def reset_latest(self) -> bool:
        return await self._drop(LATEST_BLOG_KEY)

    async def get_recommended(self) -> list[RecommendBlog]:
        """Recommended posts as last set by an admin; empty when never set."""
        return await self._read_as(RECOMMEND_BLOG_KEY, _recommended) or []

    async def set_recommended(self, items: list[RecommendBlog]) -> bool:
        """
        Replace the recommended set.

        Raises:
            InvalidRecommendationError: When ``items`` is not exactly four posts.
        """
        if len(items) != RECOMMEND_BLOG_COUNT:
            raise InvalidRecommendationError(RECOMMEND_BLOG_COUNT, len(items))
        return await self._write(RECOMMEND_BLOG_KEY, items, _recommended)

    # --- drafts ---

    async def get_draft(self, user_id: int) -> DraftContent | None:
        try:
            raw = await self.cache.hget(DRAFT_MAP_KEY, draft_field(user_id))
            return _draft.validate_python(raw) if raw is not None else None
        except (*CACHE_FAILURES, ValidationError) as e:
            logger.warning("Draft read failed for user %s: %s", user_id, e)
            return None

    async def save_draft(self, user_id: int, draft: DraftContent) -> bool:
        try:
            await self.cache.hset(DRAFT_MAP_KEY, draft_field(user_id), _draft.dump_python(draft))
        except CACHE_FAILURES as e:
            logger.warning("Draft save failed for user %s: %s", user_id, e)
            return False
        return True

    async def discard_draft(self, user_id: int) -> bool:
        try:
            await self.cache.hdel(DRAFT_MAP_KEY, draft_field(user_id))
        except CACHE_FAILURES as e:
            logger.warning("Draft discard failed for user %s: %s", user_id, e)
            return False
        return True
