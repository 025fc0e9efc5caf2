"""Tag service."""

from logging import getLogger

from inkblog.configs.settings import RANDOM_TAG_COUNT
from inkblog.errors import TagNotFoundError
from inkblog.managers.taxonomy_cache import TaxonomyCache
from inkblog.repositories import BlogRepository, TagRepository
from inkblog.schemas.blog import BlogSummary
from inkblog.schemas.common import PageInfo
from inkblog.schemas.taxonomy import TagItem
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class TagService:
    """Tag reads through the tag list, tag map and random tag set."""

    def __init__(
        self,
        tags: TagRepository,
        blogs: BlogRepository,
        cache: TaxonomyCache[TagItem],
    ) -> None:
        self.tags = tags
        self.blogs = blogs
        self.cache = cache

    async def _load(self) -> list[TagItem]:
        return [TagItem.model_validate(tag) for tag in await self.tags.list_active()]

    async def _load_one(self, tag_id: int) -> TagItem | None:
        tag = await self.tags.get_active(tag_id)
        return TagItem.model_validate(tag) if tag else None

    async def list_all(self) -> list[TagItem]:
        return await self.cache.get_list(self._load)

    async def random(self, count: int = RANDOM_TAG_COUNT) -> list[TagItem]:
        return await self.cache.random_sample(count, self._load)

    async def get(self, tag_id: int) -> TagItem:
        """
        Raises:
            TagNotFoundError: If the tag does not exist or is deleted
        """
        tag = await self.cache.get_by_id(tag_id, self._load_one)
        if tag is None:
            raise TagNotFoundError(tag_id)
        return tag

    async def blogs_of(self, tag_id: int, page: int) -> PageInfo[BlogSummary]:
        await self.get(tag_id)
        return await self.blogs.page_by_tag(tag_id, page)

    async def create(self, name: str) -> TagItem:
        tag = await self.tags.create(name)
        await self.tags.commit()
        await self.cache.invalidate()
        logger.info(f"Tag '{name}' created")
        return TagItem.model_validate(tag)
