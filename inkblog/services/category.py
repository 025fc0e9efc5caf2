"""Category service."""

from logging import getLogger

from inkblog.managers.taxonomy_cache import TaxonomyCache
from inkblog.repositories import CategoryRepository
from inkblog.schemas.taxonomy import CategoryItem
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class CategoryService:
    def __init__(self, categories: CategoryRepository, cache: TaxonomyCache[CategoryItem]) -> None:
        self.categories = categories
        self.cache = cache

    async def _load(self) -> list[CategoryItem]:
        return [CategoryItem.model_validate(c) for c in await self.categories.list_active()]

    async def list_all(self) -> list[CategoryItem]:
        return await self.cache.get_list(self._load)

    async def create(self, name: str) -> CategoryItem:
        """
        Create a category and drop the cached category list.

        Raises:
            DuplicateEntryError: If the name is already taken
        """
        category = await self.categories.create(name)
        await self.categories.commit()
        await self.cache.invalidate()
        logger.info(f"Category '{name}' created")
        return CategoryItem.model_validate(category)
