"""
Admin service: content moderation across blogs and taxonomies.

ADMIN accounts act only on the blogs and topics they wrote. SUPER_ADMIN
accounts act on everything. Categories and tags are site-wide and open
to both roles.
"""

from logging import getLogger

from sqlmodel import SQLModel

from inkblog.configs.settings import ADMIN_OTHER_PAGE_SIZE
from inkblog.errors import CategoryNotFoundError, ForbiddenError, TagNotFoundError, TopicNotFoundError
from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.page_cache import PageCache
from inkblog.managers.taxonomy_cache import TaxonomyCache, TopicCache
from inkblog.models import Role
from inkblog.repositories import BlogRepository, CategoryRepository, TagRepository, TopicRepository
from inkblog.schemas.admin import AdminBlogFilter, AdminBlogItem, AdminListFilter, AdminTaxonomyItem
from inkblog.schemas.blog import SearchHit
from inkblog.schemas.common import PageInfo
from inkblog.schemas.taxonomy import CategoryItem, TagItem, TopicItem, TopicRequest
from inkblog.schemas.user import UserRecord
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


def owner_scope(user: UserRecord) -> int | None:
    """Owner filter for ``user``: None lets a SUPER_ADMIN see every author."""
    return None if user.role == Role.SUPER_ADMIN else user.id


def _taxonomy_page(
    records: list[SQLModel],
    total: int,
    page: int,
) -> PageInfo[AdminTaxonomyItem]:
    return PageInfo[AdminTaxonomyItem](
        page=page,
        size=ADMIN_OTHER_PAGE_SIZE,
        total=total,
        data=[
            AdminTaxonomyItem(
                id=record.id,  # type: ignore[attr-defined]
                name=record.name,  # type: ignore[attr-defined]
                created_at=record.created_at,  # type: ignore[attr-defined]
                deleted=record.deleted_at is not None,  # type: ignore[attr-defined]
            )
            for record in records
        ],
    )


class AdminService:
    """
    Moderation writes and their cache fan-out.

    Each write commits, then drops every cache entry it made stale:
    the kind's taxonomy keys, all listing pages and the details of the
    posts it touched. Methods that change what search should return
    give back the affected ids or documents, and the route schedules
    the index update.
    """

    def __init__(
        self,
        blogs: BlogRepository,
        categories: CategoryRepository,
        tags: TagRepository,
        topics: TopicRepository,
        blog_cache: BlogCache,
        page_cache: PageCache,
        category_cache: TaxonomyCache[CategoryItem],
        tag_cache: TaxonomyCache[TagItem],
        topic_cache: TopicCache,
    ) -> None:
        self.blogs = blogs
        self.categories = categories
        self.tags = tags
        self.topics = topics
        self.blog_cache = blog_cache
        self.page_cache = page_cache
        self.category_cache = category_cache
        self.tag_cache = tag_cache
        self.topic_cache = topic_cache

    async def _after_blog_change(self, blog_ids: list[int]) -> None:
        await self.page_cache.invalidate_all()
        if blog_ids:
            await self.blog_cache.invalidate(*blog_ids)

    # --- blogs ---

    async def blog_page(self, query: AdminBlogFilter, user: UserRecord) -> PageInfo[AdminBlogItem]:
        return await self.blogs.admin_page(query, owner_scope(user))

    async def delete_blogs(self, ids: list[int], user: UserRecord) -> list[int]:
        """
        Soft delete posts the user may moderate.

        Returns:
            Ids that were deleted, to be removed from the search index.
        """
        allowed = await self.blogs.owned_ids(ids, owner_scope(user))
        changed = await self.blogs.soft_delete(allowed)
        await self.blogs.commit()
        await self._after_blog_change(changed)
        logger.info(f"{user.username} deleted blogs {changed}")
        return changed

    async def restore_blogs(self, ids: list[int], user: UserRecord) -> list[SearchHit]:
        """
        Restore soft deleted posts the user may moderate.

        Returns:
            Search documents of the restored posts.
        """
        allowed = await self.blogs.owned_ids(ids, owner_scope(user))
        changed = await self.blogs.restore(allowed)
        await self.blogs.commit()
        await self._after_blog_change(changed)
        logger.info(f"{user.username} restored blogs {changed}")
        return await self.blogs.search_documents(changed)

    # --- categories ---

    async def category_page(self, query: AdminListFilter) -> PageInfo[AdminTaxonomyItem]:
        records, total = await self.categories.admin_page(
            query.page,
            ADMIN_OTHER_PAGE_SIZE,
            query.name,
            query.deleted,
        )
        return _taxonomy_page(records, total, query.page)

    async def rename_category(self, category_id: int, name: str) -> CategoryItem:
        """
        Raises:
            CategoryNotFoundError: If the category does not exist
            DuplicateEntryError: If the name is already taken
        """
        category = await self.categories.rename(category_id, name)
        if category is None:
            raise CategoryNotFoundError(category_id)
        await self.categories.commit()

        await self.category_cache.invalidate()
        await self._after_blog_change(await self.blogs.ids_by("category_id", [category_id]))
        return CategoryItem.model_validate(category)

    async def delete_categories(self, ids: list[int]) -> list[int]:
        """
        Soft delete categories together with their posts.

        Returns:
            Ids of the posts that were deleted with them.
        """
        changed = await self.categories.soft_delete(ids)
        blog_ids = await self.blogs.set_deleted_by("category_id", changed, deleted=True)
        await self.categories.commit()

        await self.category_cache.invalidate()
        await self._after_blog_change(blog_ids)
        logger.info(f"Deleted categories {changed} and {len(blog_ids)} of their blogs")
        return blog_ids

    async def restore_categories(self, ids: list[int]) -> list[SearchHit]:
        changed = await self.categories.restore(ids)
        blog_ids = await self.blogs.set_deleted_by("category_id", changed, deleted=False)
        await self.categories.commit()

        await self.category_cache.invalidate()
        await self._after_blog_change(blog_ids)
        logger.info(f"Restored categories {changed} and {len(blog_ids)} of their blogs")
        return await self.blogs.search_documents(blog_ids)

    # --- tags ---

    async def tag_page(self, query: AdminListFilter) -> PageInfo[AdminTaxonomyItem]:
        records, total = await self.tags.admin_page(
            query.page,
            ADMIN_OTHER_PAGE_SIZE,
            query.name,
            query.deleted,
        )
        return _taxonomy_page(records, total, query.page)

    async def rename_tag(self, tag_id: int, name: str) -> TagItem:
        """
        Raises:
            TagNotFoundError: If the tag does not exist
            DuplicateEntryError: If the name is already taken
        """
        tag = await self.tags.rename(tag_id, name)
        if tag is None:
            raise TagNotFoundError(tag_id)
        await self.tags.commit()

        await self.tag_cache.invalidate()
        await self._after_blog_change(await self.blogs.ids_with_tags([tag_id]))
        return TagItem.model_validate(tag)

    async def set_tags_deleted(self, ids: list[int], *, deleted: bool) -> list[int]:
        """
        Soft delete or restore tags. Posts keep their tag links.

        Returns:
            Ids of the tags whose state changed.
        """
        if deleted:
            changed = await self.tags.soft_delete(ids)
        else:
            changed = await self.tags.restore(ids)
        await self.tags.commit()

        await self.tag_cache.invalidate()
        await self._after_blog_change(await self.blogs.ids_with_tags(changed))
        return changed

    # --- topics ---

    async def topic_page(self, query: AdminListFilter, user: UserRecord) -> PageInfo[AdminTaxonomyItem]:
        records, total = await self.topics.admin_page(
            query.page,
            ADMIN_OTHER_PAGE_SIZE,
            query.name,
            query.deleted,
            owner_scope(user),
        )
        return _taxonomy_page(records, total, query.page)

    async def update_topic(self, topic_id: int, request: TopicRequest, user: UserRecord) -> TopicItem:
        """
        Raises:
            TopicNotFoundError: If the topic does not exist
            ForbiddenError: If an ADMIN edits another author's topic
        """
        topic = await self.topics.get_by_id(topic_id)
        if topic is None:
            raise TopicNotFoundError(topic_id)
        owner_id = owner_scope(user)
        if owner_id is not None and topic.user_id != owner_id:
            mssg = "You can only edit your own topics"
            raise ForbiddenError(mssg)
        topic = await self.topics.update(topic, request)
        await self.topics.commit()

        await self.topic_cache.invalidate()
        await self._after_blog_change(await self.blogs.ids_by("topic_id", [topic_id]))
        return TopicItem.model_validate(topic)

    async def delete_topics(self, ids: list[int], user: UserRecord) -> list[int]:
        """
        Soft delete topics together with their posts.

        Returns:
            Ids of the posts that were deleted with them.
        """
        allowed = await self.topics.owned_ids(ids, owner_scope(user))
        changed = await self.topics.soft_delete(allowed)
        blog_ids = await self.blogs.set_deleted_by("topic_id", changed, deleted=True)
        await self.topics.commit()

        await self.topic_cache.invalidate()
        await self._after_blog_change(blog_ids)
        logger.info(f"{user.username} deleted topics {changed} and {len(blog_ids)} blogs")
        return blog_ids

    async def restore_topics(self, ids: list[int], user: UserRecord) -> list[SearchHit]:
        allowed = await self.topics.owned_ids(ids, owner_scope(user))
        changed = await self.topics.restore(allowed)
        blog_ids = await self.blogs.set_deleted_by("topic_id", changed, deleted=False)
        await self.topics.commit()

        await self.topic_cache.invalidate()
        await self._after_blog_change(blog_ids)
        logger.info(f"{user.username} restored topics {changed} and {len(blog_ids)} blogs")
        return await self.blogs.search_documents(blog_ids)

    # --- maintenance ---

    async def reset_latest(self) -> bool:
        return await self.blog_cache.reset_latest()

    async def search_documents(self) -> list[SearchHit]:
        """Every active post as a search document, for a full re-index."""
        return await self.blogs.search_documents()
