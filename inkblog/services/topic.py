"""Topic service."""

from logging import getLogger

from inkblog.errors import TopicNotFoundError
from inkblog.managers.taxonomy_cache import TopicCache
from inkblog.repositories import BlogRepository, TopicRepository
from inkblog.schemas.blog import BlogSummary
from inkblog.schemas.common import PageInfo
from inkblog.schemas.taxonomy import TopicDetail, TopicItem, TopicRequest
from inkblog.schemas.user import UserRecord
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class TopicService:
    def __init__(self, topics: TopicRepository, blogs: BlogRepository, cache: TopicCache) -> None:
        self.topics = topics
        self.blogs = blogs
        self.cache = cache

    async def page(self, page: int = 1) -> PageInfo[TopicDetail]:
        """Topic index; only the first page is cached."""
        if page == 1:
            return await self.cache.get_first_page(lambda: self.topics.page(1))
        return await self.topics.page(page)

    async def list_all(self) -> list[TopicItem]:
        return await self.cache.get_list(self.topics.list_active)

    async def get(self, topic_id: int) -> TopicItem:
        """
        Raises:
            TopicNotFoundError: If the topic does not exist or is deleted
        """
        topic = await self.cache.get_by_id(topic_id, self.topics.get_item)
        if topic is None:
            raise TopicNotFoundError(topic_id)
        return topic

    async def blogs_of(self, topic_id: int, page: int) -> PageInfo[BlogSummary]:
        await self.get(topic_id)
        return await self.blogs.page_by_topic(topic_id, page)

    async def by_user(self, user_id: int) -> list[TopicDetail]:
        return await self.topics.by_user(user_id)

    async def create(self, request: TopicRequest, user: UserRecord) -> TopicItem:
        topic = await self.topics.create(request, user.id)
        await self.topics.commit()
        await self.cache.invalidate()
        logger.info(f"Topic '{request.name}' created by {user.username}")
        return TopicItem.model_validate(topic)
