"""Blog service: read-through listings and invalidate-on-write posts."""

from logging import getLogger

from inkblog.configs.settings import RECOMMEND_BLOG_COUNT
from inkblog.errors import (
    BlogNotFoundError,
    CategoryNotFoundError,
    ForbiddenError,
    InvalidRecommendationError,
    TopicNotFoundError,
)
from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.page_cache import PageCache
from inkblog.models import ADMIN_ROLES, BlogDB
from inkblog.repositories import BlogRepository, CategoryRepository, TagRepository, TopicRepository
from inkblog.schemas.blog import (
    ArchiveBlog,
    ArchiveQuery,
    BlogDetail,
    BlogEditInfo,
    BlogPageQuery,
    BlogRequest,
    BlogSummary,
    DraftContent,
    HotBlog,
    RecommendBlog,
    SearchHit,
    SimpleBlog,
)
from inkblog.schemas.common import PageInfo
from inkblog.schemas.user import UserRecord
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class BlogService:
    """
    Service for post reads and writes.

    Every write commits first and then drops the cache entries it made
    stale: all listing pages, plus the detail of the touched post.
    """

    def __init__(
        self,
        blogs: BlogRepository,
        categories: CategoryRepository,
        topics: TopicRepository,
        tags: TagRepository,
        blog_cache: BlogCache,
        page_cache: PageCache,
    ) -> None:
        self.blogs = blogs
        self.categories = categories
        self.topics = topics
        self.tags = tags
        self.blog_cache = blog_cache
        self.page_cache = page_cache

    # --- reads ---

    async def page(self, query: BlogPageQuery) -> PageInfo[BlogSummary]:
        return await self.page_cache.get_or_compute(query, self.blogs.page)

    async def detail(self, blog_id: int) -> BlogDetail:
        """
        Return a post and count the view.

        The returned ``view_count`` is the buffered total, which runs ahead
        of the stored count until the nightly flush.

        Raises:
            BlogNotFoundError: If the post does not exist or is deleted
        """
        if blog_id <= 0:
            raise BlogNotFoundError(blog_id)
        detail = await self.blog_cache.get_detail(blog_id, self.blogs.get_detail)
        if detail is None:
            raise BlogNotFoundError(blog_id)
        views = await self.blog_cache.increase_view(blog_id, detail.view_count)
        return detail.model_copy(update={"view_count": views})

    async def hot(self) -> list[HotBlog]:
        return await self.blog_cache.get_hot(self.blogs.hot)

    async def latest(self) -> list[SimpleBlog]:
        return await self.blog_cache.get_latest(self.blogs.latest)

    async def recommended(self) -> list[RecommendBlog]:
        return await self.blog_cache.get_recommended()

    async def archive(self, query: ArchiveQuery) -> PageInfo[ArchiveBlog]:
        return await self.blogs.archive(query)

    async def simple(self, page: int) -> PageInfo[SimpleBlog]:
        return await self.blogs.simple_page(page)

    async def by_user(self, user_id: int, page: int) -> PageInfo[BlogSummary]:
        return await self.blogs.page_by_user(user_id, page)

    async def user_top(self, user_id: int) -> list[SimpleBlog]:
        return await self.blogs.user_top(user_id)

    # --- writes ---

    async def create(self, request: BlogRequest, user: UserRecord) -> SearchHit:
        """
        Create a post.

        Returns:
            The document to push to the search index.

        Raises:
            CategoryNotFoundError: If the category does not exist
            TopicNotFoundError: If the topic does not exist
        """
        request = await self._checked(request)
        blog = await self.blogs.create(request, user.id)
        await self.blogs.commit()

        await self.page_cache.invalidate_all()
        # A lookup before the insert may have left an absent marker behind.
        await self.blog_cache.invalidate(blog.id)
        logger.info(f"Blog {blog.id} created by {user.username}")
        return SearchHit(id=blog.id, title=blog.title, description=blog.description)

    async def update(self, blog_id: int, request: BlogRequest, user: UserRecord) -> SearchHit:
        """
        Update a post owned by ``user`` (or any post, for admins).

        Raises:
            BlogNotFoundError: If the post does not exist
            ForbiddenError: If the user may not edit the post
        """
        blog = await self._editable(blog_id, user)
        request = await self._checked(request)
        blog = await self.blogs.update(blog, request)
        await self.blogs.commit()

        await self.page_cache.invalidate_all()
        await self.blog_cache.invalidate(blog_id)
        logger.info(f"Blog {blog_id} updated by {user.username}")
        return SearchHit(id=blog_id, title=blog.title, description=blog.description)

    async def edit_info(self, blog_id: int, user: UserRecord) -> BlogEditInfo:
        blog = await self._editable(blog_id, user)
        return await self.blogs.edit_info(blog)

    async def set_recommended(self, ids: list[int]) -> list[RecommendBlog]:
        """
        Replace the recommended set with four existing posts.

        Raises:
            InvalidRecommendationError: Unless exactly four active posts are given
        """
        if len(ids) != RECOMMEND_BLOG_COUNT or len(set(ids)) != len(ids):
            raise InvalidRecommendationError(RECOMMEND_BLOG_COUNT, len(set(ids)))
        items = await self.blogs.recommend_items(ids)
        await self.blog_cache.set_recommended(items)
        logger.info(f"Recommended blogs set to {ids}")
        return items

    # --- drafts ---

    async def get_draft(self, user_id: int) -> DraftContent | None:
        return await self.blog_cache.get_draft(user_id)

    async def save_draft(self, user_id: int, draft: DraftContent) -> bool:
        return await self.blog_cache.save_draft(user_id, draft)

    async def discard_draft(self, user_id: int) -> bool:
        return await self.blog_cache.discard_draft(user_id)

    # --- helpers ---

    async def _editable(self, blog_id: int, user: UserRecord) -> BlogDB:
        blog = await self.blogs.get_active(blog_id)
        if blog is None:
            raise BlogNotFoundError(blog_id)
        if blog.user_id != user.id and user.role not in ADMIN_ROLES:
            mssg = "You can only edit your own posts"
            raise ForbiddenError(mssg)
        return blog

    async def _checked(self, request: BlogRequest) -> BlogRequest:
        """Verify the referenced category and topic, and drop unknown tags."""
        if request.category_id is not None and not await self.categories.get_active(
            request.category_id,
        ):
            raise CategoryNotFoundError(request.category_id)
        if request.topic_id is not None and not await self.topics.get_active(request.topic_id):
            raise TopicNotFoundError(request.topic_id)
        tag_ids = await self.tags.get_active_ids(request.tag_ids)
        return request.model_copy(update={"tag_ids": [t for t in request.tag_ids if t in tag_ids]})
