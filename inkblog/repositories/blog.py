"""Blog repository for database operations."""

from collections.abc import Sequence
from logging import getLogger
from typing import Any

from sqlalchemy import ColumnElement, Select, delete, func, select, update
from sqlalchemy.exc import SQLAlchemyError

from inkblog.configs.settings import (
    ADMIN_PAGE_SIZE,
    ARCHIVE_PAGE_SIZE,
    BLOG_PAGE_SIZE,
    HOT_BLOG_COUNT,
    LATEST_BLOG_COUNT,
    USER_TOP_BLOG_COUNT,
)
from inkblog.errors.database import DatabaseError
from inkblog.models import BlogDB, BlogTagDB, CategoryDB, TagDB, TopicDB, UserDB
from inkblog.models._time import utcnow
from inkblog.repositories.base import SoftDeleteRepository
from inkblog.schemas.admin import AdminBlogFilter, AdminBlogItem
from inkblog.schemas.blog import (
    ArchiveBlog,
    ArchiveQuery,
    BlogDetail,
    BlogEditInfo,
    BlogPageQuery,
    BlogRequest,
    BlogSummary,
    HotBlog,
    RecommendBlog,
    SearchHit,
    SimpleBlog,
    SortMode,
)
from inkblog.schemas.common import PageInfo, SimpleUser
from inkblog.schemas.taxonomy import CategoryItem, TagItem, TopicItem
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

SORT_ORDER = {
    SortMode.CREATE: (BlogDB.created_at.desc(),),
    SortMode.UPDATE: (BlogDB.updated_at.desc(),),
    SortMode.EYE: (BlogDB.view_count.desc(), BlogDB.created_at.desc()),
    SortMode.LIKE: (BlogDB.like_count.desc(), BlogDB.created_at.desc()),
    SortMode.BACK: (BlogDB.created_at.asc(),),
}


def _summary_statement() -> Select[Any]:
    """Active posts joined with their category, topic and author."""
    return (
        select(BlogDB, CategoryDB, TopicDB, UserDB)
        .join(UserDB, UserDB.id == BlogDB.user_id)
        .outerjoin(CategoryDB, CategoryDB.id == BlogDB.category_id)
        .outerjoin(TopicDB, TopicDB.id == BlogDB.topic_id)
        .where(BlogDB.deleted_at.is_(None))
    )


def _summary_fields(row: Sequence[Any]) -> dict[str, Any]:
    blog, category, topic, user = row
    return {
        "id": blog.id,
        "title": blog.title,
        "description": blog.description,
        "cover_image": blog.cover_image,
        "view_count": blog.view_count,
        "like_count": blog.like_count,
        "created_at": blog.created_at,
        "category": CategoryItem.model_validate(category) if category else None,
        "topic": TopicItem.model_validate(topic) if topic else None,
        "user": SimpleUser.model_validate(user),
    }


class BlogRepository(SoftDeleteRepository[BlogDB]):
    """
    Repository for Blog database operations.

    Read methods return the response schemas directly, since those are
    what the caches store.
    """

    model = BlogDB

    # --- public listings ---

    async def page(self, query: BlogPageQuery) -> PageInfo[BlogSummary]:
        """
        One page of the public index.

        Args:
            query: Page number, sort mode and category (``-1`` for all).

        Returns:
            PageInfo[BlogSummary]: The page with the total number of posts.
        """
        statement = _summary_statement()
        if query.cid != -1:
            statement = statement.where(BlogDB.category_id == query.cid)
        statement = statement.order_by(*SORT_ORDER[query.sort], BlogDB.id.desc())
        return await self._summary_page(statement, query.page)

    async def page_by_user(self, user_id: int, page: int) -> PageInfo[BlogSummary]:
        statement = (
            _summary_statement()
            .where(BlogDB.user_id == user_id)
            .order_by(BlogDB.created_at.desc(), BlogDB.id.desc())
        )
        return await self._summary_page(statement, page)

    async def page_by_tag(self, tag_id: int, page: int) -> PageInfo[BlogSummary]:
        statement = (
            _summary_statement()
            .join(BlogTagDB, BlogTagDB.blog_id == BlogDB.id)
            .where(BlogTagDB.tag_id == tag_id)
            .order_by(BlogDB.created_at.desc(), BlogDB.id.desc())
        )
        return await self._summary_page(statement, page)

    async def page_by_topic(self, topic_id: int, page: int) -> PageInfo[BlogSummary]:
        statement = (
            _summary_statement()
            .where(BlogDB.topic_id == topic_id)
            .order_by(BlogDB.created_at.asc(), BlogDB.id.asc())
        )
        return await self._summary_page(statement, page)

    async def _summary_page(self, statement: Select[Any], page: int) -> PageInfo[BlogSummary]:
        rows, total = await self._paginate(statement, page, BLOG_PAGE_SIZE)
        return PageInfo[BlogSummary](
            page=page,
            size=BLOG_PAGE_SIZE,
            total=total,
            data=[BlogSummary(**_summary_fields(row)) for row in rows],
        )

    async def archive(self, query: ArchiveQuery) -> PageInfo[ArchiveBlog]:
        statement = (
            select(BlogDB)
            .where(
                BlogDB.deleted_at.is_(None),
                BlogDB.created_at.between(query.start, query.end),
            )
            .order_by(BlogDB.created_at.desc())
        )
        rows, total = await self._paginate(statement, query.page, ARCHIVE_PAGE_SIZE)
        return PageInfo[ArchiveBlog](
            page=query.page,
            size=ARCHIVE_PAGE_SIZE,
            total=total,
            data=[ArchiveBlog.model_validate(row[0]) for row in rows],
        )

    async def simple_page(self, page: int) -> PageInfo[SimpleBlog]:
        statement = (
            select(BlogDB.id, BlogDB.title)
            .where(BlogDB.deleted_at.is_(None))
            .order_by(BlogDB.created_at.desc())
        )
        rows, total = await self._paginate(statement, page, BLOG_PAGE_SIZE)
        return PageInfo[SimpleBlog](
            page=page,
            size=BLOG_PAGE_SIZE,
            total=total,
            data=[SimpleBlog(id=row.id, title=row.title) for row in rows],
        )

    async def hot(self, limit: int = HOT_BLOG_COUNT) -> list[HotBlog]:
        statement = (
            select(BlogDB)
            .where(BlogDB.deleted_at.is_(None))
            .order_by(BlogDB.view_count.desc(), BlogDB.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return [HotBlog.model_validate(blog) for blog in result.scalars().all()]

    async def latest(self, limit: int = LATEST_BLOG_COUNT) -> list[SimpleBlog]:
        statement = (
            select(BlogDB)
            .where(BlogDB.deleted_at.is_(None))
            .order_by(BlogDB.created_at.desc(), BlogDB.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return [SimpleBlog.model_validate(blog) for blog in result.scalars().all()]

    async def user_top(self, user_id: int, limit: int = USER_TOP_BLOG_COUNT) -> list[SimpleBlog]:
        statement = (
            select(BlogDB)
            .where(BlogDB.deleted_at.is_(None), BlogDB.user_id == user_id)
            .order_by(BlogDB.view_count.desc(), BlogDB.id.desc())
            .limit(limit)
        )
        result = await self.session.execute(statement)
        return [SimpleBlog.model_validate(blog) for blog in result.scalars().all()]

    async def recommend_items(self, ids: Sequence[int]) -> list[RecommendBlog]:
        """Active posts for ``ids``, in the order the ids were given."""
        statement = select(BlogDB).where(BlogDB.id.in_(ids), BlogDB.deleted_at.is_(None))
        result = await self.session.execute(statement)
        found = {blog.id: blog for blog in result.scalars().all()}
        return [RecommendBlog.model_validate(found[blog_id]) for blog_id in ids if blog_id in found]

    async def search_documents(self, ids: Sequence[int] | None = None) -> list[SearchHit]:
        """Documents for the search index; every active post when ``ids`` is None."""
        statement = select(BlogDB.id, BlogDB.title, BlogDB.description).where(
            BlogDB.deleted_at.is_(None),
        )
        if ids is not None:
            statement = statement.where(BlogDB.id.in_(ids))
        result = await self.session.execute(statement.order_by(BlogDB.id))
        return [
            SearchHit(id=row.id, title=row.title, description=row.description) for row in result
        ]

    # --- single post ---

    async def get_detail(self, blog_id: int) -> BlogDetail | None:
        """
        Load the full detail of an active post.

        Returns:
            BlogDetail | None: Detail if found and not deleted, None otherwise
        """
        result = await self.session.execute(_summary_statement().where(BlogDB.id == blog_id))
        row = result.first()
        if row is None:
            return None
        blog = row[0]
        return BlogDetail(
            **_summary_fields(row),
            content=blog.content,
            updated_at=blog.updated_at,
            tags=await self.get_tags(blog_id),
        )

    async def get_tags(self, blog_id: int) -> list[TagItem]:
        statement = (
            select(TagDB)
            .join(BlogTagDB, BlogTagDB.tag_id == TagDB.id)
            .where(BlogTagDB.blog_id == blog_id, TagDB.deleted_at.is_(None))
            .order_by(TagDB.id)
        )
        result = await self.session.execute(statement)
        return [TagItem.model_validate(tag) for tag in result.scalars().all()]

    async def edit_info(self, blog: BlogDB) -> BlogEditInfo:
        result = await self.session.execute(
            select(BlogTagDB.tag_id).where(BlogTagDB.blog_id == blog.id).order_by(BlogTagDB.tag_id),
        )
        return BlogEditInfo(
            id=blog.id,
            title=blog.title,
            description=blog.description,
            content=blog.content,
            cover_image=blog.cover_image,
            category_id=blog.category_id,
            topic_id=blog.topic_id,
            tag_ids=list(result.scalars().all()),
        )

    # --- writes ---

    async def create(self, request: BlogRequest, user_id: int) -> BlogDB:
        """
        Insert a post and its tag links.

        Raises:
            DatabaseError: When the insert fails.
        """
        blog = BlogDB(
            user_id=user_id,
            title=request.title,
            description=request.description,
            content=request.content,
            cover_image=request.cover_image,
            category_id=request.category_id,
            topic_id=request.topic_id,
        )
        blog = await self._add_and_refresh(blog)
        await self._replace_tags(blog.id, request.tag_ids)
        return blog

    async def update(self, blog: BlogDB, request: BlogRequest) -> BlogDB:
        """Overwrite the editable fields of ``blog`` and its tag links."""
        blog.title = request.title
        blog.description = request.description
        blog.content = request.content
        blog.cover_image = request.cover_image
        blog.category_id = request.category_id
        blog.topic_id = request.topic_id
        blog.updated_at = utcnow()
        blog = await self._add_and_refresh(blog)
        await self._replace_tags(blog.id, request.tag_ids)
        return blog

    async def _replace_tags(self, blog_id: int | None, tag_ids: Sequence[int]) -> None:
        if blog_id is None:
            return
        try:
            await self.session.execute(delete(BlogTagDB).where(BlogTagDB.blog_id == blog_id))
            self.session.add_all(BlogTagDB(blog_id=blog_id, tag_id=tag_id) for tag_id in tag_ids)
            await self.session.flush()
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(detail=f"Failed to save tags for blog {blog_id}: {e}") from e

    async def update_view_count(self, blog_id: int, total: int) -> int:
        """
        Store a flushed view total.

        The stored count never goes down: ``GREATEST(view_count, total)``.

        Returns:
            int: Number of updated rows
        """
        statement = (
            update(BlogDB)
            .where(BlogDB.id == blog_id)
            .values(view_count=func.greatest(BlogDB.view_count, total))
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(detail=f"Failed to store view count for blog {blog_id}: {e}") from e
        return result.rowcount

    async def ids_by(self, column: str, ids: Sequence[int]) -> list[int]:
        """Ids of every post, deleted or not, whose ``column`` is in ``ids``."""
        if not ids:
            return []
        owner_column = getattr(BlogDB, column)
        result = await self.session.execute(select(BlogDB.id).where(owner_column.in_(ids)))
        return list(result.scalars().all())

    async def ids_with_tags(self, tag_ids: Sequence[int]) -> list[int]:
        if not tag_ids:
            return []
        result = await self.session.execute(
            select(BlogTagDB.blog_id).where(BlogTagDB.tag_id.in_(tag_ids)).distinct(),
        )
        return list(result.scalars().all())

    async def set_deleted_by(
        self,
        column: str,
        ids: Sequence[int],
        *,
        deleted: bool,
    ) -> list[int]:
        """
        Soft delete or restore every post whose ``column`` is in ``ids``.

        Used when a category or topic is deleted or restored.

        Returns:
            Ids of the posts whose state changed.
        """
        blog_ids = await self.ids_by(column, ids)
        if deleted:
            return await self.soft_delete(blog_ids)
        return await self.restore(blog_ids)

    # --- admin ---

    async def admin_page(
        self,
        query: AdminBlogFilter,
        owner_id: int | None = None,
    ) -> PageInfo[AdminBlogItem]:
        """
        Admin listing including deleted posts.

        Args:
            query: Title, category and deleted-state filters.
            owner_id: Restrict to one author; None lists every author.
        """
        criteria: list[ColumnElement[bool]] = []
        if owner_id is not None:
            criteria.append(BlogDB.user_id == owner_id)
        if query.title:
            criteria.append(BlogDB.title.ilike(f"%{query.title}%"))
        if query.category_id is not None:
            criteria.append(BlogDB.category_id == query.category_id)
        if query.deleted is True:
            criteria.append(BlogDB.deleted_at.is_not(None))
        elif query.deleted is False:
            criteria.append(BlogDB.deleted_at.is_(None))

        statement = (
            select(BlogDB, CategoryDB.name, TopicDB.name, UserDB)
            .join(UserDB, UserDB.id == BlogDB.user_id)
            .outerjoin(CategoryDB, CategoryDB.id == BlogDB.category_id)
            .outerjoin(TopicDB, TopicDB.id == BlogDB.topic_id)
            .where(*criteria)
            .order_by(BlogDB.id.desc())
        )
        rows, total = await self._paginate(statement, query.page, ADMIN_PAGE_SIZE)
        return PageInfo[AdminBlogItem](
            page=query.page,
            size=ADMIN_PAGE_SIZE,
            total=total,
            data=[
                AdminBlogItem(
                    id=blog.id,
                    title=blog.title,
                    category_name=category_name,
                    topic_name=topic_name,
                    user=SimpleUser.model_validate(user),
                    view_count=blog.view_count,
                    created_at=blog.created_at,
                    deleted=blog.deleted_at is not None,
                )
                for blog, category_name, topic_name, user in rows
            ],
        )

    async def owned_ids(self, ids: Sequence[int], owner_id: int | None) -> list[int]:
        """Subset of ``ids`` written by ``owner_id``; every id when owner is None."""
        if owner_id is None:
            return list(ids)
        result = await self.session.execute(
            select(BlogDB.id).where(BlogDB.id.in_(ids), BlogDB.user_id == owner_id),
        )
        return list(result.scalars().all())
