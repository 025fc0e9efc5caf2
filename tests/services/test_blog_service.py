"""Tests for BlogService read-through and invalidate-on-write behaviour."""

from datetime import UTC, datetime
from unittest.mock import MagicMock, call

import pytest

from inkblog.errors import BlogNotFoundError, CategoryNotFoundError, ForbiddenError, InvalidRecommendationError
from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.page_cache import PageCache
from inkblog.models import BlogDB
from inkblog.schemas.blog import BlogDetail, BlogPageQuery, BlogRequest, BlogSummary, RecommendBlog
from inkblog.schemas.common import PageInfo, SimpleUser
from inkblog.schemas.user import UserRecord
from inkblog.services.blog import BlogService
from inkblog.utils.cache_keys import blog_key, page_key


@pytest.fixture
def service(
    blog_repo: MagicMock,
    category_repo: MagicMock,
    topic_repo: MagicMock,
    tag_repo: MagicMock,
    blog_cache: BlogCache,
    page_cache: PageCache,
) -> BlogService:
    category_repo.get_active.return_value = MagicMock(id=1)
    tag_repo.get_active_ids.return_value = [1, 2]
    return BlogService(blog_repo, category_repo, topic_repo, tag_repo, blog_cache, page_cache)


def _request(**overrides: object) -> BlogRequest:
    payload = {
        "title": "Caching notes",
        "description": "Cache-aside in practice",
        "content": "Body",
        "coverImage": "https://img.example.com/cover.png",
        "categoryId": 1,
        "tagIds": [1, 2, 3],
    }
    payload.update(overrides)
    return BlogRequest.model_validate(payload)


def _listing(query: BlogPageQuery) -> PageInfo[BlogSummary]:
    row = BlogSummary(
        id=42,
        title="Caching notes",
        description="d",
        created_at=datetime(2026, 3, 1, tzinfo=UTC),
        user=SimpleUser(id=1, nick_name="User 1"),
    )
    return PageInfo[BlogSummary](page=query.page, size=10, total=1, data=[row])


class TestReads:
    """Detail and listing reads."""

    @pytest.mark.asyncio
    async def test_detail_counts_views_from_stored_count(
        self,
        service: BlogService,
        blog_repo: MagicMock,
        blog_detail: BlogDetail,
    ) -> None:
        """Test the returned count is the buffered total seeded from the store."""
        blog_repo.get_detail.return_value = blog_detail

        first = await service.detail(42)
        second = await service.detail(42)

        assert first.view_count == 101
        assert second.view_count == 102
        blog_repo.get_detail.assert_awaited_once_with(42)

    @pytest.mark.asyncio
    async def test_detail_of_missing_post(self, service: BlogService, blog_repo: MagicMock) -> None:
        """Test a missing post raises and is looked up once."""
        blog_repo.get_detail.return_value = None

        for _ in range(2):
            with pytest.raises(BlogNotFoundError):
                await service.detail(7)
        blog_repo.get_detail.assert_awaited_once_with(7)

    @pytest.mark.asyncio
    async def test_non_positive_id_is_not_found(self, service: BlogService, blog_repo: MagicMock) -> None:
        """Test ids below one never reach the store."""
        with pytest.raises(BlogNotFoundError):
            await service.detail(0)
        blog_repo.get_detail.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_page_is_cached(self, service: BlogService, blog_repo: MagicMock) -> None:
        """Test a listing page is computed once."""
        blog_repo.page.side_effect = _listing

        await service.page(BlogPageQuery())
        result = await service.page(BlogPageQuery())

        assert result.data[0].id == 42
        blog_repo.page.assert_awaited_once()


class TestWrites:
    """Create and update paths and their invalidation."""

    @pytest.mark.asyncio
    async def test_create_commits_then_invalidates(
        self,
        service: BlogService,
        blog_repo: MagicMock,
        cache_manager: CacheManager,
        author: UserRecord,
        blog_row: BlogDB,
    ) -> None:
        """Test a new post clears listing pages and any absent marker."""
        blog_repo.page.side_effect = _listing
        await service.page(BlogPageQuery())
        await cache_manager.set(blog_key(42), {"__absent__": True}, 60)
        blog_repo.create.return_value = blog_row

        hit = await service.create(_request(), author)

        assert hit.id == 42
        blog_repo.commit.assert_awaited_once()
        assert await cache_manager.exists(page_key(BlogPageQuery()), blog_key(42)) == 0

    @pytest.mark.asyncio
    async def test_create_drops_unknown_tags(
        self,
        service: BlogService,
        blog_repo: MagicMock,
        author: UserRecord,
        blog_row: BlogDB,
    ) -> None:
        """Test tags that do not exist are filtered out before insert."""
        blog_repo.create.return_value = blog_row

        await service.create(_request(), author)

        saved_request = blog_repo.create.await_args.args[0]
        assert saved_request.tag_ids == [1, 2]

    @pytest.mark.asyncio
    async def test_create_with_unknown_category(
        self,
        service: BlogService,
        blog_repo: MagicMock,
        category_repo: MagicMock,
        author: UserRecord,
    ) -> None:
        """Test an unknown category is rejected without writing."""
        category_repo.get_active.return_value = None

        with pytest.raises(CategoryNotFoundError):
            await service.create(_request(), author)
        blog_repo.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_update_refreshes_cached_detail(
        self,
        service: BlogService,
        blog_repo: MagicMock,
        author: UserRecord,
        blog_row: BlogDB,
        blog_detail: BlogDetail,
    ) -> None:
        """Test the next detail read after an update sees the new title."""
        blog_repo.get_detail.return_value = blog_detail
        await service.detail(42)

        blog_repo.get_active.return_value = blog_row
        blog_repo.update.return_value = blog_row
        await service.update(42, _request(title="Renamed"), author)

        blog_repo.get_detail.return_value = blog_detail.model_copy(update={"title": "Renamed"})
        assert (await service.detail(42)).title == "Renamed"
        assert blog_repo.get_detail.await_args_list == [call(42), call(42)]

    @pytest.mark.asyncio
    async def test_update_of_someone_elses_post(
        self,
        service: BlogService,
        blog_repo: MagicMock,
        blog_row: BlogDB,
    ) -> None:
        """Test a plain user cannot edit another author's post."""
        blog_repo.get_active.return_value = blog_row
        stranger = UserRecord(id=9, username="x@example.com", password_hash="h", nick_name="x")

        with pytest.raises(ForbiddenError):
            await service.update(42, _request(), stranger)
        blog_repo.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_admin_may_edit_any_post(
        self,
        service: BlogService,
        blog_repo: MagicMock,
        admin: UserRecord,
        blog_row: BlogDB,
    ) -> None:
        """Test admins pass the ownership check."""
        blog_repo.get_active.return_value = blog_row

        await service.edit_info(42, admin)

        blog_repo.edit_info.assert_awaited_once_with(blog_row)


class TestRecommended:
    """Recommended set validation."""

    @pytest.mark.asyncio
    async def test_requires_four_distinct_ids(self, service: BlogService) -> None:
        """Test duplicates and wrong sizes are rejected."""
        with pytest.raises(InvalidRecommendationError):
            await service.set_recommended([1, 2, 3])
        with pytest.raises(InvalidRecommendationError):
            await service.set_recommended([1, 1, 2, 3])

    @pytest.mark.asyncio
    async def test_missing_posts_are_rejected(self, service: BlogService, blog_repo: MagicMock) -> None:
        """Test that only existing posts can be recommended."""
        blog_repo.recommend_items.return_value = [RecommendBlog(id=i, title="t") for i in (1, 2, 3)]

        with pytest.raises(InvalidRecommendationError):
            await service.set_recommended([1, 2, 3, 4])
        assert await service.recommended() == []

    @pytest.mark.asyncio
    async def test_recommended_round_trip(self, service: BlogService, blog_repo: MagicMock) -> None:
        """Test a valid set is stored and served."""
        items = [RecommendBlog(id=i, title=f"t{i}") for i in (1, 2, 3, 4)]
        blog_repo.recommend_items.return_value = items

        await service.set_recommended([1, 2, 3, 4])

        assert await service.recommended() == items
