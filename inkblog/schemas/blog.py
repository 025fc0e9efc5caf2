"""
Blog schemas.

Covers listing queries, response shapes that are cached as JSON, and the
create/update request with its validation rules.
"""

from datetime import datetime
from enum import StrEnum
from re import IGNORECASE, match

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from inkblog.configs.settings import MAX_BLOG_TAGS
from inkblog.schemas.common import SimpleUser
from inkblog.schemas.taxonomy import CategoryItem, TagItem, TopicItem

IMAGE_URL_PATTERN = r"^(https?://|/).+\.(png|jpe?g|gif|webp|svg|bmp)(\?.*)?$"


class SortMode(StrEnum):
    """Listing order. ``BACK`` is oldest first."""

    CREATE = "CREATE"
    UPDATE = "UPDATE"
    EYE = "EYE"
    LIKE = "LIKE"
    BACK = "BACK"


class BlogPageQuery(BaseModel):
    """Filter for the public listing; ``cid=-1`` means every category."""

    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    cid: int = -1
    sort: SortMode = SortMode.CREATE


class BlogSummary(BaseModel):
    """One row of a listing page."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    description: str
    cover_image: str | None = Field(default=None, alias="coverImage")
    view_count: int = Field(default=0, alias="viewCount")
    like_count: int = Field(default=0, alias="likeCount")
    created_at: datetime = Field(alias="createdAt")
    category: CategoryItem | None = None
    topic: TopicItem | None = None
    user: SimpleUser


class BlogDetail(BlogSummary):
    """Full post content as served by the detail endpoint."""

    content: str
    updated_at: datetime = Field(alias="updatedAt")
    tags: list[TagItem] = []


class SimpleBlog(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str


class RecommendBlog(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    cover_image: str | None = Field(default=None, alias="coverImage")


class HotBlog(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    view_count: int = Field(alias="viewCount")


class ArchiveBlog(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    description: str
    created_at: datetime = Field(alias="createdAt")


class SearchHit(BaseModel):
    """Document shape pushed to and returned from the search index."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str


class BlogRequest(BaseModel):
    """Create or update payload for a post."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    title: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1)
    cover_image: str = Field(alias="coverImage", max_length=500)
    category_id: int | None = Field(default=None, alias="categoryId")
    topic_id: int | None = Field(default=None, alias="topicId")
    tag_ids: list[int] = Field(default=[], alias="tagIds", max_length=MAX_BLOG_TAGS)

    @field_validator("cover_image")
    @classmethod
    def validate_cover_image(cls, value: str) -> str:
        if not match(IMAGE_URL_PATTERN, value, IGNORECASE):
            mssg = "Cover image must be an image URL"
            raise ValueError(mssg)
        return value

    @field_validator("tag_ids")
    @classmethod
    def dedupe_tags(cls, value: list[int]) -> list[int]:
        return list(dict.fromkeys(value))

    @model_validator(mode="after")
    def require_category_or_topic(self) -> "BlogRequest":
        if self.category_id is None and self.topic_id is None:
            mssg = "Either a category or a topic is required"
            raise ValueError(mssg)
        return self


class BlogEditInfo(BaseModel):
    """Current values of a post, for the editor."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    description: str
    content: str
    cover_image: str | None = Field(default=None, alias="coverImage")
    category_id: int | None = Field(default=None, alias="categoryId")
    topic_id: int | None = Field(default=None, alias="topicId")
    tag_ids: list[int] = Field(default=[], alias="tagIds")


class DraftContent(BaseModel):
    content: str = Field(max_length=200_000)


class RecommendRequest(BaseModel):
    ids: list[int]


class ArchiveQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    start: datetime
    end: datetime
    page: int = Field(default=1, ge=1)
