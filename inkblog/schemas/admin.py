"""Admin listing filters and rows."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from inkblog.schemas.common import SimpleUser


class AdminBlogFilter(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    page: int = Field(default=1, ge=1)
    title: str | None = None
    category_id: int | None = Field(default=None, alias="categoryId")
    deleted: bool | None = None


class AdminListFilter(BaseModel):
    model_config = ConfigDict(frozen=True)

    page: int = Field(default=1, ge=1)
    name: str | None = None
    deleted: bool | None = None


class AdminBlogItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    title: str
    category_name: str | None = Field(default=None, alias="categoryName")
    topic_name: str | None = Field(default=None, alias="topicName")
    user: SimpleUser
    view_count: int = Field(alias="viewCount")
    created_at: datetime = Field(alias="createdAt")
    deleted: bool


class AdminTaxonomyItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    name: str
    created_at: datetime = Field(alias="createdAt")
    deleted: bool
