"""Category, tag and topic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from inkblog.schemas.common import SimpleUser


class CategoryItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TagItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TopicItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    name: str


class TopicDetail(BaseModel):
    """Topic card as shown on the topic pages."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    name: str
    description: str
    cover_image: str | None = Field(default=None, alias="coverImage")
    created_at: datetime = Field(alias="createdAt")
    user: SimpleUser


class NameRequest(BaseModel):
    """Create or rename a category or tag."""

    name: str = Field(min_length=1, max_length=20)


class TopicRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    name: str = Field(min_length=1, max_length=50)
    description: str = Field(min_length=1, max_length=200)
    cover_image: str | None = Field(default=None, alias="coverImage", max_length=500)
