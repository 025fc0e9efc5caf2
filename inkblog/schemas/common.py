"""Shared response shapes."""

from typing import Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class SimpleUser(BaseModel):
    """Author reference embedded in listings."""

    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    nick_name: str = Field(alias="nickName")
    icon: str | None = None


class PageInfo(BaseModel, Generic[T]):
    """One page of a listing plus the total row count."""

    model_config = ConfigDict(populate_by_name=True)

    page: int
    size: int
    total: int
    data: list[T]


class MessageResponse(BaseModel):
    message: str


class IdsRequest(BaseModel):
    ids: list[int] = Field(min_length=1, max_length=100)
