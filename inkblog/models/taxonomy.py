"""Category, tag and topic tables plus the blog/tag link table."""

from datetime import datetime
from typing import cast

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from inkblog.models._time import utcnow


class CategoryDB(SQLModel, table=True):
    __tablename__ = cast("declared_attr[str]", "categories")

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(20), unique=True, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), index=True),
    )


class TagDB(SQLModel, table=True):
    __tablename__ = cast("declared_attr[str]", "tags")

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(20), unique=True, nullable=False))
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), index=True),
    )


class TopicDB(SQLModel, table=True):
    """A topic groups a series of posts written by one user."""

    __tablename__ = cast("declared_attr[str]", "topics")

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(sa_column=Column(String(50), unique=True, nullable=False))
    description: str = Field(sa_column=Column(String(200), nullable=False))
    cover_image: str | None = Field(default=None, sa_column=Column(String(500)))
    user_id: int = Field(
        sa_column=Column(
            "user_id",
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), index=True),
    )


class BlogTagDB(SQLModel, table=True):
    __tablename__ = cast("declared_attr[str]", "blog_tags")

    blog_id: int = Field(
        sa_column=Column(
            "blog_id",
            Integer,
            ForeignKey("blogs.id", ondelete="CASCADE"),
            primary_key=True,
        ),
    )
    tag_id: int = Field(
        sa_column=Column(
            "tag_id",
            Integer,
            ForeignKey("tags.id", ondelete="CASCADE"),
            primary_key=True,
            index=True,
        ),
    )
