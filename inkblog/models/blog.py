"""Blog database model using SQLModel."""

from datetime import datetime
from typing import cast

from sqlalchemy import DateTime, Index, Text
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from inkblog.models._time import utcnow


class BlogDB(SQLModel, table=True):
    """
    Blog database model for PostgreSQL.

    ``view_count`` is only written by the nightly view-count flush; live
    views accumulate in the cache until then.
    """

    __tablename__ = cast("declared_attr[str]", "blogs")

    __table_args__ = (
        Index("ix_blogs_category_created", "category_id", "created_at"),
        Index("ix_blogs_user_deleted", "user_id", "deleted_at"),
    )

    id: int | None = Field(default=None, primary_key=True, description="Blog ID")

    user_id: int = Field(
        sa_column=Column(
            "user_id",
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
        description="Author ID (foreign key to users.id)",
    )
    category_id: int | None = Field(
        default=None,
        sa_column=Column("category_id", ForeignKey("categories.id"), nullable=True),
    )
    topic_id: int | None = Field(
        default=None,
        sa_column=Column("topic_id", ForeignKey("topics.id"), nullable=True, index=True),
    )

    title: str = Field(sa_column=Column(String(50), nullable=False))
    description: str = Field(sa_column=Column(String(200), nullable=False))
    content: str = Field(sa_column=Column(Text, nullable=False))
    cover_image: str | None = Field(default=None, sa_column=Column(String(500)))

    view_count: int = Field(default=0, nullable=False, index=True)
    like_count: int = Field(default=0, nullable=False)

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False, index=True),
    )
    updated_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    deleted_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True), index=True),
    )
