"""Uploaded file records."""

from datetime import datetime
from typing import cast

from sqlalchemy import Boolean, DateTime
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, ForeignKey, SQLModel, String

from inkblog.models._time import utcnow


class FileDB(SQLModel, table=True):
    __tablename__ = cast("declared_attr[str]", "files")

    id: int | None = Field(default=None, primary_key=True)
    user_id: int = Field(
        sa_column=Column(
            "user_id",
            ForeignKey("users.id", ondelete="CASCADE"),
            nullable=False,
            index=True,
        ),
    )
    file_name: str = Field(sa_column=Column(String(255), nullable=False))
    file_path: str = Field(sa_column=Column(String(500), nullable=False))
    file_url: str = Field(sa_column=Column(String(500), nullable=False))
    md5: str = Field(sa_column=Column(String(32), nullable=False, index=True))
    is_public: bool = Field(
        default=False,
        sa_column=Column(Boolean, nullable=False, server_default="false"),
    )
    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
