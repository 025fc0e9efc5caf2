"""User database model using SQLModel."""

from datetime import datetime
from enum import StrEnum
from typing import cast

from sqlalchemy import DateTime
from sqlalchemy.orm import declared_attr
from sqlmodel import Column, Field, SQLModel, String

from inkblog.models._time import utcnow


class Role(StrEnum):
    USER = "USER"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


ADMIN_ROLES = frozenset({Role.ADMIN, Role.SUPER_ADMIN})


class UserDB(SQLModel, table=True):
    """
    User database model for PostgreSQL.

    The username is the login e-mail address.
    """

    __tablename__ = cast("declared_attr[str]", "users")

    id: int | None = Field(default=None, primary_key=True, description="User ID")

    username: str = Field(
        sa_column=Column(String(100), unique=True, nullable=False, index=True),
        description="Login name (e-mail address, unique)",
    )
    password_hash: str = Field(
        sa_column=Column(String(255), nullable=False),
        description="Argon2 password hash",
    )
    nick_name: str = Field(
        sa_column=Column(String(50), nullable=False),
        description="Display name",
    )
    icon: str | None = Field(
        default=None,
        sa_column=Column(String(500)),
        description="Avatar URL",
    )
    role: str = Field(
        default=Role.USER,
        sa_column=Column(String(20), nullable=False, server_default=Role.USER.value),
        description="USER, ADMIN or SUPER_ADMIN",
    )

    created_at: datetime = Field(
        default_factory=utcnow,
        sa_column=Column(DateTime(timezone=True), nullable=False),
    )
    updated_at: datetime | None = Field(
        default=None,
        sa_column=Column(DateTime(timezone=True)),
    )
