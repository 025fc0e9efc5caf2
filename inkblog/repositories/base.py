"""Base repository for database operations."""

from collections.abc import Sequence
from datetime import datetime
from typing import Any

from sqlalchemy import ColumnElement, Select, func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from inkblog.errors.database import DatabaseError, DuplicateEntryError
from inkblog.models._time import utcnow

type FilterValue = str | int | float | bool | datetime | None


class BaseRepository[ModelT: SQLModel]:
    """
    Base repository implementing the lookups every table shares.

    Attributes:
        model: The SQLModel database model type.
        id_field: The name of the primary key field (default: "id").
    """

    model: type[ModelT]
    id_field: str = "id"

    def __init__(self, session: AsyncSession) -> None:
        """
        Initialize repository with database session.

        Args:
            session: Async database session
        """
        self.session = session

    @property
    def _id_column(self) -> Any:
        return getattr(self.model, self.id_field)

    async def get_by_id(self, record_id: int) -> ModelT | None:
        """
        Get a record by its ID.

        Args:
            record_id: Record id

        Returns:
            ModelT | None: Record if found, None otherwise
        """
        return await self.session.get(self.model, record_id)

    async def get_by_field(self, field_name: str, value: FilterValue) -> ModelT | None:
        """
        Get a record by a specific field value.

        Args:
            field_name: Name of the field to search
            value: Value to search for

        Returns:
            ModelT | None: Record if found, None otherwise
        """
        field = getattr(self.model, field_name)
        result = await self.session.execute(select(self.model).where(field == value))
        return result.scalars().first()

    async def count(self, *criteria: ColumnElement[bool]) -> int:
        statement = select(func.count()).select_from(self.model).where(*criteria)
        result = await self.session.execute(statement)
        return result.scalar() or 0

    async def _paginate(
        self,
        statement: Select[Any],
        page: int,
        size: int,
    ) -> tuple[Sequence[Any], int]:
        """
        Run one page of ``statement`` plus a count of all its rows.

        Returns:
            The rows of the page and the total number of rows.
        """
        total_statement = statement.with_only_columns(
            func.count(),
            maintain_column_froms=True,
        ).order_by(None)
        total = (await self.session.execute(total_statement)).scalar() or 0
        if not total:
            return [], 0
        result = await self.session.execute(statement.offset((page - 1) * size).limit(size))
        return result.all(), total

    async def commit(self) -> None:
        """
        Commit the session now.

        Services commit before touching the cache, so an invalidation is
        never visible before the write it follows.

        Raises:
            DuplicateEntryError: If a unique constraint is violated
            DatabaseError: For other database errors
        """
        try:
            await self.session.commit()
        except IntegrityError as e:
            await self.session.rollback()
            raise DuplicateEntryError(detail=str(e.orig) if e.orig else str(e)) from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(detail=f"Failed to commit: {e}") from e

    async def _add_and_refresh(self, record: ModelT) -> ModelT:
        """
        Add a record and refresh it from the database with error handling.

        Args:
            record: Record to add

        Returns:
            ModelT: Refreshed record

        Raises:
            DuplicateEntryError: If a unique constraint is violated
            DatabaseError: For other database errors
        """
        try:
            self.session.add(record)
            await self.session.flush()
            await self.session.refresh(record)
        except IntegrityError as e:
            await self.session.rollback()
            error_msg = str(e.orig) if e.orig else str(e)
            if "unique" in error_msg.lower() or "duplicate" in error_msg.lower():
                raise DuplicateEntryError(detail=error_msg) from e
            raise DatabaseError(detail=f"Database integrity error: {error_msg}") from e
        except SQLAlchemyError as e:
            await self.session.rollback()
            raise DatabaseError(detail=f"Failed to save record: {e}") from e
        return record

    async def _check_exists_by_field(
        self,
        field_name: str,
        value: FilterValue,
        exclude_id: int | None = None,
    ) -> bool:
        """
        Check if a record exists with a specific field value.

        Args:
            field_name: Name of the field to check
            value: Value to check for
            exclude_id: Optional ID to exclude from check (for updates)

        Returns:
            bool: True if record exists, False otherwise
        """
        field = getattr(self.model, field_name)
        statement = select(1).where(field == value)

        if exclude_id is not None:
            statement = statement.where(self._id_column != exclude_id)

        result = await self.session.execute(statement.limit(1))
        return result.scalar_one_or_none() is not None


class SoftDeleteRepository[ModelT: SQLModel](BaseRepository[ModelT]):
    """Repository for tables that hide rows through ``deleted_at``."""

    async def get_active(self, record_id: int) -> ModelT | None:
        record = await self.get_by_id(record_id)
        if record is None or getattr(record, "deleted_at", None) is not None:
            return None
        return record

    async def soft_delete(self, ids: Sequence[int]) -> list[int]:
        """
        Mark rows as deleted.

        Returns:
            Ids whose state actually changed.
        """
        return await self._set_deleted(ids, utcnow())

    async def restore(self, ids: Sequence[int]) -> list[int]:
        """Clear ``deleted_at``; returns ids whose state actually changed."""
        return await self._set_deleted(ids, None)

    async def _set_deleted(self, ids: Sequence[int], deleted_at: datetime | None) -> list[int]:
        if not ids:
            return []
        deleted_column = getattr(self.model, "deleted_at")  # noqa: B009
        state = deleted_column.is_(None) if deleted_at else deleted_column.is_not(None)
        statement = (
            update(self.model)
            .where(self._id_column.in_(ids), state)
            .values(deleted_at=deleted_at)
            .returning(self._id_column)
        )
        try:
            result = await self.session.execute(statement)
        except SQLAlchemyError as e:
            raise DatabaseError(detail=f"Failed to update {self.model.__name__}: {e}") from e
        return sorted(result.scalars().all())


class NamedRepository[ModelT: SQLModel](SoftDeleteRepository[ModelT]):
    """Shared queries for the name-only taxonomies (categories and tags)."""

    async def list_active(self) -> list[ModelT]:
        name_column = getattr(self.model, "name")  # noqa: B009
        deleted_column = getattr(self.model, "deleted_at")  # noqa: B009
        result = await self.session.execute(
            select(self.model).where(deleted_column.is_(None)).order_by(name_column),
        )
        return list(result.scalars().all())

    async def create(self, name: str) -> ModelT:
        """
        Insert a new row.

        Raises:
            DuplicateEntryError: If the name is already taken
        """
        if await self._check_exists_by_field("name", name):
            mssg = f"{self.model.__name__} named '{name}' already exists"
            raise DuplicateEntryError(detail=mssg)
        return await self._add_and_refresh(self.model(name=name))

    async def rename(self, record_id: int, name: str) -> ModelT | None:
        record = await self.get_by_id(record_id)
        if record is None:
            return None
        if await self._check_exists_by_field("name", name, exclude_id=record_id):
            mssg = f"{self.model.__name__} named '{name}' already exists"
            raise DuplicateEntryError(detail=mssg)
        record.name = name  # type: ignore[attr-defined]
        return await self._add_and_refresh(record)

    async def admin_page(
        self,
        page: int,
        size: int,
        name: str | None = None,
        deleted: bool | None = None,
    ) -> tuple[list[ModelT], int]:
        criteria: list[ColumnElement[bool]] = []
        deleted_column = getattr(self.model, "deleted_at")  # noqa: B009
        if name:
            criteria.append(getattr(self.model, "name").ilike(f"%{name}%"))  # noqa: B009
        if deleted is True:
            criteria.append(deleted_column.is_not(None))
        elif deleted is False:
            criteria.append(deleted_column.is_(None))
        statement = select(self.model).where(*criteria).order_by(self._id_column.desc())
        rows, total = await self._paginate(statement, page, size)
        return [row[0] for row in rows], total
