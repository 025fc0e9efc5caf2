"""Uploaded file repository."""

from collections.abc import Sequence

from sqlalchemy import ColumnElement, delete, select, update

from inkblog.configs.settings import ADMIN_OTHER_PAGE_SIZE, FILE_PAGE_SIZE
from inkblog.models import FileDB, UserDB
from inkblog.repositories.base import BaseRepository
from inkblog.schemas.common import PageInfo, SimpleUser
from inkblog.schemas.file import AdminFileItem, FileItem


class FileRepository(BaseRepository[FileDB]):
    model = FileDB

    async def find_by_md5(self, md5: str) -> FileDB | None:
        """First stored file with this content hash."""
        result = await self.session.execute(
            select(FileDB).where(FileDB.md5 == md5.lower()).order_by(FileDB.id).limit(1),
        )
        return result.scalars().first()

    async def path_in_use(self, file_path: str) -> bool:
        return await self._check_exists_by_field("file_path", file_path)

    async def create(
        self,
        user_id: int,
        file_name: str,
        file_path: str,
        file_url: str,
        md5: str,
    ) -> FileDB:
        record = FileDB(
            user_id=user_id,
            file_name=file_name,
            file_path=file_path,
            file_url=file_url,
            md5=md5.lower(),
        )
        return await self._add_and_refresh(record)

    async def page_by_user(self, user_id: int, page: int) -> PageInfo[FileItem]:
        statement = select(FileDB).where(FileDB.user_id == user_id).order_by(FileDB.id.desc())
        rows, total = await self._paginate(statement, page, FILE_PAGE_SIZE)
        return PageInfo[FileItem](
            page=page,
            size=FILE_PAGE_SIZE,
            total=total,
            data=[FileItem.model_validate(row[0]) for row in rows],
        )

    async def admin_page(
        self,
        page: int,
        name: str | None = None,
        owner_id: int | None = None,
    ) -> PageInfo[AdminFileItem]:
        criteria: list[ColumnElement[bool]] = []
        if owner_id is not None:
            criteria.append(FileDB.user_id == owner_id)
        if name:
            criteria.append(FileDB.file_name.ilike(f"%{name}%"))
        statement = (
            select(FileDB, UserDB)
            .join(UserDB, UserDB.id == FileDB.user_id)
            .where(*criteria)
            .order_by(FileDB.id.desc())
        )
        rows, total = await self._paginate(statement, page, ADMIN_OTHER_PAGE_SIZE)
        return PageInfo[AdminFileItem](
            page=page,
            size=ADMIN_OTHER_PAGE_SIZE,
            total=total,
            data=[
                AdminFileItem(
                    **FileItem.model_validate(record).model_dump(),
                    user=SimpleUser.model_validate(user),
                )
                for record, user in rows
            ],
        )

    async def set_public(self, ids: Sequence[int], *, is_public: bool, owner_id: int | None) -> int:
        criteria: list[ColumnElement[bool]] = [FileDB.id.in_(ids)]
        if owner_id is not None:
            criteria.append(FileDB.user_id == owner_id)
        result = await self.session.execute(
            update(FileDB).where(*criteria).values(is_public=is_public),
        )
        return result.rowcount

    async def delete_many(self, ids: Sequence[int], owner_id: int | None) -> list[str]:
        """
        Delete file rows.

        Returns:
            Storage paths of the deleted rows, for removal from disk.
        """
        criteria: list[ColumnElement[bool]] = [FileDB.id.in_(ids)]
        if owner_id is not None:
            criteria.append(FileDB.user_id == owner_id)
        result = await self.session.execute(
            delete(FileDB).where(*criteria).returning(FileDB.file_path),
        )
        return list(result.scalars().all())
