"""Topic repository."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import ColumnElement, Select, select

from inkblog.configs.settings import TOPIC_PAGE_SIZE
from inkblog.errors.database import DuplicateEntryError
from inkblog.models import TopicDB, UserDB
from inkblog.repositories.base import SoftDeleteRepository
from inkblog.schemas.common import PageInfo, SimpleUser
from inkblog.schemas.taxonomy import TopicDetail, TopicItem, TopicRequest


def _detail_statement() -> Select[Any]:
    return (
        select(TopicDB, UserDB)
        .join(UserDB, UserDB.id == TopicDB.user_id)
        .where(TopicDB.deleted_at.is_(None))
    )


def _detail(row: Sequence[Any]) -> TopicDetail:
    topic, user = row
    return TopicDetail(
        id=topic.id,
        name=topic.name,
        description=topic.description,
        cover_image=topic.cover_image,
        created_at=topic.created_at,
        user=SimpleUser.model_validate(user),
    )


class TopicRepository(SoftDeleteRepository[TopicDB]):
    model = TopicDB

    async def list_active(self) -> list[TopicItem]:
        result = await self.session.execute(
            select(TopicDB).where(TopicDB.deleted_at.is_(None)).order_by(TopicDB.id),
        )
        return [TopicItem.model_validate(topic) for topic in result.scalars().all()]

    async def get_item(self, topic_id: int) -> TopicItem | None:
        topic = await self.get_active(topic_id)
        return TopicItem.model_validate(topic) if topic else None

    async def page(self, page: int) -> PageInfo[TopicDetail]:
        """Topics newest first, ``TOPIC_PAGE_SIZE`` per page."""
        statement = _detail_statement().order_by(TopicDB.created_at.desc(), TopicDB.id.desc())
        rows, total = await self._paginate(statement, page, TOPIC_PAGE_SIZE)
        return PageInfo[TopicDetail](
            page=page,
            size=TOPIC_PAGE_SIZE,
            total=total,
            data=[_detail(row) for row in rows],
        )

    async def by_user(self, user_id: int) -> list[TopicDetail]:
        statement = _detail_statement().where(TopicDB.user_id == user_id).order_by(TopicDB.id)
        result = await self.session.execute(statement)
        return [_detail(row) for row in result.all()]

    async def create(self, request: TopicRequest, user_id: int) -> TopicDB:
        """
        Insert a topic owned by ``user_id``.

        Raises:
            DuplicateEntryError: If the name is already taken
        """
        if await self._check_exists_by_field("name", request.name):
            mssg = f"Topic named '{request.name}' already exists"
            raise DuplicateEntryError(detail=mssg)
        topic = TopicDB(
            name=request.name,
            description=request.description,
            cover_image=request.cover_image,
            user_id=user_id,
        )
        return await self._add_and_refresh(topic)

    async def update(self, topic: TopicDB, request: TopicRequest) -> TopicDB:
        if await self._check_exists_by_field("name", request.name, exclude_id=topic.id):
            mssg = f"Topic named '{request.name}' already exists"
            raise DuplicateEntryError(detail=mssg)
        topic.name = request.name
        topic.description = request.description
        topic.cover_image = request.cover_image
        return await self._add_and_refresh(topic)

    async def admin_page(
        self,
        page: int,
        size: int,
        name: str | None = None,
        deleted: bool | None = None,
        owner_id: int | None = None,
    ) -> tuple[list[TopicDB], int]:
        criteria: list[ColumnElement[bool]] = []
        if owner_id is not None:
            criteria.append(TopicDB.user_id == owner_id)
        if name:
            criteria.append(TopicDB.name.ilike(f"%{name}%"))
        if deleted is True:
            criteria.append(TopicDB.deleted_at.is_not(None))
        elif deleted is False:
            criteria.append(TopicDB.deleted_at.is_(None))
        statement = select(TopicDB).where(*criteria).order_by(TopicDB.id.desc())
        rows, total = await self._paginate(statement, page, size)
        return [row[0] for row in rows], total

    async def owned_ids(self, ids: Sequence[int], owner_id: int | None) -> list[int]:
        if owner_id is None:
            return list(ids)
        result = await self.session.execute(
            select(TopicDB.id).where(TopicDB.id.in_(ids), TopicDB.user_id == owner_id),
        )
        return list(result.scalars().all())
