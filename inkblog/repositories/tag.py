"""Tag repository."""

from sqlalchemy import select

from inkblog.models import TagDB
from inkblog.repositories.base import NamedRepository


class TagRepository(NamedRepository[TagDB]):
    model = TagDB

    async def get_active_ids(self, ids: list[int]) -> list[int]:
        """Subset of ``ids`` that name existing, non-deleted tags."""
        if not ids:
            return []
        result = await self.session.execute(
            select(TagDB.id).where(TagDB.id.in_(ids), TagDB.deleted_at.is_(None)),
        )
        return list(result.scalars().all())
