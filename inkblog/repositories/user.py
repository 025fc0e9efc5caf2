"""User repository for database operations."""

from inkblog.errors.database import DuplicateEntryError
from inkblog.models import Role, UserDB
from inkblog.models._time import utcnow
from inkblog.repositories.base import BaseRepository
from inkblog.schemas.user import ProfileUpdate, UserRecord


class UserRepository(BaseRepository[UserDB]):
    """Repository for User database operations."""

    model = UserDB

    async def get_by_username(self, username: str) -> UserDB | None:
        return await self.get_by_field("username", username)

    async def get_record(self, username: str) -> UserRecord | None:
        """
        Load the cacheable record of a user.

        Args:
            username: Login name

        Returns:
            UserRecord | None: Record if found, None otherwise
        """
        user = await self.get_by_username(username)
        return UserRecord.model_validate(user) if user else None

    async def create(self, username: str, password_hash: str, nick_name: str) -> UserDB:
        """
        Create a new user.

        Raises:
            DuplicateEntryError: If the username is already registered
        """
        if await self._check_exists_by_field("username", username):
            mssg = f"User '{username}' already exists"
            raise DuplicateEntryError(detail=mssg)
        user = UserDB(
            username=username,
            password_hash=password_hash,
            nick_name=nick_name,
            role=Role.USER,
        )
        return await self._add_and_refresh(user)

    async def update_profile(self, user: UserDB, profile: ProfileUpdate) -> UserDB:
        for key, value in profile.model_dump(exclude_unset=True).items():
            setattr(user, key, value)
        user.updated_at = utcnow()
        return await self._add_and_refresh(user)

    async def update_role(self, user: UserDB, role: Role) -> UserDB:
        user.role = role
        user.updated_at = utcnow()
        return await self._add_and_refresh(user)
