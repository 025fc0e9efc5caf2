"""Tests for registration, login sessions and profile updates."""

from unittest.mock import AsyncMock, MagicMock

import pytest
from pydantic import ValidationError
from pytest_mock import MockerFixture

from inkblog.errors import DuplicateEntryError, InvalidCredentialsError, InvalidEmailCodeError, UserNotFoundError
from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.page_cache import PageCache
from inkblog.managers.password_manager import get_password_hasher
from inkblog.managers.token_manager import decode_access_token
from inkblog.managers.user_cache import UserCache
from inkblog.models import Role, UserDB
from inkblog.schemas.blog import BlogPageQuery
from inkblog.schemas.user import LoginRequest, ProfileUpdate, RegisterRequest, UserRecord
from inkblog.services.user import UserService
from inkblog.utils.cache_keys import blog_key, page_key

USERNAME = "writer@example.com"


@pytest.fixture
def service(
    user_repo: MagicMock,
    blog_repo: MagicMock,
    user_cache: UserCache,
    blog_cache: BlogCache,
    page_cache: PageCache,
) -> UserService:
    return UserService(user_repo, blog_repo, user_cache, blog_cache, page_cache)


@pytest.fixture
def stored_record() -> UserRecord:
    return UserRecord(
        id=7,
        username=USERNAME,
        password_hash=get_password_hasher().hash("s3cret-pass"),
        nick_name="Writer",
    )


def _user_row(**overrides: object) -> UserDB:
    values: dict[str, object] = {
        "id": 7,
        "username": USERNAME,
        "password_hash": "hash",
        "nick_name": "Writer",
        "role": Role.USER,
    }
    values.update(overrides)
    return UserDB(**values)


class TestRegistration:
    """Registration codes and account creation."""

    @pytest.mark.asyncio
    async def test_send_code_for_existing_user(self, service: UserService, user_repo: MagicMock) -> None:
        """Test codes are not issued for registered addresses."""
        user_repo.get_by_username.return_value = _user_row()
        with pytest.raises(DuplicateEntryError):
            await service.send_register_code(USERNAME)

    @pytest.mark.asyncio
    async def test_register_with_valid_code(
        self,
        service: UserService,
        user_repo: MagicMock,
        user_cache: UserCache,
        mocker: MockerFixture,
    ) -> None:
        """Test the issued code creates the account and is consumed."""
        user_repo.get_by_username.return_value = None
        user_repo.create.return_value = _user_row()
        mocker.patch("inkblog.services.user.randbelow", return_value=4321)

        await service.send_register_code(USERNAME)
        user = await service.register(
            RegisterRequest(username=USERNAME, password="s3cret-pass", nick_name="Writer", code="004321"),
        )

        assert user.username == USERNAME
        user_repo.commit.assert_awaited_once()
        stored_hash = user_repo.create.await_args.args[1]
        assert get_password_hasher().verify("s3cret-pass", stored_hash)
        assert await user_cache.pop_email_code(USERNAME) is None

    @pytest.mark.asyncio
    async def test_register_with_wrong_code(
        self,
        service: UserService,
        user_repo: MagicMock,
        user_cache: UserCache,
    ) -> None:
        """Test a wrong code is rejected and burns the pending code."""
        await user_cache.set_email_code(USERNAME, "111111")

        with pytest.raises(InvalidEmailCodeError):
            await service.register(
                RegisterRequest(username=USERNAME, password="s3cret-pass", nick_name="W", code="222222"),
            )
        user_repo.create.assert_not_awaited()
        assert await user_cache.pop_email_code(USERNAME) is None


class TestSessions:
    """Login and logout."""

    @pytest.mark.asyncio
    async def test_login_stores_the_active_token(
        self,
        service: UserService,
        user_repo: MagicMock,
        user_cache: UserCache,
        stored_record: UserRecord,
    ) -> None:
        """Test login issues a token that is also the cached session."""
        user_repo.get_record.return_value = stored_record

        token = await service.login(LoginRequest(username=USERNAME, password="s3cret-pass"))

        assert await user_cache.get_token(USERNAME) == token.access_token
        claims = decode_access_token(token.access_token)
        assert claims is not None
        assert claims.user_id == 7

    @pytest.mark.asyncio
    async def test_second_login_replaces_first(
        self,
        service: UserService,
        user_repo: MagicMock,
        user_cache: UserCache,
        stored_record: UserRecord,
    ) -> None:
        """Test only the latest login stays valid."""
        user_repo.get_record.return_value = stored_record
        request = LoginRequest(username=USERNAME, password="s3cret-pass")

        await service.login(request)
        await user_cache.set_token(USERNAME, "stale-token")
        latest = await service.login(request)

        assert await user_cache.get_token(USERNAME) == latest.access_token

    @pytest.mark.asyncio
    async def test_wrong_password(
        self,
        service: UserService,
        user_repo: MagicMock,
        stored_record: UserRecord,
    ) -> None:
        """Test a wrong password raises InvalidCredentialsError."""
        user_repo.get_record.return_value = stored_record
        with pytest.raises(InvalidCredentialsError):
            await service.login(LoginRequest(username=USERNAME, password="wrong"))

    @pytest.mark.asyncio
    async def test_unknown_user(self, service: UserService, user_repo: MagicMock) -> None:
        """Test an unknown username looks like a wrong password."""
        user_repo.get_record.return_value = None
        with pytest.raises(InvalidCredentialsError):
            await service.login(LoginRequest(username="ghost@example.com", password="x"))

    @pytest.mark.asyncio
    async def test_unknown_user_still_verifies(
        self,
        service: UserService,
        user_repo: MagicMock,
        mocker: MockerFixture,
    ) -> None:
        """Test an unknown username runs the same hash check as a known one."""
        verify = mocker.patch("inkblog.services.user.verify_password", new=AsyncMock(return_value=False))
        user_repo.get_record.return_value = None

        with pytest.raises(InvalidCredentialsError):
            await service.login(LoginRequest(username="ghost@example.com", password="x"))
        verify.assert_awaited_once_with("x", None)

    @pytest.mark.asyncio
    async def test_verified_unknown_user_is_refused(
        self,
        service: UserService,
        user_repo: MagicMock,
        user_cache: UserCache,
        mocker: MockerFixture,
    ) -> None:
        """Test a missing record is refused even if the hash check passes."""
        mocker.patch("inkblog.services.user.verify_password", new=AsyncMock(return_value=True))
        user_repo.get_record.return_value = None

        with pytest.raises(InvalidCredentialsError):
            await service.login(LoginRequest(username="ghost@example.com", password="x"))
        assert await user_cache.get_token("ghost@example.com") is None

    @pytest.mark.asyncio
    async def test_logout(self, service: UserService, user_cache: UserCache) -> None:
        """Test logout drops the cached session."""
        await user_cache.set_token(USERNAME, "token")
        await service.logout(USERNAME)
        assert await user_cache.get_token(USERNAME) is None


class TestProfile:
    """Profile and role updates."""

    @pytest.mark.asyncio
    async def test_update_profile_refreshes_cache(
        self,
        service: UserService,
        user_repo: MagicMock,
        blog_repo: MagicMock,
        stored_record: UserRecord,
    ) -> None:
        """Test the cached record is dropped after a profile change."""
        blog_repo.ids_by.return_value = []
        user_repo.get_record.return_value = stored_record
        await service.get_record(USERNAME)

        user_repo.get_by_username.return_value = _user_row()
        user_repo.update_profile.return_value = _user_row(nick_name="Renamed")
        updated = await service.update_profile(USERNAME, ProfileUpdate(nick_name="Renamed"))

        assert updated.nick_name == "Renamed"
        user_repo.get_record.return_value = stored_record.model_copy(update={"nick_name": "Renamed"})
        record = await service.get_record(USERNAME)
        assert record is not None
        assert record.nick_name == "Renamed"
        assert user_repo.get_record.await_count == 2

    @pytest.mark.asyncio
    async def test_update_profile_drops_author_posts(
        self,
        service: UserService,
        user_repo: MagicMock,
        blog_repo: MagicMock,
        cache_manager: CacheManager,
    ) -> None:
        """Test a new nickname drops the author's cached posts and every listing page."""
        for blog_id in (5, 6, 9):
            await cache_manager.set(blog_key(blog_id), {"id": blog_id, "user": {"nickName": "Writer"}})
        await cache_manager.set(page_key(BlogPageQuery()), {"page": 1})
        user_repo.get_by_username.return_value = _user_row()
        user_repo.update_profile.return_value = _user_row(nick_name="Renamed")
        blog_repo.ids_by.return_value = [5, 6]

        await service.update_profile(USERNAME, ProfileUpdate(nick_name="Renamed"))

        blog_repo.ids_by.assert_awaited_once_with("user_id", [7])
        assert await cache_manager.exists(blog_key(5), blog_key(6), page_key(BlogPageQuery())) == 0
        assert await cache_manager.exists(blog_key(9)) == 1

    @pytest.mark.asyncio
    async def test_update_profile_without_posts(
        self,
        service: UserService,
        user_repo: MagicMock,
        blog_repo: MagicMock,
        cache_manager: CacheManager,
    ) -> None:
        """Test an author with no posts still clears listing pages."""
        await cache_manager.set(page_key(BlogPageQuery()), {"page": 1})
        user_repo.get_by_username.return_value = _user_row()
        user_repo.update_profile.return_value = _user_row(icon="/img/new.png")
        blog_repo.ids_by.return_value = []

        updated = await service.update_profile(USERNAME, ProfileUpdate(icon="/img/new.png"))

        assert updated.icon == "/img/new.png"
        assert await cache_manager.exists(page_key(BlogPageQuery())) == 0
        user_repo.commit.assert_awaited_once()

    def test_null_nick_name_is_rejected(self) -> None:
        """Test an explicit null nickname fails validation while a null icon is allowed."""
        with pytest.raises(ValidationError):
            ProfileUpdate.model_validate({"nickName": None})
        profile = ProfileUpdate.model_validate({"icon": None})
        assert profile.model_dump(exclude_unset=True) == {"icon": None}

    @pytest.mark.asyncio
    async def test_change_role_of_missing_user(self, service: UserService, user_repo: MagicMock) -> None:
        """Test role changes for unknown users raise."""
        user_repo.get_by_username.return_value = None
        with pytest.raises(UserNotFoundError):
            await service.change_role("ghost@example.com", Role.ADMIN)
