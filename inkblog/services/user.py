"""User service: registration, login sessions and profiles."""

from logging import getLogger
from secrets import randbelow

from inkblog.errors import (
    DuplicateEntryError,
    InvalidCredentialsError,
    InvalidEmailCodeError,
    UserNotFoundError,
)
from inkblog.managers.blog_cache import BlogCache
from inkblog.managers.page_cache import PageCache
from inkblog.managers.password_manager import hash_password, verify_password
from inkblog.managers.token_manager import create_access_token
from inkblog.managers.user_cache import UserCache
from inkblog.models import Role
from inkblog.repositories import BlogRepository, UserRepository
from inkblog.schemas.auth import Token
from inkblog.schemas.user import (
    LoginRequest,
    ProfileUpdate,
    RegisterRequest,
    UserPublic,
    UserRecord,
    WebsiteConfig,
)
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class UserService:
    """Service for user accounts, backed by the user cache."""

    def __init__(
        self,
        users: UserRepository,
        blogs: BlogRepository,
        user_cache: UserCache,
        blog_cache: BlogCache,
        page_cache: PageCache,
    ) -> None:
        self.users = users
        self.blogs = blogs
        self.user_cache = user_cache
        self.blog_cache = blog_cache
        self.page_cache = page_cache

    async def get_record(self, username: str) -> UserRecord | None:
        return await self.user_cache.get_user(username, self.users.get_record)

    async def profile(self, username: str) -> UserPublic:
        """
        Raises:
            UserNotFoundError: If the user does not exist
        """
        record = await self.get_record(username)
        if record is None:
            raise UserNotFoundError(username)
        return UserPublic.model_validate(record)

    # --- registration ---

    async def send_register_code(self, username: str) -> None:
        """
        Issue a six digit registration code valid for one minute.

        Mail delivery is out of scope; the code is written to the log.

        Raises:
            DuplicateEntryError: If the address is already registered
        """
        if await self.users.get_by_username(username):
            mssg = f"User '{username}' already exists"
            raise DuplicateEntryError(mssg)
        code = f"{randbelow(1_000_000):06d}"
        await self.user_cache.set_email_code(username, code)
        logger.info(f"Registration code for {username}: {code}")

    async def register(self, request: RegisterRequest) -> UserPublic:
        """
        Create an account after checking the registration code.

        The code is consumed whether or not it matches.

        Raises:
            InvalidEmailCodeError: If the code is missing, expired or wrong
            DuplicateEntryError: If the address is already registered
        """
        code = await self.user_cache.pop_email_code(request.username)
        if code is None or code != request.code:
            raise InvalidEmailCodeError
        password_hash = await hash_password(request.password)
        user = await self.users.create(request.username, password_hash, request.nick_name)
        await self.users.commit()
        # Clear anything cached for this name before it existed.
        await self.user_cache.invalidate_user(user.username)
        logger.info(f"User {user.username} registered")
        return UserPublic.model_validate(user)

    # --- sessions ---

    async def login(self, request: LoginRequest) -> Token:
        """
        Verify credentials and start the user's single active session.

        A new login replaces the cached token, which ends any earlier session.

        Raises:
            InvalidCredentialsError: If the user is unknown or the password is wrong
        """
        record = await self.get_record(request.username)
        # A missing hash still runs a dummy verify.
        valid = await verify_password(request.password, record.password_hash if record else None)
        if record is None or not valid:
            logger.warning(f"Failed login for {request.username}")
            raise InvalidCredentialsError

        token = create_access_token(record.id, record.username)
        await self.user_cache.set_token(record.username, token)
        logger.info(f"User {record.username} logged in")
        return Token(access_token=token)

    async def logout(self, username: str) -> bool:
        return await self.user_cache.remove_token(username)

    # --- profile ---

    async def update_profile(self, username: str, profile: ProfileUpdate) -> UserPublic:
        """
        Update nickname or icon and drop every cached copy of the author.

        Post details and listing pages embed the author, so they are
        invalidated along with the user record.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(username)
        user = await self.users.update_profile(user, profile)
        await self.users.commit()
        await self.user_cache.invalidate_user(username)
        await self.page_cache.invalidate_all()
        if blog_ids := await self.blogs.ids_by("user_id", [user.id]):
            await self.blog_cache.invalidate(*blog_ids)
        logger.info(f"Profile of {username} updated, {len(blog_ids)} post details dropped")
        return UserPublic.model_validate(user)

    async def change_role(self, username: str, role: Role) -> UserPublic:
        """
        Change a user's role and drop the cached record.

        Raises:
            UserNotFoundError: If the user does not exist
        """
        user = await self.users.get_by_username(username)
        if user is None:
            raise UserNotFoundError(username)
        user = await self.users.update_role(user, role)
        await self.users.commit()
        await self.user_cache.invalidate_user(username)
        logger.info(f"Role of {username} changed to {role}")
        return UserPublic.model_validate(user)

    # --- site profile ---

    async def website_config(self) -> WebsiteConfig:
        return await self.user_cache.get_website_config()

    async def set_website_config(self, config: WebsiteConfig) -> WebsiteConfig:
        await self.user_cache.set_website_config(config)
        return config
