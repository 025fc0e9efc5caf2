"""User records, session tokens, registration codes and the site profile."""

from collections.abc import Awaitable, Callable

from pydantic import TypeAdapter

from inkblog.configs import settings
from inkblog.configs.settings import EMAIL_CODE_TTL, USER_INFO_TTL
from inkblog.managers.cache_aside import CacheAside
from inkblog.managers.cache_manager import CacheManager
from inkblog.schemas.user import UserRecord, WebsiteConfig
from inkblog.utils.cache_keys import WEBSITE_CONFIG_KEY, email_code_key, token_key, user_key

_user = TypeAdapter(UserRecord)
_website = TypeAdapter(WebsiteConfig)
_text = TypeAdapter(str)


class UserCache(CacheAside):
    """
    Cache-aside access for everything keyed by a username.

    The cached token is the single active session of a user: login
    overwrites it, logout deletes it, and a signed token that does not
    match it is rejected.
    """

    def __init__(self, cache: CacheManager, token_ttl_days: int | None = None) -> None:
        super().__init__(cache)
        self.token_ttl = (token_ttl_days or settings.TOKEN_EXPIRE_DAYS) * 24 * 60 * 60

    async def get_user(
        self,
        username: str,
        loader: Callable[[str], Awaitable[UserRecord | None]],
    ) -> UserRecord | None:
        """Read a user through the cache; unknown usernames are not cached."""
        key = user_key(username)
        cached = await self._read_as(key, _user)
        if cached is not None:
            return cached

        record = await loader(username)
        if record is not None:
            await self._write(key, record, _user, USER_INFO_TTL)
        return record

    async def invalidate_user(self, username: str) -> bool:
        return await self._drop(user_key(username))

    # --- session token ---

    async def set_token(self, username: str, token: str) -> bool:
        return await self._write(token_key(username), token, _text, self.token_ttl)

    async def get_token(self, username: str) -> str | None:
        """Current session token; None on a miss or when the cache is unreachable."""
        return await self._read_as(token_key(username), _text)

    async def remove_token(self, username: str) -> bool:
        return await self._drop(token_key(username))

    # --- registration codes ---

    async def set_email_code(self, username: str, code: str) -> bool:
        return await self._write(email_code_key(username), code, _text, EMAIL_CODE_TTL)

    async def pop_email_code(self, username: str) -> str | None:
        """Return the pending code and delete it, so a code is usable once."""
        key = email_code_key(username)
        code = await self._read_as(key, _text)
        if code is not None:
            await self._drop(key)
        return code

    # --- site profile ---

    async def get_website_config(self) -> WebsiteConfig:
        return await self._read_as(WEBSITE_CONFIG_KEY, _website) or WebsiteConfig()

    async def set_website_config(self, config: WebsiteConfig) -> bool:
        return await self._write(WEBSITE_CONFIG_KEY, config, _website)
