from collections.abc import AsyncGenerator
from unittest.mock import AsyncMock, MagicMock

import pytest
from httpx import ASGITransport, AsyncClient

from inkblog.clients.search_client import SearchClient
from inkblog.configs.settings import BlogCacheConfig, CacheConfig, Settings
from inkblog.db import get_session
from inkblog.main import app
from inkblog.managers import limiter
from inkblog.managers.cache_manager import CacheManager
from inkblog.managers.password_manager import get_password_hasher
from inkblog.managers.token_manager import create_access_token
from inkblog.managers.user_cache import UserCache
from inkblog.models import Role
from inkblog.schemas.user import UserRecord


@pytest.fixture
async def cache_manager() -> AsyncGenerator[CacheManager]:
    manager = CacheManager(config=CacheConfig(enabled_redis=False))
    await manager.initialize()
    yield manager
    await manager.clear()
    await manager.shutdown()


@pytest.fixture
def database() -> MagicMock:
    return MagicMock(ping=AsyncMock(return_value=True))


@pytest.fixture(autouse=True)
async def setup_app_state(cache_manager: CacheManager, database: MagicMock) -> AsyncGenerator[None]:
    """Put the long-lived clients the lifespan would create on ``app.state``."""
    settings = Settings()
    app.state.cache_manager = cache_manager
    app.state.database = database
    app.state.settings = settings
    app.state.blog_cache_config = BlogCacheConfig()
    search_client = SearchClient(settings)
    app.state.search_client = search_client

    async def _session() -> AsyncGenerator[MagicMock]:
        yield MagicMock()

    app.dependency_overrides[get_session] = _session
    yield
    app.dependency_overrides.clear()
    await search_client.close()


@pytest.fixture
async def client() -> AsyncGenerator[AsyncClient]:
    """Create async HTTP client for testing."""
    limiter.enabled = False
    async with AsyncClient(
        base_url="http://test",
        transport=ASGITransport(app=app),
    ) as ac:
        yield ac
    limiter.enabled = True


@pytest.fixture
def user_cache(cache_manager: CacheManager) -> UserCache:
    return UserCache(cache_manager)


@pytest.fixture
def writer() -> UserRecord:
    return UserRecord(
        id=1,
        username="writer@example.com",
        password_hash=get_password_hasher().hash("s3cret-pass"),
        nick_name="Writer",
        role=Role.USER,
    )


@pytest.fixture
async def writer_headers(writer: UserRecord, user_cache: UserCache) -> dict[str, str]:
    """Bearer headers for a token that is the writer's active session."""
    token = create_access_token(writer.id, writer.username)
    await user_cache.set_token(writer.username, token)
    return {"Authorization": f"Bearer {token}"}
