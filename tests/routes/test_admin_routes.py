"""Tests for role checks on admin endpoints and the health probe."""

from unittest.mock import MagicMock

import pytest
from httpx import AsyncClient

from inkblog.dependencies.dependencies import get_current_user
from inkblog.main import app
from inkblog.models import Role
from inkblog.schemas.user import UserRecord


def _as(user: UserRecord, role: Role) -> None:
    app.dependency_overrides[get_current_user] = lambda: user.model_copy(update={"role": role})


@pytest.mark.asyncio
async def test_regular_user_is_forbidden(client: AsyncClient, writer: UserRecord) -> None:
    """Test USER accounts cannot reach admin listings."""
    _as(writer, Role.USER)
    response = await client.get("/api/v1/admin/blogs")

    assert response.status_code == 403
    assert response.json()["detail"] == "Admin access required"


@pytest.mark.asyncio
async def test_admin_cannot_flush_view_counts(client: AsyncClient, writer: UserRecord) -> None:
    """Test the manual flush is reserved for super admins."""
    _as(writer, Role.ADMIN)
    assert (await client.post("/api/v1/admin/init-eye-count")).status_code == 403


@pytest.mark.asyncio
async def test_super_admin_flush_with_empty_buffer(client: AsyncClient, writer: UserRecord) -> None:
    """Test a manual flush with nothing buffered reports nothing."""
    _as(writer, Role.SUPER_ADMIN)
    response = await client.post("/api/v1/admin/init-eye-count")

    assert response.status_code == 200
    assert response.json() == {"flushed": [], "failed": [], "skipped": False}


@pytest.mark.asyncio
async def test_admin_cache_health(client: AsyncClient, writer: UserRecord) -> None:
    """Test admins can read cache health."""
    _as(writer, Role.ADMIN)
    response = await client.get("/api/v1/admin/cache/health")

    assert response.status_code == 200
    assert response.json()["backend"] == "in-memory"


@pytest.mark.asyncio
async def test_health(client: AsyncClient) -> None:
    """Test the health probe reports cache and database state."""
    response = await client.get("/health")

    assert response.status_code == 200
    assert "x-process-time" in response.headers
    body = response.json()
    assert body["status"] == "ok"
    assert body["database"] == "ok"
    assert body["cache"]["backend"] == "in-memory"


@pytest.mark.asyncio
async def test_health_degraded_without_database(client: AsyncClient, database: MagicMock) -> None:
    """Test an unreachable database degrades the health status."""
    database.ping.return_value = False
    body = (await client.get("/health")).json()

    assert body["status"] == "degraded"
    assert body["database"] == "unavailable"
