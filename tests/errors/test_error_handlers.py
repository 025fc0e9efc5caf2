"""Tests for the JSON exception handlers."""

from collections.abc import Awaitable, Callable
from logging import getLogger
from unittest.mock import MagicMock

import orjson
import pytest
from fastapi.responses import ORJSONResponse
from slowapi.errors import RateLimitExceeded
from starlette.requests import Request

from inkblog.errors import (
    BaseAppError,
    CacheKeyError,
    DatabaseConnectionError,
    DuplicateEntryError,
    ForbiddenError,
    InvalidTokenError,
    create_exception_handler,
)
from inkblog.managers.rate_limiter import rate_limit_exceeded_handler

Handler = Callable[[Request, Exception], Awaitable[ORJSONResponse]]


@pytest.fixture
def request_() -> Request:
    return Request(
        {
            "type": "http",
            "method": "GET",
            "scheme": "http",
            "server": ("test", 80),
            "path": "/api/v1/blogs/1",
            "root_path": "",
            "query_string": b"",
            "headers": [],
            "client": ("10.0.0.1", 5000),
        },
    )


@pytest.fixture
def handler() -> Handler:
    return create_exception_handler(getLogger("tests.errors"))


class ExtraFieldError(BaseAppError):
    def __init__(self) -> None:
        super().__init__("Out of range", 400)
        self.limit = 4


@pytest.mark.asyncio
async def test_detail_and_status(handler: Handler, request_: Request) -> None:
    """Test the error's detail and status code become the response."""
    response = await handler(request_, DuplicateEntryError("Tag named 'redis' already exists"))

    assert response.status_code == 409
    assert orjson.loads(response.body) == {"detail": "Tag named 'redis' already exists"}


@pytest.mark.asyncio
async def test_extra_attributes_in_body(handler: Handler, request_: Request) -> None:
    """Test subclass attributes are added next to detail."""
    response = await handler(request_, ExtraFieldError())
    assert orjson.loads(response.body) == {"detail": "Out of range", "limit": 4}


@pytest.mark.asyncio
async def test_unauthorized_sends_bearer_challenge(handler: Handler, request_: Request) -> None:
    """Test 401 responses carry WWW-Authenticate and 403 responses do not."""
    unauthorized = await handler(request_, InvalidTokenError())
    forbidden = await handler(request_, ForbiddenError())

    assert unauthorized.headers["www-authenticate"] == "Bearer"
    assert "www-authenticate" not in forbidden.headers
    assert "headers" not in orjson.loads(unauthorized.body)


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (DatabaseConnectionError(), 503),
        (CacheKeyError("get", "blog:1"), 503),
        (ForbiddenError(), 403),
    ],
)
def test_status_codes(error: BaseAppError, status_code: int) -> None:
    """Test the status code of each error family."""
    assert error.status_code == status_code


def test_cache_key_error_message() -> None:
    """Test the message names the failed operation and key."""
    assert str(CacheKeyError("hincrby", "blog:view_count")) == "Cache hincrby failed for key blog:view_count"


@pytest.mark.asyncio
async def test_rate_limit_handler(request_: Request) -> None:
    """Test the 429 body and Retry-After header."""
    exc = MagicMock(spec=RateLimitExceeded)
    exc.detail = "5 per 1 minute"
    exc.limit = MagicMock()
    exc.limit.limit.get_expiry.return_value = 60

    response = await rate_limit_exceeded_handler(request_, exc)

    assert response.status_code == 429
    assert response.headers["retry-after"] == "60"
    assert orjson.loads(response.body) == {
        "detail": "Rate limit exceeded",
        "allowed_requests": "5 per 1 minute",
        "retry_after": "60 seconds",
    }
