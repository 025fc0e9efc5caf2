"""
Rate limits keyed by client address.

Login and registration use ``AUTH_LIMIT``; every other route gets the
default limit from ``LimiterConfig`` through ``SlowAPIMiddleware``.
"""

from logging import getLogger
from typing import cast

from fastapi import Request
from fastapi.responses import ORJSONResponse
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.status import HTTP_429_TOO_MANY_REQUESTS

from inkblog.configs import LimiterConfig
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

AUTH_LIMIT = "5/minute"

limiter = Limiter(**LimiterConfig().model_dump(), key_func=get_remote_address)


async def rate_limit_exceeded_handler(
    request: Request,
    exc: Exception,
) -> ORJSONResponse:
    """
    Handle rate limit exceeded exceptions.

    Args:
        request: FastAPI request object.
        exc: RateLimitExceeded exception.

    Returns:
        429 response whose ``Retry-After`` is the length of the limit window.
    """
    limit_exc = cast(RateLimitExceeded, exc)
    retry_after = limit_exc.limit.limit.get_expiry()
    logger.warning(
        f"Rate limit {limit_exc.detail} exceeded by {get_remote_address(request)} on {request.url.path}",
    )
    return ORJSONResponse(
        status_code=HTTP_429_TOO_MANY_REQUESTS,
        content={
            "detail": "Rate limit exceeded",
            "allowed_requests": limit_exc.detail,
            "retry_after": f"{retry_after} seconds",
        },
        headers={"Retry-After": str(retry_after)},
    )
