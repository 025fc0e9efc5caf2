"""
Cache errors.

``CacheManager`` raises these; the blog, page, taxonomy and user caches
catch them and fall back to the database. ``CachePayloadError`` marks a
stored value that can never be read back, so callers drop the key.
"""

from logging import getLogger

from starlette import status

from inkblog.errors.base import BaseAppError, create_exception_handler
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class CacheExceptionError(BaseAppError):
    """Base exception for cache operations."""

    def __init__(self, detail: str = "Cache unavailable") -> None:
        super().__init__(detail=detail, status_code=status.HTTP_503_SERVICE_UNAVAILABLE)


class CacheKeyError(CacheExceptionError):
    """The backend failed while running ``operation`` on ``key``."""

    def __init__(self, operation: str = "operation", key: str = "") -> None:
        super().__init__(f"Cache {operation} failed for key {key}" if key else f"Cache {operation} failed")


class CacheSerializationError(CacheExceptionError):
    def __init__(self, detail: str = "Value cannot be encoded for the cache") -> None:
        super().__init__(detail)


class CacheCompressionError(CacheExceptionError):
    def __init__(self, detail: str = "Cache payload cannot be compressed") -> None:
        super().__init__(detail)


class CachePayloadError(CacheExceptionError):
    """A stored payload is corrupt."""


class CacheDeserializationError(CachePayloadError):
    def __init__(self, detail: str = "Cached payload is not valid JSON") -> None:
        super().__init__(detail)


class CacheDecompressionError(CachePayloadError):
    def __init__(self, detail: str = "Cached payload cannot be decompressed") -> None:
        super().__init__(detail)


cache_exception_handler = create_exception_handler(logger)
