from inkblog.errors.auth import (
    ForbiddenError,
    InvalidCredentialsError,
    InvalidEmailCodeError,
    InvalidTokenError,
    UserAuthenticationError,
    auth_exception_handler,
)
from inkblog.errors.base import BASE_EXCEPTION, BaseAppError, create_exception_handler
from inkblog.errors.cache import (
    CacheCompressionError,
    CacheDecompressionError,
    CacheDeserializationError,
    CacheExceptionError,
    CacheKeyError,
    CachePayloadError,
    CacheSerializationError,
    cache_exception_handler,
)
from inkblog.errors.database import (
    DatabaseConnectionError,
    DatabaseError,
    DuplicateEntryError,
    database_exception_handler,
)
from inkblog.errors.domain import (
    BlogNotFoundError,
    CategoryNotFoundError,
    FileTooLargeError,
    InvalidRecommendationError,
    NotFoundError,
    TagNotFoundError,
    TopicNotFoundError,
    UnsupportedFileTypeError,
    UploadError,
    UserNotFoundError,
    domain_exception_handler,
)

__all__ = [
    "BASE_EXCEPTION",
    "BaseAppError",
    "BlogNotFoundError",
    "CacheCompressionError",
    "CacheDecompressionError",
    "CacheDeserializationError",
    "CacheExceptionError",
    "CacheKeyError",
    "CachePayloadError",
    "CacheSerializationError",
    "CategoryNotFoundError",
    "DatabaseConnectionError",
    "DatabaseError",
    "DuplicateEntryError",
    "FileTooLargeError",
    "ForbiddenError",
    "InvalidCredentialsError",
    "InvalidEmailCodeError",
    "InvalidRecommendationError",
    "InvalidTokenError",
    "NotFoundError",
    "TagNotFoundError",
    "TopicNotFoundError",
    "UnsupportedFileTypeError",
    "UploadError",
    "UserAuthenticationError",
    "UserNotFoundError",
    "auth_exception_handler",
    "cache_exception_handler",
    "create_exception_handler",
    "database_exception_handler",
    "domain_exception_handler",
]
