"""Errors raised by the blog, taxonomy, user and file services."""

from logging import getLogger

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_404_NOT_FOUND,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_415_UNSUPPORTED_MEDIA_TYPE,
)

from inkblog.errors.base import BaseAppError, create_exception_handler
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class NotFoundError(BaseAppError):
    """Base class for lookups that found nothing."""

    def __init__(self, detail: str = "Not found") -> None:
        super().__init__(detail, HTTP_404_NOT_FOUND)


class BlogNotFoundError(NotFoundError):
    def __init__(self, blog_id: int) -> None:
        super().__init__(f"Blog {blog_id} not found")


class CategoryNotFoundError(NotFoundError):
    def __init__(self, category_id: int) -> None:
        super().__init__(f"Category {category_id} not found")


class TagNotFoundError(NotFoundError):
    def __init__(self, tag_id: int) -> None:
        super().__init__(f"Tag {tag_id} not found")


class TopicNotFoundError(NotFoundError):
    def __init__(self, topic_id: int) -> None:
        super().__init__(f"Topic {topic_id} not found")


class UserNotFoundError(NotFoundError):
    def __init__(self, username: str) -> None:
        super().__init__(f"User {username} not found")


class InvalidRecommendationError(BaseAppError):
    """Raised when the recommended set does not hold exactly the required number of posts."""

    def __init__(self, expected: int, actual: int) -> None:
        super().__init__(
            f"Recommended blogs must contain exactly {expected} posts, got {actual}",
            HTTP_400_BAD_REQUEST,
        )


class UploadError(BaseAppError):
    """Base exception for upload-related errors."""

    def __init__(
        self,
        detail: str = "We couldn't upload your file. Please try again.",
        status_code: int = HTTP_400_BAD_REQUEST,
    ) -> None:
        super().__init__(detail=detail, status_code=status_code)


class FileTooLargeError(UploadError):
    def __init__(self, max_size_mb: int) -> None:
        super().__init__(
            f"File is too large. Please use a file smaller than {max_size_mb}MB.",
            HTTP_413_REQUEST_ENTITY_TOO_LARGE,
        )


class UnsupportedFileTypeError(UploadError):
    def __init__(self, content_type: str | None) -> None:
        super().__init__(
            f"Unsupported file type: {content_type or 'unknown'}",
            HTTP_415_UNSUPPORTED_MEDIA_TYPE,
        )


domain_exception_handler = create_exception_handler(logger)
