"""
Relational store errors.

Repositories translate SQLAlchemy exceptions into these before they leave
the data layer, so services and routes never see driver exceptions.
"""

from logging import getLogger

from starlette.status import (
    HTTP_409_CONFLICT,
    HTTP_500_INTERNAL_SERVER_ERROR,
    HTTP_503_SERVICE_UNAVAILABLE,
)

from inkblog.errors.base import BaseAppError, create_exception_handler
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class DatabaseError(BaseAppError):
    def __init__(
        self,
        detail: str = "Database operation failed",
        status_code: int = HTTP_500_INTERNAL_SERVER_ERROR,
    ) -> None:
        super().__init__(detail, status_code)


class DatabaseConnectionError(DatabaseError):
    """The database could not be reached; the request may be retried."""

    def __init__(self, detail: str = "Database unavailable") -> None:
        super().__init__(detail, HTTP_503_SERVICE_UNAVAILABLE)


class DuplicateEntryError(DatabaseError):
    """A unique name, username or constraint is already taken."""

    def __init__(self, detail: str = "A record with this value already exists") -> None:
        super().__init__(detail, HTTP_409_CONFLICT)


database_exception_handler = create_exception_handler(logger)
