"""Authentication and authorization errors."""

from logging import getLogger

from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_401_UNAUTHORIZED,
    HTTP_403_FORBIDDEN,
)

from inkblog.errors.base import BaseAppError, create_exception_handler
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class UserAuthenticationError(BaseAppError):
    """Base class for authentication errors."""

    def __init__(
        self,
        detail: str = "Authentication failed",
        status_code: int = HTTP_401_UNAUTHORIZED,
    ) -> None:
        headers = {"WWW-Authenticate": "Bearer"} if status_code == HTTP_401_UNAUTHORIZED else None
        super().__init__(detail, status_code, headers)


class InvalidCredentialsError(UserAuthenticationError):
    """Raised when credentials are invalid."""

    def __init__(self) -> None:
        super().__init__("Invalid username or password", HTTP_401_UNAUTHORIZED)


class InvalidTokenError(UserAuthenticationError):
    """Raised when a bearer token is malformed, expired or no longer the active session."""

    def __init__(self, detail: str = "Could not validate credentials") -> None:
        super().__init__(detail, HTTP_401_UNAUTHORIZED)


class ForbiddenError(UserAuthenticationError):
    """Raised when an authenticated user lacks the required role or ownership."""

    def __init__(self, detail: str = "Not enough permissions") -> None:
        super().__init__(detail, HTTP_403_FORBIDDEN)


class InvalidEmailCodeError(UserAuthenticationError):
    """Raised when a registration code is missing, expired or wrong."""

    def __init__(self, detail: str = "Invalid or expired verification code") -> None:
        super().__init__(detail, HTTP_400_BAD_REQUEST)


auth_exception_handler = create_exception_handler(logger)
