"""Token manager for issuing and verifying JWT access tokens."""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt

from inkblog.configs import settings
from inkblog.schemas.auth import TokenData


def create_access_token(
    user_id: int,
    username: str,
    expires_delta: timedelta | None = None,
) -> str:
    """
    Create a new access token.

    Args:
        user_id: User's id
        username: User's username
        expires_delta: Optional expiration time delta

    Returns:
        str: Encoded JWT access token
    """
    now = datetime.now(UTC)
    expire = now + (expires_delta or timedelta(days=settings.TOKEN_EXPIRE_DAYS))

    to_encode = {
        "sub": username,
        "user_id": user_id,
        "iat": now,
        "exp": expire,
    }

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=settings.ALGORITHM)


def decode_access_token(token: str) -> TokenData | None:
    """
    Decode and validate an access token.

    Only the signature and expiry are checked here; whether the token is
    still the user's active session is decided against the cached token.

    Args:
        token: JWT token string

    Returns:
        TokenData | None: Decoded token data or None if invalid
    """
    try:
        payload = jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.ALGORITHM])
    except JWTError:
        return None

    username: str | None = payload.get("sub")
    user_id = payload.get("user_id")
    if not username or not isinstance(user_id, int):
        return None

    return TokenData(username=username, user_id=user_id)
