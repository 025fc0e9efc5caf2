from pydantic import BaseModel


class Token(BaseModel):
    """Token schema for JWT access tokens."""

    access_token: str
    token_type: str = "bearer"


class TokenData(BaseModel):
    """Claims extracted from a verified token."""

    username: str
    user_id: int
