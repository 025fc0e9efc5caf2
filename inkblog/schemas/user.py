"""User schemas."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from inkblog.models.user import Role


class UserRecord(BaseModel):
    """
    Cached user profile including the password hash.

    Login verification reads this record from the cache, so it carries the
    credential material; never return it from an endpoint.
    """

    model_config = ConfigDict(from_attributes=True)

    id: int
    username: str
    password_hash: str
    nick_name: str
    icon: str | None = None
    role: Role = Role.USER


class UserPublic(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    username: str
    nick_name: str = Field(alias="nickName")
    icon: str | None = None
    role: Role


class RegisterCodeRequest(BaseModel):
    username: EmailStr


class RegisterRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    username: EmailStr
    password: str = Field(min_length=6, max_length=32)
    nick_name: str = Field(alias="nickName", min_length=1, max_length=50)
    code: str = Field(min_length=6, max_length=6)


class LoginRequest(BaseModel):
    username: str
    password: str


class ProfileUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    nick_name: str | None = Field(default=None, alias="nickName", min_length=1, max_length=50)
    icon: str | None = Field(default=None, max_length=500)

    @field_validator("nick_name")
    @classmethod
    def reject_null_nick_name(cls, value: str | None) -> str | None:
        # Omit nickName to keep it; the column is not nullable.
        if value is None:
            mssg = "nickName cannot be null"
            raise ValueError(mssg)
        return value


class RoleUpdate(BaseModel):
    role: Role


class WebsiteConfig(BaseModel):
    """Site-wide profile shown in the front end sidebar."""

    model_config = ConfigDict(populate_by_name=True)

    site_name: str = Field(default="inkblog", alias="siteName")
    avatar: str = "/static/avatar.png"
    introduction: str = "Notes on code, caching and everything in between."
    github: str | None = None
    email: str | None = None
