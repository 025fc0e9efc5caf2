from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from inkblog.schemas.common import SimpleUser


class FileItem(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)

    id: int
    file_name: str = Field(alias="fileName")
    file_url: str = Field(alias="fileUrl")
    md5: str
    is_public: bool = Field(alias="isPublic")
    created_at: datetime = Field(alias="createdAt")


class AdminFileItem(FileItem):
    user: SimpleUser


class FileCheckRequest(BaseModel):
    md5: str = Field(pattern=r"^[0-9a-fA-F]{32}$")


class FileCheckResponse(BaseModel):
    exists: bool
    file: FileItem | None = None


class FilePublicUpdate(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    is_public: bool = Field(alias="isPublic")
    ids: list[int] = Field(min_length=1, max_length=100)
