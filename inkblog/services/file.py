"""File service: uploads with md5 de-duplication and admin management."""

from hashlib import md5 as md5_digest
from logging import getLogger

from inkblog.configs.settings import Settings
from inkblog.errors import FileTooLargeError, UnsupportedFileTypeError
from inkblog.repositories import FileRepository
from inkblog.schemas.common import PageInfo
from inkblog.schemas.file import AdminFileItem, FileCheckResponse, FileItem
from inkblog.services.storage import LocalFileStorage
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))


class FileService:
    """
    Service for uploaded files.

    Uploads are validated for type and size, hashed, and stored once per
    distinct content; a repeat upload by another user gets its own row
    pointing at the same stored file.
    """

    def __init__(self, files: FileRepository, storage: LocalFileStorage, settings: Settings) -> None:
        self.files = files
        self.storage = storage
        self.max_size_bytes = settings.MAX_UPLOAD_SIZE
        self.allowed_types = settings.ALLOWED_UPLOAD_TYPES

    def validate_content_type(self, content_type: str | None) -> None:
        """
        Raises:
            UnsupportedFileTypeError: If content type is not allowed
        """
        if not content_type or content_type not in self.allowed_types:
            raise UnsupportedFileTypeError(content_type)

    def validate_file_size(self, data: bytes) -> None:
        """
        Raises:
            FileTooLargeError: If file exceeds maximum size
        """
        if len(data) > self.max_size_bytes:
            raise FileTooLargeError(self.max_size_bytes // (1024 * 1024))

    async def upload(
        self,
        user_id: int,
        file_name: str,
        content_type: str | None,
        data: bytes,
    ) -> FileItem:
        """
        Validate and store an upload.

        Args:
            user_id: Uploading user
            file_name: Client-side file name
            content_type: MIME type reported by the client
            data: Raw file bytes

        Returns:
            FileItem: The new file row

        Raises:
            UnsupportedFileTypeError: If content type is not allowed
            FileTooLargeError: If file exceeds maximum size
        """
        self.validate_content_type(content_type)
        self.validate_file_size(data)
        assert content_type is not None  # noqa: S101

        digest = md5_digest(data).hexdigest()  # noqa: S324
        existing = await self.files.find_by_md5(digest)
        if existing is not None:
            path, url = existing.file_path, existing.file_url
        else:
            path, url = await self.storage.save(digest, content_type, data)

        record = await self.files.create(user_id, file_name, path, url, digest)
        await self.files.commit()
        logger.info(f"User {user_id} uploaded {file_name} ({digest})")
        return FileItem.model_validate(record)

    async def check(self, md5: str) -> FileCheckResponse:
        """Look up stored content by hash so clients can skip the upload."""
        record = await self.files.find_by_md5(md5)
        if record is None:
            return FileCheckResponse(exists=False)
        return FileCheckResponse(exists=True, file=FileItem.model_validate(record))

    async def mine(self, user_id: int, page: int) -> PageInfo[FileItem]:
        return await self.files.page_by_user(user_id, page)

    # --- admin ---

    async def admin_page(
        self,
        page: int,
        name: str | None,
        owner_id: int | None,
    ) -> PageInfo[AdminFileItem]:
        return await self.files.admin_page(page, name, owner_id)

    async def set_public(self, ids: list[int], *, is_public: bool, owner_id: int | None) -> int:
        updated = await self.files.set_public(ids, is_public=is_public, owner_id=owner_id)
        await self.files.commit()
        return updated

    async def delete(self, ids: list[int], owner_id: int | None) -> int:
        """
        Delete file rows and remove their stored content.

        Stored content still referenced by another row is kept.

        Returns:
            int: Number of deleted rows
        """
        paths = await self.files.delete_many(ids, owner_id)
        await self.files.commit()
        for path in set(paths):
            if not await self.files.path_in_use(path):
                await self.storage.remove(path)
        logger.info(f"Deleted {len(paths)} files")
        return len(paths)
