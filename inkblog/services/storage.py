"""
Local filesystem storage for uploaded files.

Files are written under ``UPLOAD_DIR`` with their md5 as the file name, so
identical uploads land on the same path.
"""

from logging import getLogger
from pathlib import Path

import aiofiles
import aiofiles.os

from inkblog.configs.settings import Settings
from inkblog.utils.helpers import file_logger

logger = file_logger(getLogger(__name__))

EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
}


class LocalFileStorage:
    """Stores upload bytes on the local disk and maps them to public URLs."""

    def __init__(self, settings: Settings) -> None:
        self.base_path = Path(settings.UPLOAD_DIR)
        self.url_prefix = settings.UPLOAD_URL_PREFIX.rstrip("/")

    def _ensure_directory(self) -> None:
        self.base_path.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def extension_for(content_type: str) -> str:
        return EXTENSIONS.get(content_type, "bin")

    async def save(self, md5: str, content_type: str, data: bytes) -> tuple[str, str]:
        """
        Write ``data`` to disk.

        Args:
            md5: Hex digest of ``data``, used as the file name
            content_type: MIME type of the upload
            data: Raw file bytes

        Returns:
            tuple[str, str]: Storage path and public URL
        """
        self._ensure_directory()
        name = f"{md5}.{self.extension_for(content_type)}"
        path = self.base_path / name
        async with aiofiles.open(path, "wb") as f:
            await f.write(data)
        return str(path), f"{self.url_prefix}/{name}"

    async def remove(self, path: str) -> bool:
        """
        Delete a stored file.

        Returns:
            bool: True if a file was removed, False if it was already gone
        """
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.warning(f"Failed to remove {path}: {e}")
            return False
        return True
