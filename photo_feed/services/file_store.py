"""
Local file store for uploaded images.

Files are written under ``<upload_dir>/<fieldname>/<generated-name>`` and served
statically at ``/uploads/<fieldname>/<generated-name>``. The store hands the
services a URL; it knows nothing about photos or users.
"""
import logging
from pathlib import Path
from typing import Iterable, Optional

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from photo_feed.config import get_settings
from photo_feed.exceptions import ValidationError
from photo_feed.utils.prometheus_metrics import photo_upload_file_size_bytes
from photo_feed.utils.security import generate_upload_filename

logger = logging.getLogger("photo_feed.storage")

URL_PREFIX = "/uploads"

# Multipart field names that carry files
PHOTO_FIELD = "photo"
PROFILE_PIC_FIELD = "profilePic"
UPLOAD_FIELDS = (PHOTO_FIELD, PROFILE_PIC_FIELD)


class LocalFileStore:
    """Stores uploads on the local filesystem, one directory per form field."""

    def __init__(self, root: Optional[str] = None, max_size_bytes: Optional[int] = None):
        settings = get_settings()
        self.root = Path(root or settings.upload_dir).resolve()
        self.max_size_bytes = max_size_bytes or settings.max_upload_size_bytes

    def ensure_directories(self, fields: Iterable[str] = UPLOAD_FIELDS) -> None:
        """Create the root and per-field directories (idempotent)."""
        for field in fields:
            (self.root / field).mkdir(parents=True, exist_ok=True)

    async def save(self, field_name: str, original_filename: str, content: bytes) -> str:
        """
        Write ``content`` under the field directory.

        Returns:
            Public URL of the stored file, e.g. ``/uploads/photo/1718000000000-3f9a1c2b.jpg``

        Raises:
            ValidationError: If the file exceeds the configured size limit
            OSError: If the file cannot be written
        """
        if len(content) > self.max_size_bytes:
            raise ValidationError(
                f"File too large. Maximum size: {self.max_size_bytes // (1024 * 1024)}MB"
            )

        filename = generate_upload_filename(original_filename)
        directory = self.root / field_name
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / filename

        try:
            async with aiofiles.open(path, "wb") as f:
                await f.write(content)
        except OSError:
            logger.error(
                "File write failed",
                exc_info=True,
                extra={"event": "storage", "field": field_name, "path": str(path)},
            )
            raise

        photo_upload_file_size_bytes.labels(field=field_name).observe(len(content))
        logger.debug("File stored", extra={"event": "storage", "path": str(path)})
        return f"{URL_PREFIX}/{field_name}/{filename}"

    async def save_upload(self, field_name: str, upload: Optional[UploadFile]) -> Optional[str]:
        """
        Store a multipart upload. Returns None when no file was sent,
        leaving the "file required" decision to the caller.
        """
        if upload is None or not upload.filename:
            return None
        content = await upload.read()
        return await self.save(field_name, upload.filename, content)

    def path_for_url(self, url: str) -> Optional[Path]:
        """Map a ``/uploads/...`` URL back to a path inside the store, or None."""
        if not url or not url.startswith(URL_PREFIX + "/"):
            return None
        candidate = (self.root / url[len(URL_PREFIX) + 1:]).resolve()
        # 저장소 밖 경로 거부
        if not candidate.is_relative_to(self.root):
            return None
        return candidate

    async def delete(self, url: str) -> bool:
        """
        Remove a stored file. Best effort: failures are logged, never raised.

        Returns:
            True if a file was removed
        """
        path = self.path_for_url(url)
        if path is None:
            return False
        try:
            await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            logger.error(
                "File delete failed",
                exc_info=e,
                extra={"event": "storage", "path": str(path)},
            )
            return False
        return True


# Singleton instance
_file_store: Optional[LocalFileStore] = None


def get_file_store() -> LocalFileStore:
    """Get the singleton file store instance."""
    global _file_store
    if _file_store is None:
        _file_store = LocalFileStore()
    return _file_store
