"""
Storage Service - PDF reports on the local filesystem (UPLOAD_DIR)

Uploads are streamed to disk in chunks; deletes are best-effort and only
ever logged, never raised to the caller.
"""

import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import UploadFile

from fyp_repository.core.config import settings
from fyp_repository.core.exceptions import FileTooLargeError
from fyp_repository.core.logging_config import logger


@dataclass
class StoredFile:
    """A file written to the upload directory"""
    path: str
    original_name: str
    size: int
    content_type: Optional[str]


class StorageService:
    """Local disk storage for uploaded project reports"""

    def __init__(self, upload_dir: Optional[Path] = None):
        self._upload_dir = upload_dir

    @property
    def upload_dir(self) -> Path:
        return self._upload_dir or settings.UPLOAD_DIR

    def generate_filename(self, original_name: str) -> str:
        """project-<ms timestamp>-<random>.<ext>"""
        suffix = Path(original_name or "").suffix.lower()
        unique = f"{int(time.time() * 1000)}-{secrets.randbelow(10**9)}"
        return f"project-{unique}{suffix}"

    async def save_upload(self, upload: UploadFile, max_size: Optional[int] = None) -> StoredFile:
        """
        Stream an UploadFile to disk.

        Raises FileTooLargeError (after removing the partial file) when the
        body exceeds max_size.
        """
        max_size = max_size or settings.MAX_FILE_SIZE
        await aiofiles.os.makedirs(self.upload_dir, exist_ok=True)

        original_name = upload.filename or ""
        target = self.upload_dir / self.generate_filename(original_name)
        size = 0

        async with aiofiles.open(target, "wb") as out:
            while True:
                chunk = await upload.read(settings.UPLOAD_CHUNK_SIZE)
                if not chunk:
                    break
                size += len(chunk)
                if size > max_size:
                    break
                await out.write(chunk)

        if size > max_size:
            await self.delete_file(str(target))
            raise FileTooLargeError(max_size)

        logger.debug(f"[Storage] Saved {original_name!r} to {target} ({size} bytes)")
        return StoredFile(
            path=str(target),
            original_name=original_name,
            size=size,
            content_type=upload.content_type,
        )

    async def file_exists(self, path: Optional[str]) -> bool:
        if not path:
            return False
        return await aiofiles.os.path.isfile(path)

    async def delete_file(self, path: Optional[str]) -> bool:
        """Best-effort delete. Returns False (and logs) on failure."""
        if not path:
            return False
        try:
            await aiofiles.os.remove(path)
            logger.debug(f"[Storage] Deleted {path}")
            return True
        except OSError as e:
            logger.warning(f"[Storage] Could not delete file {path}: {e}")
            return False


storage_service = StorageService()
