"""Local filesystem storage for uploaded videos and thumbnails."""
import hashlib
import logging
import os
from pathlib import Path, PurePath

import aiofiles

from app.domain.repositories import IStorageService

logger = logging.getLogger(__name__)


class LocalStorageService(IStorageService):
    """Content-addressable media storage on the local filesystem.

    Files are served by the API under ``base_url`` (``/media`` is mounted
    as a static directory in ``app.main``).
    """

    def __init__(self, base_path: str = "./storage", base_url: str = "/media"):
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)
        self.base_url = base_url.rstrip("/")

    async def save_file(self, file_content: bytes, filename: str) -> str:
        file_hash = hashlib.sha256(file_content).hexdigest()
        storage_dir = self.base_path / file_hash[:2]
        storage_dir.mkdir(parents=True, exist_ok=True)

        # Only the basename is kept so a crafted filename cannot escape base_path.
        file_path = storage_dir / f"{file_hash}_{PurePath(filename).name}"
        try:
            async with aiofiles.open(file_path, "wb") as f:
                await f.write(file_content)
        except OSError as e:
            logger.error(f"Failed to save media file {filename}: {e}", exc_info=True)
            raise

        logger.info(f"Media saved: {file_path.name}, size: {len(file_content)} bytes")
        return file_path.relative_to(self.base_path).as_posix()

    async def get_file(self, file_path: str) -> bytes:
        full_path = self.base_path / file_path
        try:
            async with aiofiles.open(full_path, "rb") as f:
                content = await f.read()
        except FileNotFoundError:
            logger.error(f"Media not found: {file_path}")
            raise
        logger.debug(f"Media read: {file_path}, size: {len(content)} bytes")
        return content

    async def delete_file(self, file_path: str) -> bool:
        full_path = self.base_path / file_path
        try:
            os.remove(full_path)
        except FileNotFoundError:
            logger.warning(f"Media not found for deletion: {file_path}")
            return False
        logger.info(f"Media deleted: {file_path}")
        return True

    def public_url(self, file_path: str) -> str:
        return f"{self.base_url}/{file_path}"
