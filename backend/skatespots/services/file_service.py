"""
SkateSpots Backend - Image Upload Storage
============================================

What:  Writes uploaded spot images to the public upload directory and maps
       their URLs back to files.
How:   Every file gets a generated name `<epoch-ms>-<8 hex>-<original name>`
       and is written with aiofiles in exclusive-create mode. The URL
       recorded on the spot is `/uploads/<generated name>`, which is also
       where main.py mounts the directory for static serving.
Who:   Called by SpotService for create and add-image, and for image lookup.

Directory Structure:
    uploads/
    ├── 1718000000000-3f9c2a1b-rail.jpg
    └── 1718000004211-b07e55d0-ledge.png

No content inspection or resizing happens here; any file is accepted.
"""

import logging
import os
import time
import uuid
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

import aiofiles

from skatespots.config import settings
from skatespots.exceptions import FileStorageError

logger = logging.getLogger(__name__)

# URL prefix the upload directory is served under
UPLOADS_URL_PREFIX = "/uploads"


class FileService:
    """
    Manages the upload directory.

    Lifecycle of an uploaded file:
        1. Route reads the multipart file → (original filename, bytes)
        2. store_file() writes it under a generated unique name
        3. The returned `/uploads/...` URL is recorded in Spot.image_url
        4. resolve() turns that URL back into a path for image streaming
        5. cleanup_file() removes it if the spot could not be saved
    """

    def __init__(self, upload_dir: Optional[str] = None):
        """
        Args:
            upload_dir: Override the configured directory (used in tests).
        """
        self.upload_dir = Path(upload_dir or settings.upload_dir).resolve()
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        logger.info("FileService initialized with upload_dir=%s", self.upload_dir)

    @staticmethod
    def generate_filename(original_filename: Optional[str]) -> str:
        """
        Build a unique storage name that keeps the original name readable.

        Directory parts of the client-supplied name are dropped
        ("../../x.jpg" → "x.jpg"); a missing name becomes "upload".
        """
        basename = Path((original_filename or "").replace("\\", "/")).name.strip()
        if not basename or basename in {".", ".."}:
            basename = "upload"
        timestamp = int(time.time() * 1000)
        return f"{timestamp}-{uuid.uuid4().hex[:8]}-{basename}"

    async def store_file(self, original_filename: Optional[str], content: bytes) -> Tuple[str, str]:
        """
        Write one uploaded file to the upload directory.

        Returns:
            Tuple of (absolute_path, public_url).

        Raises:
            FileStorageError if the directory is not writable or the disk is full.
        """
        filename = self.generate_filename(original_filename)
        absolute_path = self.upload_dir / filename

        try:
            # "xb" refuses to overwrite an existing file
            async with aiofiles.open(absolute_path, "xb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store upload at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                message="Failed to save uploaded image. Please try again.",
                context={"path": str(absolute_path), "os_error": str(e)},
            )

        public_url = f"{UPLOADS_URL_PREFIX}/{filename}"
        logger.info("Image stored: %s (%d bytes)", public_url, len(content))
        return str(absolute_path), public_url

    async def store_files(self, files: Sequence[Tuple[Optional[str], bytes]]) -> List[Tuple[str, str]]:
        """
        Store several uploads; all or nothing.

        If one write fails, the files already written by this call are removed
        before the FileStorageError propagates.
        """
        stored: List[Tuple[str, str]] = []
        try:
            for original_filename, content in files:
                stored.append(await self.store_file(original_filename, content))
        except FileStorageError:
            for absolute_path, _ in stored:
                await self.cleanup_file(absolute_path)
            raise
        return stored

    def resolve(self, image_url: str) -> Optional[Path]:
        """
        Map a recorded `/uploads/<name>` URL to its file inside the upload directory.

        Returns None for URLs outside the upload prefix (the default sentinel)
        and for names that would escape the directory.
        """
        prefix = f"{UPLOADS_URL_PREFIX}/"
        if not image_url or not image_url.startswith(prefix):
            return None

        candidate = (self.upload_dir / image_url[len(prefix):]).resolve()
        if candidate.parent != self.upload_dir:
            logger.warning("Rejected image path outside upload directory: %s", image_url)
            return None
        return candidate

    async def cleanup_file(self, file_path: str) -> None:
        """
        Remove a stored file; best effort.

        Missing files are ignored, other failures are logged and swallowed:
        an orphaned image must not turn a handled error into a different one.
        """
        try:
            path = Path(file_path)
            if path.exists():
                os.remove(path)
                logger.info("Cleaned up file: %s", path.name)
            else:
                logger.debug("Cleanup: file already gone: %s", path.name)
        except OSError as e:
            logger.warning("Failed to clean up file %s: %s", file_path, str(e))


file_service = FileService()
