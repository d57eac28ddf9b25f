"""
LinkUp Backend: File Storage Service
======================================

What:  Validates, stores and locates uploaded profile images.
Why:   Keeps all file system access behind one object with one error type.
How:   Checks extension and size, writes the bytes with aiofiles under a
       time-based filename, and builds the public URL from the request's own
       base URL (the service does not know its deployment domain).
Who:   Called by the upload routes.

Filename Scheme:
    <epoch milliseconds>-<8 hex chars><original extension>
    e.g. 1718031234567-9f2c01ab.png

    The millisecond prefix keeps names time-ordered; the random suffix keeps
    two uploads in the same millisecond apart. No part of the client's
    filename other than its extension reaches the file system.

Failure Contract:
    Every rejection raises UploadError (or its FileStorageError subclass),
    which the global handler turns into
    400 {"success": false, "message": ..., "error": ...}.
"""

import logging
import time
import uuid
from pathlib import Path
from typing import Iterable, Optional, Tuple

import aiofiles

from linkup.exceptions import FileStorageError, NotFoundError, UploadError, ValidationError

logger = logging.getLogger(__name__)

# Image formats accepted for profile pictures
ALLOWED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp"}


class FileService:
    """
    Stores uploads in a flat directory and serves them back by filename.

    Directory Structure:
        public/uploads/
        ├── 1718031234567-9f2c01ab.png
        └── 1718031240012-0be4d7c3.jpg
    """

    def __init__(
        self,
        upload_dir: str,
        static_url_path: str = "/public/uploads",
        max_file_size: int = 5_242_880,
        allowed_extensions: Optional[Iterable[str]] = None,
    ):
        self.upload_dir = Path(upload_dir).resolve()
        self.static_url_path = "/" + static_url_path.strip("/")
        self.max_file_size = max_file_size
        self.allowed_extensions = set(allowed_extensions or ALLOWED_EXTENSIONS)

    def ensure_upload_dir(self) -> None:
        """Create the upload directory (idempotent)."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def validate_extension(self, filename: str) -> str:
        """
        Check the extension against the allow-list.

        Returns: Normalized extension (lowercase with dot).
        Raises:  UploadError if the extension is missing or not allowed.
        """
        ext = Path(filename).suffix.lower()
        if ext not in self.allowed_extensions:
            raise UploadError(
                message="Failed to upload image",
                error=(
                    f"File type '{ext or filename}' is not supported. "
                    f"Allowed types: {', '.join(sorted(self.allowed_extensions))}"
                ),
                context={"extension": ext},
            )
        return ext

    def validate_size(self, content: bytes) -> None:
        """Reject empty files and files above `max_file_size`."""
        if not content:
            raise UploadError(message="Failed to upload image", error="Uploaded file is empty")

        if len(content) > self.max_file_size:
            max_mb = self.max_file_size / (1024 * 1024)
            raise UploadError(
                message="Failed to upload image",
                error=f"File is too large. Maximum size is {max_mb:.0f}MB.",
                context={"actual_size": len(content)},
            )

    def _generate_storage_path(self, extension: str) -> Tuple[Path, str]:
        """Returns (absolute_path, filename) for a new upload."""
        filename = f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{extension}"
        return self.upload_dir / filename, filename

    async def store_file(self, content: bytes, extension: str) -> str:
        """
        Write validated content to disk.

        Returns: The stored filename.
        Raises:  FileStorageError if the directory or file cannot be written.
        """
        absolute_path, filename = self._generate_storage_path(extension)

        try:
            absolute_path.parent.mkdir(parents=True, exist_ok=True)
            async with aiofiles.open(absolute_path, "wb") as f:
                await f.write(content)
        except OSError as e:
            logger.error("Failed to store file at %s: %s", absolute_path, str(e))
            raise FileStorageError(
                error=str(e.strerror or e),
                context={"path": str(absolute_path)},
            )

        logger.info("File stored: %s (%d bytes)", filename, len(content))
        return filename

    async def validate_and_store(self, filename: str, content: bytes) -> str:
        """
        Complete validation and storage pipeline.

        Cheapest checks first: extension (no bytes read), size, then the write.
        Returns the stored filename.
        """
        ext = self.validate_extension(filename)
        self.validate_size(content)
        return await self.store_file(content, ext)

    def public_url(self, base_url: str, filename: str) -> str:
        """
        Absolute URL for a stored file.

        `base_url` is the request's own scheme://host[/root_path]/, so the URL
        is correct behind whatever host name the client used.
        """
        return f"{base_url.rstrip('/')}{self.static_url_path}/{filename}"

    def resolve_stored_file(self, filename: str) -> Path:
        """
        Map a requested filename to a file inside the upload directory.

        Raises:
            ValidationError: the path escapes the upload directory (../ tricks)
                             or cannot be resolved at all (NUL bytes)
            NotFoundError:   no such file
        """
        if "\x00" in filename:
            raise ValidationError(message="Invalid file path", field="filename")

        try:
            full_path = (self.upload_dir / filename).resolve()
        except (ValueError, OSError):
            raise ValidationError(message="Invalid file path", field="filename")

        if not full_path.is_relative_to(self.upload_dir):
            raise ValidationError(message="Invalid file path", field="filename")

        if not full_path.is_file():
            raise NotFoundError(resource="file", resource_id=filename)

        return full_path
