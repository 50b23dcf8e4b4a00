"""
Disk storage for uploaded images.

Files are stored flat under a root directory as
``<field>-<epoch ms>-<random>.<ext>`` and referenced by filename only.
"""

import logging
import secrets
import shutil
import time
from pathlib import Path
from typing import Iterable, Optional

from fastapi import UploadFile

from app.core.exceptions import InternalError, ValidationError

logger = logging.getLogger(__name__)


class FileStorage:
    """Stores and removes uploaded files under one directory."""

    chunk_size = 64 * 1024

    def __init__(
        self,
        root: str | Path,
        allowed_extensions: Iterable[str],
        allowed_content_types: Optional[Iterable[str]] = None,
        max_bytes: Optional[int] = None,
    ):
        self.root = Path(root)
        self.root.mkdir(parents=True, exist_ok=True)
        self.allowed_extensions = {ext.lower() for ext in allowed_extensions}
        self.allowed_content_types = (
            {ct.lower() for ct in allowed_content_types} if allowed_content_types else None
        )
        self.max_bytes = max_bytes

    def __repr__(self) -> str:
        return f"<FileStorage(root='{self.root}')>"

    def path_for(self, filename: str) -> Path:
        # Only bare names are ever stored
        return self.root / Path(filename).name

    def validate(self, upload: UploadFile) -> str:
        """
        Check an upload's extension and content type.

        Returns:
            str: The lower-cased extension including the dot.
        """
        extension = Path(upload.filename or "").suffix.lower()
        if extension not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            raise ValidationError(f"Only image files are allowed ({allowed})")

        if self.allowed_content_types is not None:
            content_type = (upload.content_type or "").lower()
            if content_type not in self.allowed_content_types:
                raise ValidationError("Only JPG/PNG allowed")

        return extension

    def _copy(self, upload: UploadFile, out) -> Optional[int]:
        """Copy in chunks; None once the upload goes past ``max_bytes``."""
        if self.max_bytes is None:
            shutil.copyfileobj(upload.file, out, self.chunk_size)
            return out.tell()

        written = 0
        while True:
            chunk = upload.file.read(self.chunk_size)
            if not chunk:
                return written
            written += len(chunk)
            if written > self.max_bytes:
                return None
            out.write(chunk)

    def save(self, upload: UploadFile, field_name: str) -> str:
        """
        Store an upload and return its generated filename.

        Raises:
            ValidationError: Disallowed type or file larger than ``max_bytes``.
            InternalError: The file could not be written.
        """
        extension = self.validate(upload)
        filename = f"{field_name}-{int(time.time() * 1000)}-{secrets.randbelow(10**9)}{extension}"
        path = self.path_for(filename)

        try:
            upload.file.seek(0)
            with path.open("wb") as out:
                written = self._copy(upload, out)
        except OSError as e:
            path.unlink(missing_ok=True)
            logger.error("Could not store upload %s: %s", upload.filename, e)
            raise InternalError("Could not store uploaded file") from e

        if written is None:
            path.unlink(missing_ok=True)
            raise ValidationError(
                f"File too large (max {self.max_bytes // (1024 * 1024)}MB)"
            )

        logger.debug("Stored upload %s as %s", upload.filename, filename)
        return filename

    def delete(self, filename: Optional[str]) -> None:
        """Remove a stored file. Failures are logged, never raised."""
        if not filename:
            return
        path = self.path_for(filename)
        try:
            path.unlink()
        except FileNotFoundError:
            logger.warning("Stored file already missing: %s", path)
        except OSError as e:
            logger.warning("Could not remove stored file %s: %s", path, e)
        else:
            logger.debug("Removed stored file %s", path)

    def delete_many(self, filenames: Iterable[Optional[str]]) -> None:
        for filename in filenames:
            self.delete(filename)
