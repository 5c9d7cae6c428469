"""
Local proof-document storage.

Uploaded proofs are written under ``<base_path>/<kind>/`` as
``<user id>_<epoch ms><ext>`` and referenced by records through a
public path ``<public_prefix>/<kind>/<name>``.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from ...core.config import StorageSettings
from ...core.exceptions import FileError, FileStorageError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class IncomingFile:
    """An upload as received from the client, read fully into memory."""

    filename: str
    content_type: Optional[str]
    content: bytes


@dataclass
class StoredFile:
    """Stored upload metadata."""

    filename: str
    original_filename: str
    file_path: str
    public_path: str
    size: int
    content_type: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filename": self.filename,
            "original_filename": self.original_filename,
            "file_path": self.file_path,
            "public_path": self.public_path,
            "size": self.size,
            "content_type": self.content_type,
        }


class LocalFileStorage:
    """
    Local filesystem storage for proof documents.

    Validates extension, content type and size before writing, and
    refuses any path that resolves outside ``base_path``.
    """

    def __init__(
        self,
        base_path: Union[str, Path],
        public_prefix: str = "/uploads",
        allowed_extensions: Optional[List[str]] = None,
        allowed_content_types: Optional[List[str]] = None,
        max_file_size: Optional[int] = None,  # bytes
    ):
        self.base_path = Path(base_path)
        self.public_prefix = "/" + public_prefix.strip("/")
        self.allowed_extensions = [ext.lower() for ext in allowed_extensions or []]
        self.allowed_content_types = list(allowed_content_types or [])
        self.max_file_size = max_file_size

        self.base_path.mkdir(parents=True, exist_ok=True)
        if not self.base_path.is_dir():
            raise FileStorageError(f"Storage path is not a directory: {self.base_path}")

        logger.info(f"Local file storage initialized at {self.base_path}")

    @classmethod
    def from_settings(cls, settings: StorageSettings) -> "LocalFileStorage":
        return cls(
            base_path=settings.upload_dir,
            public_prefix=settings.public_prefix,
            allowed_extensions=settings.allowed_extensions,
            allowed_content_types=settings.allowed_content_types,
            max_file_size=settings.max_file_size,
        )

    def save_incoming(self, upload: IncomingFile, subfolder: str, owner_id: int) -> StoredFile:
        return self.save_upload(upload.content, upload.filename, upload.content_type, subfolder, owner_id)

    def save_upload(
        self,
        content: bytes,
        filename: str,
        content_type: Optional[str],
        subfolder: str,
        owner_id: int,
    ) -> StoredFile:
        """
        Validate and store an uploaded proof.

        Args:
            content: Raw file bytes
            filename: Client-supplied filename, used only for its extension
            content_type: Client-declared MIME type
            subfolder: Record kind directory
            owner_id: Id of the uploading user, prefixed to the stored name

        Returns:
            StoredFile describing where the upload landed

        Raises:
            FileError: the upload is not an allowed type or is too large
            FileStorageError: writing to disk failed
        """
        self.validate_upload(filename, content_type, len(content))

        storage_dir = self.base_path / self._sanitize_path(subfolder)
        suffix = Path(filename).suffix.lower()
        final_name = self._get_unique_filename(storage_dir, f"{owner_id}_{int(time.time() * 1000)}{suffix}")
        file_path = storage_dir / final_name
        self._validate_path(file_path)

        try:
            storage_dir.mkdir(parents=True, exist_ok=True)
            with open(file_path, "wb") as f:
                f.write(content)
        except OSError as e:
            logger.error(f"Failed to save file {filename}: {e}")
            raise FileStorageError(f"File save failed: {e}", operation="save", file_path=str(file_path))

        relative = file_path.relative_to(self.base_path).as_posix()
        stored = StoredFile(
            filename=final_name,
            original_filename=filename,
            file_path=str(file_path),
            public_path=f"{self.public_prefix}/{relative}",
            size=len(content),
            content_type=content_type or "application/octet-stream",
        )
        logger.info(f"File saved: {relative} ({stored.size} bytes)")
        return stored

    def validate_upload(self, filename: str, content_type: Optional[str], size: int) -> None:
        if not filename:
            raise FileError("No file name supplied")

        file_ext = Path(filename).suffix.lower()
        if self.allowed_extensions and file_ext not in self.allowed_extensions:
            raise FileError("Only PDF files are allowed", filename=filename)
        if self.allowed_content_types and content_type not in self.allowed_content_types:
            raise FileError("Only PDF files are allowed", filename=filename)

        if self.max_file_size and size > self.max_file_size:
            raise FileError(
                f"File size {size} bytes exceeds maximum {self.max_file_size} bytes",
                filename=filename,
            )

    def resolve_public_path(self, public_path: str) -> Optional[Path]:
        """Filesystem path for a stored public path, or None if it is not one of ours."""
        prefix = self.public_prefix + "/"
        if not public_path or not public_path.startswith(prefix):
            return None
        full_path = self.base_path / self._sanitize_path(public_path[len(prefix):])
        self._validate_path(full_path)
        return full_path

    def delete_public_path(self, public_path: Optional[str]) -> bool:
        """
        Delete a stored proof by its public path.

        Returns:
            True if a file was removed, False if there was nothing to remove
        """
        if not public_path:
            return False
        full_path = self.resolve_public_path(public_path)
        if full_path is None or not full_path.is_file():
            logger.debug(f"File not found for deletion: {public_path}")
            return False
        try:
            full_path.unlink()
        except OSError as e:
            logger.error(f"Failed to delete file {public_path}: {e}")
            raise FileStorageError(f"File deletion failed: {e}", operation="delete", file_path=public_path)
        logger.info(f"File deleted: {public_path}")
        return True

    def _sanitize_path(self, path: str) -> str:
        parts = [part for part in Path(path).parts if part not in (".", "..", "", "/", "\\")]
        return str(Path(*parts)) if parts else ""

    def _validate_path(self, full_path: Path) -> None:
        """Validate that path is within base directory."""
        try:
            full_path.resolve().relative_to(self.base_path.resolve())
        except ValueError:
            raise FileStorageError("Path traversal attempt detected", file_path=str(full_path))

    def _get_unique_filename(self, directory: Path, filename: str) -> str:
        if not (directory / filename).exists():
            return filename

        stem = Path(filename).stem
        suffix = Path(filename).suffix
        counter = 1
        while True:
            new_filename = f"{stem}_{counter}{suffix}"
            if not (directory / new_filename).exists():
                return new_filename
            counter += 1
