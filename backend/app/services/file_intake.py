"""File intake for registration attachments"""

import asyncio
import os
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Iterable, Sequence, Tuple

from starlette.datastructures import UploadFile

from backend.app.core.config import settings
from backend.app.core.exceptions import ValidationException, PayloadTooLargeException
from backend.app.core.logging import get_logger

logger = get_logger(__name__)

REQUIRED_FILE_FIELDS = ("resume", "sop", "recommendationLetter")


@dataclass
class StoredFile:
    """A file written to the upload directory"""
    field_name: str
    filename: str
    path: Path
    size: int
    content_type: str


class FileIntake:
    """Validates uploads and writes them under uniquely generated names"""

    CHUNK_SIZE = 1024 * 1024

    def __init__(
        self,
        upload_dir: Optional[str] = None,
        max_file_size: Optional[int] = None,
        max_files: Optional[int] = None,
        allowed_extensions: Optional[Iterable[str]] = None,
        allowed_content_types: Optional[Iterable[str]] = None
    ):
        """
        Initialize file intake

        Args:
            upload_dir: Destination directory (created on first write)
            max_file_size: Per-file size cap in bytes
            max_files: Per-request file count cap
            allowed_extensions: Accepted lower-case extensions with dot
            allowed_content_types: Accepted MIME types
        """
        self.upload_dir = Path(upload_dir or settings.UPLOAD_DIR)
        self.max_file_size = max_file_size or settings.MAX_UPLOAD_SIZE
        self.max_files = max_files or settings.MAX_UPLOAD_FILES
        self.allowed_extensions = set(allowed_extensions or settings.ALLOWED_EXTENSIONS)
        self.allowed_content_types = set(allowed_content_types or settings.ALLOWED_CONTENT_TYPES)

    @staticmethod
    def is_present(upload: Optional[UploadFile]) -> bool:
        # Browsers post an empty part for file inputs left blank
        return upload is not None and bool(upload.filename)

    def validate(self, files: Sequence[Tuple[str, UploadFile]]) -> Dict[str, UploadFile]:
        """
        Check slot names, count, type and declared size before any byte is
        written

        Args:
            files: (form field name, upload) pairs in posted order

        Returns:
            Mapping of slot name -> upload

        Raises:
            PayloadTooLargeException: If the file count or a file size
                exceeds its limit
            ValidationException: On unknown, missing or wrongly typed files
        """
        posted = [(name, upload) for name, upload in files if self.is_present(upload)]

        if len(posted) > self.max_files:
            raise PayloadTooLargeException(
                f"Too many files: at most {self.max_files} files are allowed",
                limit_name="max_files",
                limit=self.max_files
            )

        present: Dict[str, UploadFile] = {}
        for name, upload in posted:
            if name in present:
                raise ValidationException(
                    "Each file field may only be sent once",
                    details={"duplicate_files": [name]}
                )
            present[name] = upload

        unknown = sorted(set(present) - set(REQUIRED_FILE_FIELDS))
        if unknown:
            raise ValidationException(
                "Unexpected file fields",
                details={"unknown_files": unknown}
            )

        missing = [name for name in REQUIRED_FILE_FIELDS if name not in present]
        if missing:
            raise ValidationException(
                "Missing required files",
                details={"missing_files": missing}
            )

        for field_name, upload in present.items():
            self.validate_file(field_name, upload)

        return present

    def validate_file(self, field_name: str, upload: UploadFile) -> None:
        """Check one upload's declared type and size"""
        extension = os.path.splitext(upload.filename or "")[1].lower()
        content_type = (upload.content_type or "").split(";")[0].strip().lower()

        if extension not in self.allowed_extensions or content_type not in self.allowed_content_types:
            raise ValidationException(
                "Only PDF and Word documents are allowed",
                details={"field": field_name, "filename": upload.filename, "content_type": content_type}
            )

        if upload.size is not None and upload.size > self.max_file_size:
            raise self._too_large(field_name)

    def _too_large(self, field_name: str) -> PayloadTooLargeException:
        return PayloadTooLargeException(
            f"File '{field_name}' exceeds the maximum size of {self.max_file_size // (1024 * 1024)}MB",
            limit_name="max_file_size",
            limit=self.max_file_size
        )

    def generate_filename(self, field_name: str, original_filename: str) -> str:
        """
        Build a collision-free storage name

        Format: ``{epoch_ms}-{16 hex chars}-{field_name}{ext}``; the random
        suffix keeps names distinct when two uploads land in the same
        millisecond with the same original name.
        """
        extension = os.path.splitext(original_filename)[1].lower()
        return f"{int(time.time() * 1000)}-{secrets.token_hex(8)}-{field_name}{extension}"

    def ensure_upload_dir(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    async def store(self, field_name: str, upload: UploadFile) -> StoredFile:
        """
        Stream one upload to the upload directory

        The size cap is enforced on the bytes actually received; a partial
        file is removed before the error propagates.

        Returns:
            Reference to the stored file
        """
        self.ensure_upload_dir()
        filename = self.generate_filename(field_name, upload.filename or "")
        path = self.upload_dir / filename

        await upload.seek(0)
        size = 0
        destination = await asyncio.to_thread(open, path, "xb")
        try:
            try:
                while True:
                    chunk = await upload.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    size += len(chunk)
                    if size > self.max_file_size:
                        raise self._too_large(field_name)
                    await asyncio.to_thread(destination.write, chunk)
            finally:
                await asyncio.to_thread(destination.close)
        except BaseException:
            path.unlink(missing_ok=True)
            raise

        logger.info(f"Stored upload {field_name} as {filename} ({size} bytes)")
        return StoredFile(
            field_name=field_name,
            filename=filename,
            path=path,
            size=size,
            content_type=upload.content_type or "application/octet-stream"
        )

    async def store_all(self, files: Dict[str, UploadFile]) -> List[StoredFile]:
        """
        Store every required slot; on failure removes the files already
        written for this call before re-raising
        """
        stored: List[StoredFile] = []
        try:
            for field_name in REQUIRED_FILE_FIELDS:
                stored.append(await self.store(field_name, files[field_name]))
        except BaseException:
            self.cleanup(stored)
            raise
        return stored

    def delete(self, stored: StoredFile) -> None:
        try:
            stored.path.unlink(missing_ok=True)
            logger.info(f"Removed upload {stored.filename}")
        except OSError as e:
            logger.error(f"Failed to remove upload {stored.filename}: {e}")

    def cleanup(self, stored_files: Iterable[StoredFile]) -> None:
        """Remove every listed file"""
        for stored in stored_files:
            self.delete(stored)

    @staticmethod
    def public_url(filename: str, url_prefix: Optional[str] = None) -> str:
        prefix = (url_prefix or settings.UPLOAD_URL_PREFIX).rstrip("/")
        return f"{prefix}/{filename}"
