"""
File upload utilities for image validation and storage.
"""

import io
import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List, Optional
from PIL import Image, UnidentifiedImageError
import aiofiles
from fastapi import UploadFile

from rental_marketplace.config import get_settings
from rental_marketplace.utils.exceptions import (
    FileUploadError,
    FileSizeExceededError,
    UnsupportedFileTypeError
)

logger = logging.getLogger(__name__)


@dataclass
class ValidatedUpload:
    """An upload that passed validation, held in memory until stored."""

    original_filename: str
    content: bytes
    mime_type: str
    width: int
    height: int

    @property
    def file_size(self) -> int:
        return len(self.content)

    @property
    def extension(self) -> str:
        return Path(self.original_filename).suffix.lower()


class FileValidator:
    """Validation of uploaded listing images."""

    # Supported image formats and their MIME types
    SUPPORTED_FORMATS = {
        'image/jpeg': ['.jpg', '.jpeg'],
        'image/png': ['.png'],
        'image/webp': ['.webp']
    }

    # Pillow format names per MIME type
    PIL_FORMATS = {
        'image/jpeg': 'JPEG',
        'image/png': 'PNG',
        'image/webp': 'WEBP'
    }

    MIN_WIDTH = 50
    MIN_HEIGHT = 50
    MAX_WIDTH = 10000
    MAX_HEIGHT = 10000

    @classmethod
    def allowed_types(cls) -> List[str]:
        return [t for t in get_settings().allowed_file_types if t in cls.SUPPORTED_FORMATS]

    @classmethod
    def validate_file_extension(cls, filename: str, mime_type: str) -> str:
        """
        Check the extension is known and agrees with the declared MIME type.

        Raises:
            FileUploadError: If the extension is missing or mismatched
        """
        extension = Path(filename).suffix.lower()
        if not extension:
            raise FileUploadError(f"'{filename}' must have an extension")

        if extension not in cls.SUPPORTED_FORMATS[mime_type]:
            raise FileUploadError(
                f"File extension '{extension}' doesn't match MIME type '{mime_type}'"
            )
        return extension

    @classmethod
    def validate_image_dimensions(cls, width: int, height: int) -> None:
        if width < cls.MIN_WIDTH or height < cls.MIN_HEIGHT:
            raise FileUploadError(
                f"Image {width}x{height}px is below minimum {cls.MIN_WIDTH}x{cls.MIN_HEIGHT}px"
            )
        if width > cls.MAX_WIDTH or height > cls.MAX_HEIGHT:
            raise FileUploadError(
                f"Image {width}x{height}px exceeds maximum {cls.MAX_WIDTH}x{cls.MAX_HEIGHT}px"
            )

    @classmethod
    async def validate_upload_file(cls, file: UploadFile) -> ValidatedUpload:
        """
        Comprehensive validation of an uploaded image.

        Args:
            file: FastAPI UploadFile object

        Returns:
            ValidatedUpload carrying the file bytes and image metadata

        Raises:
            FileUploadError: If any validation fails (HTTP 400)
        """
        if not file.filename:
            raise FileUploadError("Filename is required")

        mime_type = (file.content_type or "").lower()
        allowed = cls.allowed_types()
        if mime_type not in allowed:
            raise UnsupportedFileTypeError(mime_type or "unknown", allowed)

        cls.validate_file_extension(file.filename, mime_type)

        max_size = get_settings().max_file_size
        if file.size is not None and file.size > max_size:
            raise FileSizeExceededError(file.size, max_size)

        # Never buffer more than one byte past the limit
        await file.seek(0)
        content = await file.read(max_size + 1)
        await file.seek(0)

        if not content:
            raise FileUploadError(f"'{file.filename}' is empty")

        if len(content) > max_size:
            raise FileSizeExceededError(len(content), max_size)

        try:
            with Image.open(io.BytesIO(content)) as img:
                img.verify()
            # verify() invalidates the image; reopen for metadata
            with Image.open(io.BytesIO(content)) as img:
                width, height = img.size
                pil_format = img.format
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise FileUploadError(f"Invalid image file '{file.filename}': {e}")

        if pil_format != cls.PIL_FORMATS[mime_type]:
            raise FileUploadError(
                f"Image format '{pil_format}' doesn't match MIME type '{mime_type}'"
            )

        cls.validate_image_dimensions(width, height)

        return ValidatedUpload(
            original_filename=file.filename,
            content=content,
            mime_type=mime_type,
            width=width,
            height=height
        )

    @classmethod
    async def validate_upload_files(cls, files: Iterable[UploadFile]) -> List[ValidatedUpload]:
        """Validate every file before any of them is stored."""
        return [await cls.validate_upload_file(file) for file in files]


class FileStorage:
    """Flat on-disk storage of listing images under the upload directory."""

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = Path(base_dir or get_settings().upload_dir)
        self.base_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def generate_unique_filename(original_filename: str) -> str:
        """Generate a unique filename while preserving the extension."""
        extension = Path(original_filename).suffix.lower()
        return f"{uuid.uuid4()}{extension}"

    def path_for(self, stored_name: str) -> Path:
        return self.base_dir / stored_name

    async def save_upload(self, upload: ValidatedUpload) -> str:
        """
        Write a validated upload to disk.

        Returns:
            Stored file name relative to the upload directory

        Raises:
            OSError: If the write fails; any partial file is removed
        """
        stored_name = self.generate_unique_filename(upload.original_filename)
        file_path = self.path_for(stored_name)

        try:
            async with aiofiles.open(file_path, 'wb') as f:
                await f.write(upload.content)
        except OSError:
            self.delete_file(stored_name)
            raise

        logger.debug(f"Stored upload {upload.original_filename} as {stored_name}")
        return stored_name

    async def save_uploads(self, uploads: Iterable[ValidatedUpload]) -> List[str]:
        """
        Store several uploads; on failure the ones already written are removed.
        """
        stored: List[str] = []
        try:
            for upload in uploads:
                stored.append(await self.save_upload(upload))
        except OSError:
            self.delete_files(stored)
            raise
        return stored

    def delete_file(self, stored_name: str) -> bool:
        """
        Delete a stored file.

        Returns:
            True if file was deleted, False otherwise
        """
        file_path = self.path_for(stored_name)
        try:
            if file_path.exists():
                file_path.unlink()
                return True
            return False
        except OSError as e:
            logger.warning(f"Failed to delete stored file {stored_name}: {e}")
            return False

    def delete_files(self, stored_names: Iterable[str]) -> int:
        return sum(1 for name in stored_names if self.delete_file(name))
