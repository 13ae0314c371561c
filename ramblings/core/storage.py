"""
Binary storage for uploaded images on the local filesystem.
"""
import io
import logging
from pathlib import Path
from typing import Optional

import aiofiles
import aiofiles.os
from fastapi import Request
from PIL import Image

logger = logging.getLogger(__name__)

# Upload MIME type -> stored file extension
MIME_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/jpg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
    "image/webp": "webp",
    "image/svg+xml": "svg",
}

# Served file extension -> Content-Type
EXTENSION_MEDIA_TYPES = {
    ".jpg": "image/jpeg",
    ".jpeg": "image/jpeg",
    ".png": "image/png",
    ".gif": "image/gif",
    ".webp": "image/webp",
    ".svg": "image/svg+xml",
}

RASTER_FORMATS = {"JPEG", "PNG", "GIF", "WEBP"}


def extension_for_mime_type(mime_type: str) -> str:
    return MIME_EXTENSIONS.get(mime_type, "bin")


def media_type_for(filename: str) -> str:
    return EXTENSION_MEDIA_TYPES.get(Path(filename).suffix.lower(), "application/octet-stream")


class ImageStorage:
    """
    Service for storing and retrieving image binaries.
    Files live flat in one directory, named ``{image id}.{extension}``.
    """

    def __init__(
        self,
        upload_dir: str = "./content/images",
        max_file_size: int = 10 * 1024 * 1024,  # 10MB default
    ):
        """
        Initialize storage service.

        Args:
            upload_dir: Directory for image files
            max_file_size: Maximum file size in bytes
        """
        self.upload_dir = Path(upload_dir)
        self.max_file_size = max_file_size
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    @staticmethod
    def is_safe_filename(filename: str) -> bool:
        """True if ``filename`` names a file directly inside the upload directory."""
        return bool(filename) and Path(filename).name == filename and filename not in (".", "..")

    def get_file_path(self, filename: str) -> Path:
        if not self.is_safe_filename(filename):
            raise ValueError(f"Invalid filename: {filename}")
        return self.upload_dir / filename

    @staticmethod
    def get_file_url(filename: str) -> str:
        return f"/api/images/serve?file={filename}"

    async def save_file(self, file_content: bytes, filename: str) -> int:
        """
        Save an image binary.

        Args:
            file_content: File content as bytes
            filename: Stored filename

        Returns:
            Number of bytes written
        """
        file_size = len(file_content)
        if file_size > self.max_file_size:
            raise ValueError(f"File size {file_size} exceeds maximum {self.max_file_size}")

        file_path = self.get_file_path(filename)
        async with aiofiles.open(file_path, "wb") as f:
            await f.write(file_content)

        logger.info(f"Saved image file: {file_path}")
        return file_size

    async def read_file(self, filename: str) -> Optional[bytes]:
        """Read an image binary, or None if it does not exist."""
        file_path = self.get_file_path(filename)
        try:
            async with aiofiles.open(file_path, "rb") as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def delete_file(self, filename: str) -> bool:
        """
        Delete an image binary.

        Returns:
            True if the file is gone afterwards (including when it was
            already missing), False if it could not be removed
        """
        try:
            await aiofiles.os.remove(self.get_file_path(filename))
            logger.info(f"Deleted image file: {filename}")
            return True
        except FileNotFoundError:
            logger.warning(f"Image file already missing: {filename}")
            return True
        except OSError as e:
            logger.error(f"Failed to delete image file {filename}: {e}")
            return False

    def validate_image(self, image_content: bytes, mime_type: str) -> bool:
        """
        Check that uploaded bytes are really an image of an allowed kind.

        SVG is text and only gets a sniff test; raster formats must open
        with Pillow.
        """
        if mime_type == "image/svg+xml":
            head = image_content[:1024].lstrip().lower()
            return head.startswith(b"<svg") or head.startswith(b"<?xml")

        try:
            image = Image.open(io.BytesIO(image_content))
            image.verify()
        except Exception as e:
            logger.warning(f"Image validation failed: {e}")
            return False

        if image.format not in RASTER_FORMATS:
            logger.warning(f"Unsupported image format: {image.format}")
            return False

        return True


def get_image_storage(request: Request) -> ImageStorage:
    return request.app.state.image_storage
