"""Local storage for uploaded profile pictures.

Pictures are addressed by a storage key (``<hex token>_<original name>``).
The key is what the user record keeps to know a picture is hosted here; the
public URL is derived from it.
"""

import logging
import re
import struct
from functools import lru_cache
from io import BytesIO
from pathlib import Path
from uuid import uuid4

from fastapi import UploadFile
from PIL import Image

from src.config import get_settings

logger = logging.getLogger(__name__)

ALLOWED_PICTURE_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
MAX_NAME_LENGTH = 100
READ_CHUNK_SIZE = 64 * 1024

# Pillow format names of the accepted picture types
PICTURE_FORMATS = {"JPEG", "PNG", "GIF", "WEBP"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


class PictureStorageError(Exception):
    """A picture could not be written."""


class UploadTooLargeError(ValueError):
    """An upload went over the configured size limit."""


async def read_upload_file(upload: UploadFile, max_bytes: int) -> bytes:
    """Read an upload in chunks, stopping as soon as it exceeds max_bytes."""
    chunks = []
    total = 0
    while chunk := await upload.read(READ_CHUNK_SIZE):
        total += len(chunk)
        if total > max_bytes:
            raise UploadTooLargeError(f"Upload exceeds {max_bytes} bytes")
        chunks.append(chunk)
    return b"".join(chunks)


def verify_picture(data: bytes) -> str:
    """Check the bytes decode as an accepted image and return its format.

    Raises ValueError when they do not.
    """
    try:
        with Image.open(BytesIO(data)) as image:
            image_format = image.format
            image.verify()
    except (OSError, SyntaxError, ValueError, struct.error) as e:
        raise ValueError(f"Not a readable image: {e}") from e
    if image_format not in PICTURE_FORMATS:
        raise ValueError(f"Unsupported image format: {image_format}")
    return image_format


def sanitize_filename(filename: str | None) -> str:
    """Reduce a client-supplied filename to a safe basename."""
    name = Path(filename or "").name
    name = _UNSAFE_CHARS.sub("_", name).lstrip("._")
    return name[-MAX_NAME_LENGTH:] or "picture"


class PictureStorage:
    """Saves, deletes and locates picture files under a root directory."""

    def __init__(self, root: str | Path, base_url: str):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def make_key(self, original_name: str | None) -> str:
        """Build a collision-resistant key from the original filename."""
        return f"{uuid4().hex}_{sanitize_filename(original_name)}"

    def path_for(self, key: str) -> Path:
        return self.root / key

    def url_for(self, key: str) -> str:
        return f"{self.base_url}/{key}"

    def save(self, original_name: str | None, data: bytes) -> str:
        """Write the picture and return its storage key."""
        key = self.make_key(original_name)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            self.path_for(key).write_bytes(data)
        except OSError as e:
            raise PictureStorageError(f"Could not write picture {key}: {e}") from e
        logger.info(f"Saved picture {key} ({len(data)} bytes)")
        return key

    def delete(self, key: str) -> None:
        """Remove a picture. A missing file is not an error."""
        self.path_for(key).unlink(missing_ok=True)
        logger.info(f"Deleted picture {key}")


@lru_cache
def get_picture_storage() -> PictureStorage:
    """Get the picture storage configured from settings."""
    settings = get_settings()
    return PictureStorage(settings.media_root, settings.media_base_url)
