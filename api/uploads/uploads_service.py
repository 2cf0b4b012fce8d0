# api/uploads/uploads_service.py

import hashlib
import logging
from dataclasses import dataclass
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError

from config.database import UPLOAD_DIR
from config.settings import settings
from utils.database_utils import generate_id

logger = logging.getLogger(__name__)

EXTENSIONS = {
    "image/png": ".png",
    "image/webp": ".webp",
    "image/jpeg": ".jpg",
}


class InvalidImage(ValueError):
    pass


@dataclass(frozen=True)
class StoredFile:
    reference: str          # public URL, e.g. /uploads/attendance/<name>.jpg
    content_hash: str       # sha256 hex of the bytes
    path: Path


def content_hash(data: bytes) -> str:
    return hashlib.sha256(data).hexdigest()


def validate_image(data: bytes, content_type: Optional[str]) -> None:
    """
    Reject empty, oversized, disallowed or undecodable images.
    Raises InvalidImage with a user-facing message.
    """
    if not data:
        raise InvalidImage("Photo is required")
    if len(data) > settings.MAX_FILE_SIZE:
        raise InvalidImage("File too large")
    if (content_type or "").lower() not in settings.allowed_image_types_list:
        raise InvalidImage("Image type not allowed")
    try:
        with Image.open(BytesIO(data)) as img:
            img.verify()
    except (UnidentifiedImageError, OSError, SyntaxError):
        raise InvalidImage("File is not a valid image")


class FileStorage:
    """Stores uploaded bytes below UPLOAD_DIR/<subdir> and serves them from /uploads."""

    def __init__(self, subdir: str, root: Path = UPLOAD_DIR):
        self.subdir = subdir
        self.directory = root / subdir
        self.directory.mkdir(parents=True, exist_ok=True)

    def store(self, data: bytes, content_type: Optional[str] = None) -> StoredFile:
        ext = EXTENSIONS.get((content_type or "").lower(), ".jpg")
        name = f"{generate_id(16)}{ext}"
        dest = self.directory / name
        dest.write_bytes(data)
        return StoredFile(
            reference=f"/uploads/{self.subdir}/{name}",
            content_hash=content_hash(data),
            path=dest,
        )

    def delete(self, reference: Optional[str]) -> bool:
        if not reference:
            return False
        path = self.directory / Path(reference).name
        try:
            path.unlink()
            return True
        except FileNotFoundError:
            return False
        except OSError:
            logger.warning("Could not remove stored file %s", path, exc_info=True)
            return False


def get_attendance_storage() -> FileStorage:
    return FileStorage("attendance")


def get_menu_storage() -> FileStorage:
    return FileStorage("menu")
