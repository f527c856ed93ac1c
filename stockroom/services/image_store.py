import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from stockroom.core.constants import IMAGE_EXTENSIONS, UPLOADS_URL_PREFIX
from stockroom.core.errors import StorageFailureError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ImageUpload:
    data: bytes
    filename: Optional[str] = None
    content_type: Optional[str] = None


def _sanitize_prefix(value: str) -> str:
    sanitized = []
    for char in value.strip():
        if char.isalnum() or char in ("-", "_"):
            sanitized.append(char)
        else:
            sanitized.append("_")
    return "".join(sanitized).strip("_") or "file"


def check_image_upload(
    content_type: Optional[str],
    size: int,
    max_bytes: int,
    field: str = "image",
) -> None:
    if not content_type or not content_type.lower().startswith("image/"):
        raise ValidationError({field: "Only image files are allowed!"})
    if size > max_bytes:
        raise ValidationError(
            {field: "File too large (limit {} MB)".format(max_bytes // (1024 * 1024))}
        )


class ImageStore:
    """Keeps uploaded images on disk and hands out ``/uploads/...`` references."""

    def __init__(self, upload_dir):
        self.upload_dir = Path(upload_dir)

    def ensure_dir(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    def save(self, data: bytes, filename: Optional[str], prefix: str = "image") -> str:
        extension = Path(filename or "").suffix.lower()
        if extension not in IMAGE_EXTENSIONS:
            extension = ".jpg"
        name = "{}-{}{}".format(_sanitize_prefix(prefix), uuid.uuid4().hex, extension)
        try:
            self.ensure_dir()
            (self.upload_dir / name).write_bytes(data)
        except OSError as exc:
            logger.exception("Failed to store upload %s", name)
            raise StorageFailureError("Failed to store uploaded file") from exc
        return f"{UPLOADS_URL_PREFIX}/{name}"

    def resolve(self, reference: Optional[str]) -> Optional[Path]:
        """Map an ``/uploads/<name>`` reference to a file inside the upload dir."""
        if not reference:
            return None
        prefix = UPLOADS_URL_PREFIX + "/"
        if not reference.startswith(prefix):
            return None
        name = reference[len(prefix):]
        if not name or "/" in name or "\\" in name or name in (".", ".."):
            return None
        return self.upload_dir / name

    def delete(self, reference: Optional[str]) -> bool:
        path = self.resolve(reference)
        if path is None or not path.is_file():
            return False
        try:
            path.unlink()
        except OSError:
            logger.warning("Unable to delete upload %s", path)
            return False
        logger.info("Deleted upload %s", path)
        return True


__all__ = ["ImageStore", "ImageUpload", "check_image_upload"]
