from typing import Optional

from fastapi import Depends, Request, UploadFile

from stockroom.config import Settings
from stockroom.core.errors import ValidationError
from stockroom.core.security import require_login
from stockroom.database.store import RecordStore
from stockroom.services.image_store import ImageStore, ImageUpload, check_image_upload


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_store(request: Request) -> RecordStore:
    return request.app.state.store


def get_image_store(request: Request) -> ImageStore:
    return request.app.state.image_store


def require_auth(request: Request) -> None:
    require_login(request)


def require_auth_if_strict(
    request: Request,
    settings: Settings = Depends(get_app_settings),
) -> None:
    if settings.AUTH_REQUIRED_FOR_ALL:
        require_login(request)


def read_upload(upload: UploadFile, max_bytes: int, field: str) -> bytes:
    data = upload.file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise ValidationError(
            {field: "File too large (limit {} MB)".format(max_bytes // (1024 * 1024))}
        )
    return data


def read_image_upload(
    upload: Optional[UploadFile],
    settings: Settings,
    field: str = "image",
) -> Optional[ImageUpload]:
    if upload is None or not upload.filename:
        return None
    data = read_upload(upload, settings.IMAGE_MAX_BYTES, field)
    check_image_upload(upload.content_type, len(data), settings.IMAGE_MAX_BYTES, field)
    return ImageUpload(data=data, filename=upload.filename, content_type=upload.content_type)


__all__ = [
    "get_app_settings",
    "get_image_store",
    "get_store",
    "read_image_upload",
    "read_upload",
    "require_auth",
    "require_auth_if_strict",
]
