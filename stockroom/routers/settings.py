from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from stockroom.config import Settings
from stockroom.core.errors import ValidationError
from stockroom.database.store import RecordStore
from stockroom.dependencies import (
    get_app_settings,
    get_image_store,
    get_store,
    read_image_upload,
    require_auth_if_strict,
)
from stockroom.schemas.settings import (
    CompanySettingsRead,
    CompanySettingsUpdate,
    LogoUploadResult,
)
from stockroom.services import company_service
from stockroom.services.image_store import ImageStore

router = APIRouter(
    prefix="/api/settings",
    tags=["Settings"],
    dependencies=[Depends(require_auth_if_strict)],
)


@router.get("", response_model=CompanySettingsRead)
def read_company_settings(store: RecordStore = Depends(get_store)):
    return company_service.get_company_settings(store)


@router.put("", response_model=CompanySettingsRead)
def update_company_settings(
    payload: CompanySettingsUpdate,
    store: RecordStore = Depends(get_store),
):
    return company_service.update_company_settings(store, payload.model_dump(by_alias=True))


@router.post("/logo", response_model=LogoUploadResult)
def upload_logo(
    logo: Optional[UploadFile] = File(None),
    store: RecordStore = Depends(get_store),
    image_store: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_app_settings),
):
    upload = read_image_upload(logo, settings, field="logo")
    if upload is None:
        raise ValidationError({"logo": "No logo file uploaded"})
    updated = company_service.replace_logo(store, image_store, upload)
    return {"success": True, "logo": updated["logo"]}


__all__ = ["router"]
