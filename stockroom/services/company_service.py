from typing import Any, Mapping

from stockroom.core.constants import COMPANY_SETTINGS, DEFAULT_COMPANY_SETTINGS
from stockroom.core.errors import ValidationError
from stockroom.database.store import RecordStore
from stockroom.services.image_store import ImageStore, ImageUpload
from stockroom.services.validation import clean_company_settings


def _current(records: list) -> dict:
    settings = dict(DEFAULT_COMPANY_SETTINGS)
    if records and isinstance(records[0], dict):
        settings.update(records[0])
    return settings


def get_company_settings(store: RecordStore) -> dict:
    return _current(store.load(COMPANY_SETTINGS))


def update_company_settings(store: RecordStore, raw: Mapping[str, Any]) -> dict:
    values, errors = clean_company_settings(raw)
    if errors:
        raise ValidationError(errors)
    with store.edit(COMPANY_SETTINGS) as records:
        settings = _current(records)
        settings.update(values)
        records[:] = [settings]
    return settings


def replace_logo(store: RecordStore, image_store: ImageStore, upload: ImageUpload) -> dict:
    reference = image_store.save(upload.data, upload.filename, prefix="logo")
    with store.edit(COMPANY_SETTINGS) as records:
        settings = _current(records)
        previous = settings.get("logo")
        settings["logo"] = reference
        records[:] = [settings]
    if previous and previous != reference:
        image_store.delete(previous)
    return settings
