import logging
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Mapping, Optional

from stockroom.core.constants import CATEGORIES, PRODUCTS, VENDORS
from stockroom.core.errors import (
    MalformedInputError,
    NoValidRowsError,
    NotFoundError,
    SchemaMismatchError,
    StorageFailureError,
    ValidationError,
)
from stockroom.database.store import RecordStore
from stockroom.schemas.product import DashboardStats, ImportResult
from stockroom.services import csv_import
from stockroom.services.aggregation import (
    build_product,
    compute_dashboard_stats,
    filter_products,
    to_read_model,
    with_derived_fields,
)
from stockroom.services.image_store import ImageStore, ImageUpload
from stockroom.services.validation import clean_product, is_blank, validate_product

logger = logging.getLogger(__name__)

PRODUCT_FIELDS = (
    "productCode",
    "name",
    "category",
    "vendor",
    "buyingPrice",
    "sellingPrice",
    "quantity",
    "sold",
)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _new_id() -> str:
    return uuid.uuid4().hex


def _find_index(products: list, product_id: str) -> int:
    for index, product in enumerate(products):
        if str(product.get("id")) == str(product_id):
            return index
    raise NotFoundError("Product not found")


def _save_upload(image_store: Optional[ImageStore], upload: Optional[ImageUpload]) -> Optional[str]:
    if upload is None or image_store is None:
        return None
    return image_store.save(upload.data, upload.filename, prefix="image")


def _discard_upload(image_store: Optional[ImageStore], reference: Optional[str]) -> None:
    if image_store is not None and reference:
        image_store.delete(reference)


def _checked_values(store: RecordStore, raw: Mapping[str, Any]) -> dict:
    values, errors = clean_product(raw)
    referential = validate_product(
        values,
        categories=store.load(CATEGORIES),
        vendors=store.load(VENDORS),
    )
    for field, message in referential.items():
        errors.setdefault(field, message)
    if errors:
        raise ValidationError(errors)
    return values


def list_products(store: RecordStore) -> list[dict]:
    return [to_read_model(product) for product in store.load(PRODUCTS)]


def search_products(
    store: RecordStore,
    query: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> list[dict]:
    products = filter_products(store.load(PRODUCTS), query, sort_by, sort_order)
    return [to_read_model(product) for product in products]


def get_product(store: RecordStore, product_id: str) -> dict:
    products = store.load(PRODUCTS)
    return to_read_model(products[_find_index(products, product_id)])


def create_product(
    store: RecordStore,
    raw: Mapping[str, Any],
    *,
    image_store: Optional[ImageStore] = None,
    upload: Optional[ImageUpload] = None,
) -> dict:
    with store.locked(PRODUCTS, CATEGORIES, VENDORS):
        values = _checked_values(store, raw)
        saved_upload = _save_upload(image_store, upload)
        if saved_upload:
            values["image"] = saved_upload
        product = build_product(values, product_id=_new_id(), created_at=_now())
        try:
            with store.edit(PRODUCTS) as products:
                products.append(product)
        except StorageFailureError:
            _discard_upload(image_store, saved_upload)
            raise
    logger.info("Created product %s (%s)", product["id"], product["name"])
    return to_read_model(product)


def update_product(
    store: RecordStore,
    product_id: str,
    raw: Mapping[str, Any],
    *,
    image_store: Optional[ImageStore] = None,
    upload: Optional[ImageUpload] = None,
) -> dict:
    with store.locked(PRODUCTS, CATEGORIES, VENDORS):
        products = store.load(PRODUCTS)
        index = _find_index(products, product_id)
        existing = products[index]

        merged = {field: existing.get(field) for field in PRODUCT_FIELDS}
        merged.update({key: value for key, value in raw.items() if key in PRODUCT_FIELDS})
        merged["image"] = raw["image"] if "image" in raw else existing.get("image")
        if is_blank(merged.get("sold")):
            merged["sold"] = existing.get("sold") or 0
        values = _checked_values(store, merged)

        previous_image = existing.get("image")
        saved_upload = _save_upload(image_store, upload)
        image = saved_upload or values.get("image")

        updated = dict(existing)
        updated.update({field: values[field] for field in PRODUCT_FIELDS})
        updated["image"] = image
        updated["updatedAt"] = _now()
        products[index] = with_derived_fields(updated)
        try:
            store.save(PRODUCTS, products)
        except StorageFailureError:
            _discard_upload(image_store, saved_upload)
            raise

    if image_store is not None and previous_image and previous_image != image:
        image_store.delete(previous_image)
    return to_read_model(products[index])


def delete_product(
    store: RecordStore,
    product_id: str,
    *,
    image_store: Optional[ImageStore] = None,
) -> None:
    with store.edit(PRODUCTS) as products:
        index = _find_index(products, product_id)
        product = products.pop(index)
    if image_store is not None and product.get("image"):
        image_store.delete(product["image"])
    logger.info("Deleted product %s", product_id)


def dashboard_stats(store: RecordStore) -> DashboardStats:
    return compute_dashboard_stats(store.load(PRODUCTS))


def _raise_for_failure(failure: csv_import.ImportFailure) -> None:
    if failure.kind == csv_import.SCHEMA_MISMATCH:
        raise SchemaMismatchError(failure.missing_columns)
    if failure.kind == csv_import.NO_VALID_ROWS:
        raise NoValidRowsError(failure.errors)
    raise MalformedInputError(failure.message)


def _persist_outcome(store: RecordStore, outcome, *, dry_run: bool) -> ImportResult:
    if not outcome.ok:
        _raise_for_failure(outcome.failure)
    if not dry_run:
        with store.edit(PRODUCTS) as products:
            products.extend(outcome.products)
    logger.info(
        "Product import %s: %d imported, %d rejected, %d skipped",
        "validated" if dry_run else "completed",
        len(outcome.products),
        len(outcome.errors),
        outcome.skipped_rows,
        extra={"context": {"dryRun": dry_run, "rowErrors": outcome.errors[:20]}},
    )
    return ImportResult(
        imported_count=len(outcome.products),
        skipped_count=outcome.skipped_rows,
        errors=outcome.errors,
    )


def import_products(
    store: RecordStore,
    content: bytes,
    filename: Optional[str] = None,
    *,
    dry_run: bool = False,
) -> ImportResult:
    """Import a CSV or XLSX upload, keeping every valid row.

    Rows that fail validation are reported in ``errors``; the rest are saved
    in a single write. Nothing is written when the file itself is unusable.
    """
    with store.locked(PRODUCTS, CATEGORIES, VENDORS):
        known = {
            "categories": store.load(CATEGORIES),
            "vendors": store.load(VENDORS),
        }
        if Path(filename or "").suffix.lower() == ".xlsx":
            outcome = csv_import.parse_products_workbook(content, **known)
        else:
            try:
                text = content.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MalformedInputError("CSV file must be UTF-8 encoded") from exc
            outcome = csv_import.parse_products_csv(text, **known)
        return _persist_outcome(store, outcome, dry_run=dry_run)


def _bulk_record(item: Any) -> Any:
    if not isinstance(item, Mapping):
        return item
    record = dict(item)
    if "imageUrl" in record:
        record["image"] = record.pop("imageUrl")
    return record


def bulk_create_products(store: RecordStore, items: Iterable[Any]) -> ImportResult:
    with store.locked(PRODUCTS, CATEGORIES, VENDORS):
        outcome = csv_import.parse_product_records(
            [_bulk_record(item) for item in items],
            categories=store.load(CATEGORIES),
            vendors=store.load(VENDORS),
        )
        return _persist_outcome(store, outcome, dry_run=False)


__all__ = [
    "bulk_create_products",
    "create_product",
    "dashboard_stats",
    "delete_product",
    "get_product",
    "import_products",
    "list_products",
    "search_products",
    "update_product",
]
