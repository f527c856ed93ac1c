from typing import Any, Dict, List, Optional, Union

from fastapi import APIRouter, Body, Depends, File, Form, Query, UploadFile
from fastapi.responses import Response

from stockroom.config import Settings
from stockroom.core.constants import IMPORT_EXTENSIONS
from stockroom.core.errors import ValidationError
from stockroom.database.store import RecordStore
from stockroom.dependencies import (
    get_app_settings,
    get_image_store,
    get_store,
    read_image_upload,
    read_upload,
    require_auth,
)
from stockroom.schemas.product import ImportResult, ProductRead
from stockroom.services import csv_export, product_service
from stockroom.services.image_store import ImageStore

router = APIRouter(prefix="/api/products", tags=["Products"], dependencies=[Depends(require_auth)])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


def _form_values(**fields: Optional[str]) -> dict:
    return {key: value for key, value in fields.items() if value is not None}


@router.get("", response_model=List[ProductRead])
def list_products(store: RecordStore = Depends(get_store)):
    return product_service.list_products(store)


@router.get("/search", response_model=List[ProductRead])
def search_products(
    q: Optional[str] = Query(None, description="Code, name, vendor or category text"),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder", description="asc | desc"),
    store: RecordStore = Depends(get_store),
):
    return product_service.search_products(store, q, sort_by, sort_order)


@router.get("/export")
def export_products(
    kind: str = Query("detail", description="detail | summary"),
    fmt: str = Query("csv", alias="format", description="csv | xlsx"),
    q: Optional[str] = Query(None),
    sort_by: Optional[str] = Query(None, alias="sortBy"),
    sort_order: Optional[str] = Query(None, alias="sortOrder"),
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    kind = kind.strip().lower()
    fmt = fmt.strip().lower()
    if kind not in ("detail", "summary"):
        raise ValidationError({"kind": "kind must be 'detail' or 'summary'"})
    if fmt not in ("csv", "xlsx") or (kind == "summary" and fmt != "csv"):
        raise ValidationError({"format": "Unsupported export format"})

    products = product_service.search_products(store, q, sort_by, sort_order)
    filename = csv_export.export_filename(kind, fmt)
    headers = {"Content-Disposition": f'attachment; filename="{filename}"'}
    if fmt == "xlsx":
        content = csv_export.export_products_workbook(products)
        return Response(content=content, media_type=XLSX_MEDIA_TYPE, headers=headers)
    if kind == "summary":
        content = csv_export.export_summary_csv(products, currency=settings.CURRENCY_SYMBOL)
    else:
        content = csv_export.export_products_csv(products)
    return Response(
        content=content.encode("utf-8"),
        media_type="text/csv; charset=utf-8",
        headers=headers,
    )


@router.post("/bulk", response_model=ImportResult)
def bulk_create(
    payload: Union[List[Dict[str, Any]], Dict[str, Any]] = Body(...),
    store: RecordStore = Depends(get_store),
):
    items = payload if isinstance(payload, list) else payload.get("products")
    if not isinstance(items, list) or not items:
        raise ValidationError({"products": "No products provided"})
    return product_service.bulk_create_products(store, items)


@router.post("/bulk-upload", response_model=ImportResult)
def bulk_upload(
    csv_file: Optional[UploadFile] = File(None, alias="csvFile"),
    dry_run: bool = Query(False, alias="dryRun"),
    store: RecordStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    if csv_file is None or not csv_file.filename:
        raise ValidationError({"csvFile": "No CSV file uploaded"})
    filename = csv_file.filename.lower()
    content_type = (csv_file.content_type or "").lower()
    if not (filename.endswith(IMPORT_EXTENSIONS) or content_type.startswith("text/csv")):
        raise ValidationError({"csvFile": "Only CSV files are allowed!"})
    content = read_upload(csv_file, settings.IMPORT_MAX_BYTES, "csvFile")
    return product_service.import_products(store, content, csv_file.filename, dry_run=dry_run)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(product_id: str, store: RecordStore = Depends(get_store)):
    return product_service.get_product(store, product_id)


@router.post("", response_model=ProductRead)
def create_product(
    product_code: Optional[str] = Form(None, alias="productCode"),
    name: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    vendor: Optional[str] = Form(None),
    buying_price: Optional[str] = Form(None, alias="buyingPrice"),
    selling_price: Optional[str] = Form(None, alias="sellingPrice"),
    quantity: Optional[str] = Form(None),
    sold: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    image: Optional[UploadFile] = File(None),
    store: RecordStore = Depends(get_store),
    image_store: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_app_settings),
):
    raw = _form_values(
        productCode=product_code,
        name=name,
        category=category,
        vendor=vendor,
        buyingPrice=buying_price,
        sellingPrice=selling_price,
        quantity=quantity,
        sold=sold,
        image=image_url,
    )
    upload = read_image_upload(image, settings)
    return product_service.create_product(store, raw, image_store=image_store, upload=upload)


@router.put("/{product_id}", response_model=ProductRead)
def update_product(
    product_id: str,
    product_code: Optional[str] = Form(None, alias="productCode"),
    name: Optional[str] = Form(None),
    category: Optional[str] = Form(None),
    vendor: Optional[str] = Form(None),
    buying_price: Optional[str] = Form(None, alias="buyingPrice"),
    selling_price: Optional[str] = Form(None, alias="sellingPrice"),
    quantity: Optional[str] = Form(None),
    sold: Optional[str] = Form(None),
    image_url: Optional[str] = Form(None, alias="imageUrl"),
    image: Optional[UploadFile] = File(None),
    store: RecordStore = Depends(get_store),
    image_store: ImageStore = Depends(get_image_store),
    settings: Settings = Depends(get_app_settings),
):
    raw = _form_values(
        productCode=product_code,
        name=name,
        category=category,
        vendor=vendor,
        buyingPrice=buying_price,
        sellingPrice=selling_price,
        quantity=quantity,
        sold=sold,
        image=image_url,
    )
    upload = read_image_upload(image, settings)
    return product_service.update_product(
        store, product_id, raw, image_store=image_store, upload=upload
    )


@router.delete("/{product_id}")
def delete_product(
    product_id: str,
    store: RecordStore = Depends(get_store),
    image_store: ImageStore = Depends(get_image_store),
):
    product_service.delete_product(store, product_id, image_store=image_store)
    return {"success": True}


__all__ = ["router"]
