from __future__ import annotations

import csv
import io
from datetime import datetime
from typing import Any, Iterable, Mapping, Optional

from openpyxl import Workbook

from stockroom.services.aggregation import (
    available_stock,
    derive_profit_percentage,
    summarize_products,
)
from stockroom.services.csv_import import BOM
from stockroom.services.validation import is_blank, parse_number

DETAIL_COLUMNS = (
    "Product Code",
    "Product Name",
    "Category",
    "Vendor",
    "Buying Price",
    "Selling Price",
    "Profit %",
    "Quantity",
    "Sold",
    "Available Stock",
    "Created Date",
    "Last Updated",
    "Image URL",
)
SUMMARY_COLUMNS = ("Metric", "Value", "Details")

DATE_FORMAT = "%d/%m/%Y"
TIME_FORMAT = "%I:%M:%S %p"
NOT_AVAILABLE = "N/A"


def _text(value: Any) -> str:
    if is_blank(value):
        return NOT_AVAILABLE
    return str(value).strip()


def _number(value: Any):
    number = parse_number(value)
    if number is None:
        return 0
    if number.is_integer():
        return int(number)
    return number


def _date(value: Any) -> str:
    if is_blank(value):
        return NOT_AVAILABLE
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value))
        except ValueError:
            return NOT_AVAILABLE
    return parsed.strftime(DATE_FORMAT)


def detail_row(product: Mapping[str, Any]) -> list:
    return [
        _text(product.get("productCode")),
        _text(product.get("name")),
        _text(product.get("category")),
        _text(product.get("vendor")),
        _number(product.get("buyingPrice")),
        _number(product.get("sellingPrice")),
        _number(
            derive_profit_percentage(product.get("buyingPrice"), product.get("sellingPrice"))
        ),
        _number(product.get("quantity")),
        _number(product.get("sold")),
        available_stock(product),
        _date(product.get("createdAt")),
        _date(product.get("updatedAt")),
        "" if is_blank(product.get("image")) else str(product["image"]),
    ]


def _write_csv(header: Iterable[str], rows: Iterable[list]) -> str:
    buffer = io.StringIO()
    buffer.write(BOM)
    writer = csv.writer(buffer, quoting=csv.QUOTE_NONNUMERIC, lineterminator="\n")
    writer.writerow(list(header))
    writer.writerows(rows)
    return buffer.getvalue()


def export_products_csv(products: Iterable[Mapping[str, Any]]) -> str:
    return _write_csv(DETAIL_COLUMNS, (detail_row(product) for product in products))


def export_summary_csv(
    products: Iterable[Mapping[str, Any]],
    *,
    currency: str = "",
    now: Optional[datetime] = None,
) -> str:
    summary = summarize_products(products)
    now = now or datetime.now()
    rows = [
        ["Total Products", summary.total_products, "Number of products in inventory"],
        [
            "Total Inventory Value",
            f"{currency}{summary.total_value:.2f}",
            "Total value of all products at buying price",
        ],
        ["Total Units Sold", summary.total_sold, "Total units sold across all products"],
        ["Total Profit", f"{currency}{summary.total_profit:.2f}", "Total profit from sold units"],
        [
            "Average Profit %",
            f"{summary.average_profit_percentage:.2f}%",
            "Average profit percentage",
        ],
        ["Export Date", now.strftime(DATE_FORMAT), "Date when this summary was exported"],
        ["Export Time", now.strftime(TIME_FORMAT), "Time when this summary was exported"],
    ]
    return _write_csv(SUMMARY_COLUMNS, rows)


def export_products_workbook(products: Iterable[Mapping[str, Any]]) -> bytes:
    workbook = Workbook()
    worksheet = workbook.active
    worksheet.title = "Products"
    worksheet.append(list(DETAIL_COLUMNS))
    for product in products:
        worksheet.append(detail_row(product))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def export_filename(kind: str, extension: str, now: Optional[datetime] = None) -> str:
    stamp = (now or datetime.now()).strftime("%Y-%m-%d")
    prefix = "inventory_summary" if kind == "summary" else "inventory_products"
    return f"{prefix}_{stamp}.{extension}"


__all__ = [
    "DETAIL_COLUMNS",
    "SUMMARY_COLUMNS",
    "detail_row",
    "export_filename",
    "export_products_csv",
    "export_products_workbook",
    "export_summary_csv",
]
