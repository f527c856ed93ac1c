"""Turn uploaded CSV text or XLSX workbooks into validated product records.

Parsing never raises for bad input: the outcome carries either a failure
(malformed file, missing columns, nothing importable) or the accepted
products together with one message per rejected row.
"""

from __future__ import annotations

import csv
import io
import logging
import re
import uuid
import zipfile
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Iterable, Mapping, Optional, Sequence

from openpyxl import load_workbook
from openpyxl.utils.exceptions import InvalidFileException

from stockroom.services.aggregation import build_product
from stockroom.services.validation import (
    clean_product,
    is_blank,
    validate_product,
    validate_profit_percentage,
)

logger = logging.getLogger(__name__)

MALFORMED_INPUT = "malformed_input"
SCHEMA_MISMATCH = "schema_mismatch"
NO_VALID_ROWS = "no_valid_rows"

BOM = "\ufeff"

COLUMN_FIELDS = (
    ("Product Code", "productCode"),
    ("Product Name", "name"),
    ("Category", "category"),
    ("Vendor", "vendor"),
    ("Buying Price", "buyingPrice"),
    ("Selling Price", "sellingPrice"),
    ("Profit %", "profitPercentage"),
    ("Quantity", "quantity"),
    ("Sold", "sold"),
    ("Available Stock", "availableStock"),
    ("Image URL", "image"),
)
REQUIRED_COLUMNS = tuple(column for column, _ in COLUMN_FIELDS)

_UNIT_SUFFIX = re.compile(r"\s*\([^)]*\)\s*$")
_PLACEHOLDER_VALUES = {"n/a", "na", "none", "null", "-", "--"}
OPTIONAL_FIELDS = ("productCode", "image")


@dataclass
class ImportFailure:
    kind: str
    message: str
    missing_columns: list[str] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


@dataclass
class ImportOutcome:
    products: list[dict] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    skipped_rows: int = 0
    failure: Optional[ImportFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None


def _column_key(name: str) -> str:
    return " ".join(name.split()).casefold()


_COLUMN_LOOKUP = {_column_key(column): field_name for column, field_name in COLUMN_FIELDS}


def normalize_header(value: Any) -> str:
    """Trim a header cell, drop wrapping quotes and a trailing unit like ``(₹)``."""
    if value is None:
        return ""
    text = str(value).strip().strip('"').strip()
    if text.startswith(BOM):
        text = text[len(BOM):]
    return _UNIT_SUFFIX.sub("", text)


def _clean_cell(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def _new_product_id() -> str:
    return uuid.uuid4().hex


def read_csv_rows(text: str) -> list[list[str]]:
    if text.startswith(BOM):
        text = text[len(BOM):]
    reader = csv.reader(io.StringIO(text), skipinitialspace=True)
    return [row for row in reader]


def read_workbook_rows(data: bytes) -> Optional[list[list[str]]]:
    """Rows of the first worksheet as strings, or None when not a workbook."""
    try:
        workbook = load_workbook(io.BytesIO(data), read_only=True, data_only=True)
    except (InvalidFileException, zipfile.BadZipFile, OSError, ValueError, KeyError):
        return None
    try:
        worksheet = workbook.worksheets[0] if workbook.worksheets else None
        if worksheet is None:
            return []
        rows = []
        for row in worksheet.iter_rows(values_only=True):
            cells = []
            for value in row:
                if isinstance(value, float) and value.is_integer():
                    value = int(value)
                cells.append("" if value is None else str(value))
            rows.append(cells)
        return rows
    finally:
        workbook.close()


def _row_message(index: int, errors: dict[str, str]) -> str:
    return "Row {}: {}".format(index, "; ".join(errors.values()))


def parse_product_rows(
    rows: Iterable[Sequence[Any]],
    *,
    categories: Optional[Iterable[str]] = None,
    vendors: Optional[Iterable[str]] = None,
    id_factory: Callable[[], str] = _new_product_id,
    now: Optional[datetime] = None,
) -> ImportOutcome:
    rows = [list(row) for row in rows if row and not all(is_blank(cell) for cell in row)]
    if len(rows) < 2:
        return ImportOutcome(
            failure=ImportFailure(
                kind=MALFORMED_INPUT,
                message="CSV file must have at least a header row and one data row",
            )
        )

    headers = [normalize_header(cell) for cell in rows[0]]
    present = {_column_key(header) for header in headers}
    missing = [column for column in REQUIRED_COLUMNS if _column_key(column) not in present]
    if missing:
        return ImportOutcome(
            failure=ImportFailure(
                kind=SCHEMA_MISMATCH,
                message="Missing required headers: {}".format(", ".join(missing)),
                missing_columns=missing,
            )
        )

    outcome = ImportOutcome()
    records = []
    for index, row in enumerate(rows[1:], start=1):
        if len(row) < len(headers):
            outcome.skipped_rows += 1
            continue
        raw: dict[str, str] = {}
        for position, header in enumerate(headers):
            field_name = _COLUMN_LOOKUP.get(_column_key(header))
            if field_name and field_name not in raw:
                raw[field_name] = _clean_cell(row[position])
        records.append((index, raw))

    if outcome.skipped_rows:
        logger.warning("Skipped %d incomplete import rows", outcome.skipped_rows)

    return _accept_records(
        records,
        outcome,
        categories=categories,
        vendors=vendors,
        id_factory=id_factory,
        now=now,
    )


def _accept_records(
    records: Iterable[tuple[int, Mapping[str, Any]]],
    outcome: ImportOutcome,
    *,
    categories: Optional[Iterable[str]],
    vendors: Optional[Iterable[str]],
    id_factory: Callable[[], str],
    now: Optional[datetime],
) -> ImportOutcome:
    category_set = set(categories) if categories is not None else None
    vendor_set = set(vendors) if vendors is not None else None
    created_at = (now or datetime.now(timezone.utc)).isoformat()

    for index, raw in records:
        raw = dict(raw)
        for field_name in OPTIONAL_FIELDS:
            if str(raw.get(field_name) or "").strip().lower() in _PLACEHOLDER_VALUES:
                raw[field_name] = ""

        values, errors = clean_product(raw)
        for field_name, message in validate_product(
            values, categories=category_set, vendors=vendor_set
        ).items():
            errors.setdefault(field_name, message)
        errors.update(validate_profit_percentage(raw.get("profitPercentage")))
        if errors:
            outcome.errors.append(_row_message(index, errors))
            continue

        outcome.products.append(
            build_product(values, product_id=id_factory(), created_at=created_at)
        )

    if not outcome.products:
        outcome.failure = ImportFailure(
            kind=NO_VALID_ROWS,
            message="No products were uploaded. Please check your CSV format.",
            errors=list(outcome.errors),
        )
    return outcome


def parse_product_records(
    records: Iterable[Mapping[str, Any]],
    *,
    categories: Optional[Iterable[str]] = None,
    vendors: Optional[Iterable[str]] = None,
    id_factory: Callable[[], str] = _new_product_id,
    now: Optional[datetime] = None,
) -> ImportOutcome:
    """Validate already-keyed product mappings (JSON bulk input)."""
    numbered = [
        (index, record if isinstance(record, Mapping) else {})
        for index, record in enumerate(records, start=1)
    ]
    if not numbered:
        return ImportOutcome(
            failure=ImportFailure(kind=MALFORMED_INPUT, message="No products provided")
        )
    return _accept_records(
        numbered,
        ImportOutcome(),
        categories=categories,
        vendors=vendors,
        id_factory=id_factory,
        now=now,
    )


def parse_products_csv(text: str, **kwargs) -> ImportOutcome:
    return parse_product_rows(read_csv_rows(text), **kwargs)


def parse_products_workbook(data: bytes, **kwargs) -> ImportOutcome:
    rows = read_workbook_rows(data)
    if rows is None:
        return ImportOutcome(
            failure=ImportFailure(kind=MALFORMED_INPUT, message="File is not a valid .xlsx workbook")
        )
    return parse_product_rows(rows, **kwargs)


__all__ = [
    "ImportFailure",
    "ImportOutcome",
    "MALFORMED_INPUT",
    "NO_VALID_ROWS",
    "REQUIRED_COLUMNS",
    "SCHEMA_MISMATCH",
    "normalize_header",
    "parse_product_records",
    "parse_product_rows",
    "parse_products_csv",
    "parse_products_workbook",
]
