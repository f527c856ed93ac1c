"""Pure validation helpers.

Every function here returns error mappings (field -> message) instead of
raising, so the import pipeline can collect row errors and the services can
decide which domain error to raise.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping, Optional

from stockroom.core.constants import PROFIT_PERCENT_MAX, PROFIT_PERCENT_MIN

FIELD_LABELS = {
    "name": "Product name",
    "category": "Category",
    "vendor": "Vendor",
    "buyingPrice": "Buying price",
    "sellingPrice": "Selling price",
    "quantity": "Quantity",
    "sold": "Sold quantity",
    "profitPercentage": "Profit percentage",
}


def is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def clean_text(value: Any) -> str:
    if is_blank(value):
        return ""
    return str(value).strip()


def parse_number(value: Any) -> Optional[float]:
    """Return ``value`` as a float, or None when it is not numeric."""
    if isinstance(value, bool) or is_blank(value):
        return None
    text = value if isinstance(value, (int, float)) else str(value).strip().replace(",", "")
    try:
        number = float(text)
    except (ValueError, OverflowError):
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def parse_integer(value: Any) -> Optional[int]:
    number = parse_number(value)
    if number is None or not number.is_integer():
        return None
    return int(number)


def _parse_price(raw: Mapping[str, Any], field: str, values: dict, errors: dict) -> None:
    label = FIELD_LABELS[field]
    value = raw.get(field)
    if is_blank(value):
        errors[field] = f"{label} is required"
        return
    number = parse_number(value)
    if number is None:
        errors[field] = f"{label} must be a number"
        return
    values[field] = number


def _parse_count(
    raw: Mapping[str, Any],
    field: str,
    values: dict,
    errors: dict,
    *,
    default: Optional[int] = None,
) -> None:
    label = FIELD_LABELS[field]
    value = raw.get(field)
    if is_blank(value):
        if default is None:
            errors[field] = f"{label} is required"
        else:
            values[field] = default
        return
    number = parse_integer(value)
    if number is None:
        errors[field] = f"{label} must be a whole number"
        return
    values[field] = number


def clean_product(raw: Mapping[str, Any]) -> tuple[dict, dict[str, str]]:
    """Coerce raw form/JSON/CSV input into typed product values.

    Returns ``(values, errors)``. ``values`` holds every field that parsed;
    ``errors`` maps field names to messages for the ones that did not, plus
    the rule violations reported by :func:`validate_product`.
    """
    errors: dict[str, str] = {}
    values: dict[str, Any] = {
        "productCode": clean_text(raw.get("productCode")),
        "name": clean_text(raw.get("name")),
        "category": clean_text(raw.get("category")),
        "vendor": clean_text(raw.get("vendor")),
        "image": clean_text(raw.get("image")) or None,
    }
    _parse_price(raw, "buyingPrice", values, errors)
    _parse_price(raw, "sellingPrice", values, errors)
    _parse_count(raw, "quantity", values, errors)
    _parse_count(raw, "sold", values, errors, default=0)

    for field, message in validate_product(values).items():
        errors.setdefault(field, message)
    return values, errors


def validate_product(
    values: Mapping[str, Any],
    *,
    categories: Optional[Iterable[str]] = None,
    vendors: Optional[Iterable[str]] = None,
) -> dict[str, str]:
    errors: dict[str, str] = {}
    for field in ("name", "category", "vendor"):
        if is_blank(values.get(field)):
            errors[field] = f"{FIELD_LABELS[field]} is required"

    for field in ("buyingPrice", "sellingPrice"):
        number = values.get(field)
        if number is not None and number <= 0:
            errors[field] = f"{FIELD_LABELS[field]} must be greater than 0"

    for field in ("quantity", "sold"):
        number = values.get(field)
        if number is not None and number < 0:
            errors[field] = f"{FIELD_LABELS[field]} cannot be negative"

    if categories is not None and "category" not in errors:
        if values.get("category") not in set(categories):
            errors["category"] = "Unknown category: {}".format(values.get("category"))
    if vendors is not None and "vendor" not in errors:
        if values.get("vendor") not in set(vendors):
            errors["vendor"] = "Unknown vendor: {}".format(values.get("vendor"))
    return errors


def validate_profit_percentage(value: Any) -> dict[str, str]:
    """Range check for a profit percentage supplied alongside the prices."""
    if is_blank(value):
        return {}
    number = parse_number(value)
    if number is None:
        return {"profitPercentage": "Profit percentage must be a number"}
    if number < PROFIT_PERCENT_MIN or number > PROFIT_PERCENT_MAX:
        return {
            "profitPercentage": "Profit percentage should be between {}% and {}%".format(
                PROFIT_PERCENT_MIN, PROFIT_PERCENT_MAX
            )
        }
    return {}


def validate_reference_name(name: Any, label: str) -> dict[str, str]:
    if is_blank(name):
        return {"name": f"{label} name is required"}
    return {}


def is_duplicate_reference(name: str, existing: Iterable[str]) -> bool:
    return name.strip() in set(existing)


def products_referencing(products: Iterable[Mapping], field: str, name: str) -> list[Mapping]:
    return [product for product in products if product.get(field) == name]


def _clean_codes(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str):
        items = value.split(",")
    elif isinstance(value, (list, tuple)):
        items = value
    else:
        return []
    return [str(item).strip() for item in items if not is_blank(item)]


def clean_customer(raw: Mapping[str, Any]) -> tuple[dict, dict[str, str]]:
    errors: dict[str, str] = {}
    values = {
        "name": clean_text(raw.get("name")),
        "address": clean_text(raw.get("address")),
        "mobileNumber": clean_text(raw.get("mobileNumber")),
        "productCodes": _clean_codes(raw.get("productCodes")),
        "date": clean_text(raw.get("date")),
        "time": clean_text(raw.get("time")),
    }
    if not values["name"]:
        errors["name"] = "Customer name is required"
    if not values["address"]:
        errors["address"] = "Address is required"
    if not values["mobileNumber"]:
        errors["mobileNumber"] = "Mobile number is required"
    if not values["productCodes"]:
        errors["productCodes"] = "At least one product is required"
    if not values["date"]:
        errors["date"] = "Date is required"
    if not values["time"]:
        errors["time"] = "Time is required"
    return values, errors


def clean_company_settings(raw: Mapping[str, Any]) -> tuple[dict, dict[str, str]]:
    values: dict[str, Any] = {}
    errors: dict[str, str] = {}
    if "companyName" in raw and raw["companyName"] is not None:
        name = clean_text(raw["companyName"])
        if not name:
            errors["companyName"] = "Company name cannot be empty"
        else:
            values["companyName"] = name
    return values, errors
