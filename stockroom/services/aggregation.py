from __future__ import annotations

from collections import Counter
from typing import Any, Iterable, Mapping, Optional

from stockroom.core.constants import LOW_STOCK_THRESHOLD
from stockroom.schemas.product import DashboardStats, ProductSummary
from stockroom.services.validation import clean_text, parse_number

NUMERIC_SORT_FIELDS = {
    "buyingPrice",
    "sellingPrice",
    "profitPercentage",
    "quantity",
    "sold",
    "availableStock",
}


def _num(value: Any) -> float:
    number = parse_number(value)
    return number if number is not None else 0.0


def _int(value: Any) -> int:
    return int(_num(value))


def derive_profit_percentage(buying_price: Any, selling_price: Any) -> float:
    """Profit over the buying price, in percent, rounded to two decimals.

    A buying price of zero (or missing/negative) yields ``0.0``; such prices
    never pass validation, so this only shields reads of legacy records.
    """
    buying = _num(buying_price)
    if buying <= 0:
        return 0.0
    selling = _num(selling_price)
    return round((selling - buying) / buying * 100, 2)


def available_stock(product: Mapping[str, Any]) -> int:
    return _int(product.get("quantity")) - _int(product.get("sold"))


def with_derived_fields(product: Mapping[str, Any]) -> dict:
    updated = dict(product)
    updated["profitPercentage"] = derive_profit_percentage(
        product.get("buyingPrice"), product.get("sellingPrice")
    )
    return updated


def build_product(values: Mapping[str, Any], *, product_id: str, created_at: str) -> dict:
    product = {
        "id": product_id,
        "productCode": values.get("productCode") or "",
        "name": values["name"],
        "category": values["category"],
        "vendor": values["vendor"],
        "buyingPrice": values["buyingPrice"],
        "sellingPrice": values["sellingPrice"],
        "quantity": values["quantity"],
        "sold": values.get("sold") or 0,
        "image": values.get("image"),
        "createdAt": created_at,
        "updatedAt": None,
    }
    return with_derived_fields(product)


def to_read_model(product: Mapping[str, Any]) -> dict:
    data = with_derived_fields(product)
    data["availableStock"] = available_stock(product)
    return data


def compute_dashboard_stats(products: Iterable[Mapping[str, Any]]) -> DashboardStats:
    products = list(products)
    categories: Counter = Counter()
    vendors = set()
    total_stock = 0
    low_stock = 0
    total_value = 0.0
    total_sold = 0
    total_sold_profit = 0.0

    for product in products:
        quantity = _int(product.get("quantity"))
        sold = _int(product.get("sold"))
        buying = _num(product.get("buyingPrice"))
        selling = _num(product.get("sellingPrice"))

        total_stock += quantity
        if quantity < LOW_STOCK_THRESHOLD:
            low_stock += 1
        total_value += buying * quantity
        total_sold += sold
        total_sold_profit += sold * (selling - buying)
        vendor = clean_text(product.get("vendor"))
        if vendor:
            vendors.add(vendor)
        category = clean_text(product.get("category"))
        if category:
            categories[category] += 1

    return DashboardStats(
        total_products=len(products),
        total_stock_quantity=total_stock,
        total_vendors=len(vendors),
        low_stock_alerts=low_stock,
        total_value=total_value,
        total_sold=total_sold,
        total_sold_profit=total_sold_profit,
        categories=dict(categories),
    )


def summarize_products(products: Iterable[Mapping[str, Any]]) -> ProductSummary:
    stats = compute_dashboard_stats(products)
    if stats.total_value:
        average = round(stats.total_sold_profit / stats.total_value * 100, 2)
    else:
        average = 0.0
    return ProductSummary(
        total_products=stats.total_products,
        total_value=round(stats.total_value, 2),
        total_sold=stats.total_sold,
        total_profit=round(stats.total_sold_profit, 2),
        average_profit_percentage=average,
    )


def _matches(product: Mapping[str, Any], term: str) -> bool:
    for field in ("productCode", "name", "vendor", "category"):
        value = product.get(field)
        if value is not None and term in str(value).lower():
            return True
    return False


def _sort_key(field: str):
    if field in NUMERIC_SORT_FIELDS:
        if field == "availableStock":
            return available_stock
        if field == "profitPercentage":
            return lambda product: derive_profit_percentage(
                product.get("buyingPrice"), product.get("sellingPrice")
            )
        return lambda product: _num(product.get(field))
    return lambda product: str(product.get(field) or "").lower()


def filter_products(
    products: Iterable[Mapping[str, Any]],
    query: Optional[str] = None,
    sort_by: Optional[str] = None,
    sort_order: Optional[str] = None,
) -> list[Mapping[str, Any]]:
    results = list(products)
    term = (query or "").strip().lower()
    if term:
        results = [product for product in results if _matches(product, term)]
    if sort_by:
        descending = (sort_order or "").strip().lower() == "desc"
        results.sort(key=_sort_key(sort_by), reverse=descending)
    return results


__all__ = [
    "available_stock",
    "build_product",
    "compute_dashboard_stats",
    "derive_profit_percentage",
    "filter_products",
    "summarize_products",
    "to_read_model",
    "with_derived_fields",
]
