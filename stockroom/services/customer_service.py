import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Mapping

from stockroom.core.constants import CUSTOMERS
from stockroom.core.errors import NotFoundError, ValidationError
from stockroom.database.store import RecordStore
from stockroom.services.validation import clean_customer

logger = logging.getLogger(__name__)


def _find_index(customers: list, customer_id: str) -> int:
    for index, customer in enumerate(customers):
        if str(customer.get("id")) == str(customer_id):
            return index
    raise NotFoundError("Customer not found")


def _checked(raw: Mapping[str, Any]) -> dict:
    values, errors = clean_customer(raw)
    if errors:
        raise ValidationError(errors)
    return values


def list_customers(store: RecordStore) -> list[dict]:
    return store.load(CUSTOMERS)


def create_customer(store: RecordStore, raw: Mapping[str, Any]) -> dict:
    values = _checked(raw)
    customer = {
        "id": uuid.uuid4().hex,
        **values,
        "createdAt": datetime.now(timezone.utc).isoformat(),
        "updatedAt": None,
    }
    with store.edit(CUSTOMERS) as customers:
        customers.append(customer)
    logger.info("Created customer %s", customer["id"])
    return customer


def update_customer(store: RecordStore, customer_id: str, raw: Mapping[str, Any]) -> dict:
    values = _checked(raw)
    with store.edit(CUSTOMERS) as customers:
        index = _find_index(customers, customer_id)
        customer = {
            **customers[index],
            **values,
            "updatedAt": datetime.now(timezone.utc).isoformat(),
        }
        customers[index] = customer
    return customer


def delete_customer(store: RecordStore, customer_id: str) -> None:
    with store.edit(CUSTOMERS) as customers:
        customers.pop(_find_index(customers, customer_id))
    logger.info("Deleted customer %s", customer_id)
