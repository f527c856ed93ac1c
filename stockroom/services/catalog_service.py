import logging
from dataclasses import dataclass

from stockroom.core.constants import CATEGORIES, PRODUCTS, VENDORS
from stockroom.core.errors import ConflictError, NotFoundError, ValidationError
from stockroom.database.store import RecordStore
from stockroom.services.validation import (
    clean_text,
    is_duplicate_reference,
    products_referencing,
    validate_reference_name,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ReferenceCatalog:
    """A named set of strings that products point at by value."""

    collection: str
    product_field: str
    label: str

    def entries(self, store: RecordStore) -> list[str]:
        return store.load(self.collection)

    def add(self, store: RecordStore, name) -> list[str]:
        errors = validate_reference_name(name, self.label)
        if errors:
            raise ValidationError(errors)
        name = clean_text(name)
        with store.edit(self.collection) as names:
            if is_duplicate_reference(name, names):
                raise ConflictError(f"{self.label} already exists")
            names.append(name)
        logger.info("Added %s %r", self.label.lower(), name)
        return names

    def remove(self, store: RecordStore, name: str) -> list[str]:
        with store.locked(self.collection, PRODUCTS):
            names = store.load(self.collection)
            if name not in names:
                raise NotFoundError(f"{self.label} not found")
            in_use = products_referencing(store.load(PRODUCTS), self.product_field, name)
            if in_use:
                raise ConflictError(
                    f"Cannot delete {self.label.lower()} that is used by products"
                )
            names.remove(name)
            store.save(self.collection, names)
        logger.info("Removed %s %r", self.label.lower(), name)
        return names


categories = ReferenceCatalog(collection=CATEGORIES, product_field="category", label="Category")
vendors = ReferenceCatalog(collection=VENDORS, product_field="vendor", label="Vendor")


__all__ = ["ReferenceCatalog", "categories", "vendors"]
