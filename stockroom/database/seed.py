from stockroom.config import Settings
from stockroom.core.constants import (
    CATEGORIES,
    COMPANY_SETTINGS,
    CUSTOMERS,
    DEFAULT_CATEGORIES,
    DEFAULT_COMPANY_SETTINGS,
    DEFAULT_VENDORS,
    PRODUCTS,
    VENDORS,
)
from stockroom.core.security import seed_admin_user
from stockroom.database.store import RecordStore


def initialize_storage(store: RecordStore, settings: Settings) -> None:
    """Create tables and write first-run defaults for untouched collections."""
    store.create_schema()
    store.seed(CATEGORIES, list(DEFAULT_CATEGORIES))
    store.seed(VENDORS, list(DEFAULT_VENDORS))
    store.seed(COMPANY_SETTINGS, [dict(DEFAULT_COMPANY_SETTINGS)])
    store.seed(PRODUCTS, [])
    store.seed(CUSTOMERS, [])
    seed_admin_user(store, settings)
