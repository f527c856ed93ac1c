from stockroom.services.catalog_service import ReferenceCatalog
from stockroom.services.image_store import ImageStore
from stockroom.services.product_service import bulk_create_products, import_products

__all__ = [
    "ImageStore",
    "ReferenceCatalog",
    "bulk_create_products",
    "import_products",
]
