from stockroom.routers.auth import router as auth_router
from stockroom.routers.catalog import categories_router, vendors_router
from stockroom.routers.customers import router as customers_router
from stockroom.routers.dashboard import router as dashboard_router
from stockroom.routers.health import router as health_router
from stockroom.routers.products import router as products_router
from stockroom.routers.settings import router as settings_router

__all__ = [
    "auth_router",
    "categories_router",
    "customers_router",
    "dashboard_router",
    "health_router",
    "products_router",
    "settings_router",
    "vendors_router",
]
