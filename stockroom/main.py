import logging
import secrets
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from stockroom.config import Settings, get_settings
from stockroom.core.constants import UPLOADS_URL_PREFIX
from stockroom.core.errors import InventoryError
from stockroom.core.logging import setup_logging
from stockroom.database import RecordStore, create_db_engine
from stockroom.database.seed import initialize_storage
from stockroom.routers import (
    auth_router,
    categories_router,
    customers_router,
    dashboard_router,
    health_router,
    products_router,
    settings_router,
    vendors_router,
)
from stockroom.services.image_store import ImageStore

logger = logging.getLogger(__name__)


def _cors_origins(value: str) -> list[str]:
    return [origin.strip() for origin in (value or "").split(",") if origin.strip()]


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(settings)

    store = RecordStore(create_db_engine(settings.DATABASE_URL))
    image_store = ImageStore(settings.UPLOAD_DIR)

    @asynccontextmanager
    async def lifespan(_app: FastAPI):
        image_store.ensure_dir()
        initialize_storage(store, settings)
        logger.info("%s ready (%s)", settings.APP_NAME, settings.ENVIRONMENT)
        try:
            yield
        finally:
            store.engine.dispose()

    app = FastAPI(title=settings.APP_NAME, lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    app.state.image_store = image_store

    origins = _cors_origins(settings.CORS_ORIGINS)
    if origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )
    app.add_middleware(
        SessionMiddleware,
        secret_key=settings.SESSION_SECRET or secrets.token_urlsafe(32),
        session_cookie=settings.SESSION_COOKIE,
        max_age=settings.SESSION_MAX_AGE_SECONDS,
        same_site="lax",
        https_only=settings.ENVIRONMENT.lower() != "local",
    )
    app.mount(
        UPLOADS_URL_PREFIX,
        StaticFiles(directory=settings.UPLOAD_DIR, check_dir=False),
        name="uploads",
    )

    @app.exception_handler(InventoryError)
    async def inventory_error_handler(_request: Request, exc: InventoryError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_payload())

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(dashboard_router)
    app.include_router(products_router)
    app.include_router(categories_router)
    app.include_router(vendors_router)
    app.include_router(customers_router)
    app.include_router(settings_router)
    return app


app = create_app()


__all__ = ["app", "create_app"]


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
