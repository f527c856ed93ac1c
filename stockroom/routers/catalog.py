from typing import List, Type

from fastapi import APIRouter, Depends

from stockroom.database.store import RecordStore
from stockroom.dependencies import get_store, require_auth_if_strict
from stockroom.schemas.base import CamelModel
from stockroom.schemas.catalog import CategoryList, ReferenceNameIn, VendorList
from stockroom.services import catalog_service
from stockroom.services.catalog_service import ReferenceCatalog


def build_catalog_router(
    catalog: ReferenceCatalog,
    prefix: str,
    list_key: str,
    result_model: Type[CamelModel],
) -> APIRouter:
    """CRUD routes for one reference set (categories or vendors)."""
    router = APIRouter(
        prefix=prefix,
        tags=[catalog.label],
        dependencies=[Depends(require_auth_if_strict)],
    )

    @router.get("", response_model=List[str])
    def list_names(store: RecordStore = Depends(get_store)):
        return catalog.entries(store)

    @router.post("", response_model=result_model)
    def add_name(payload: ReferenceNameIn, store: RecordStore = Depends(get_store)):
        return {"success": True, list_key: catalog.add(store, payload.name)}

    @router.delete("/{name:path}", response_model=result_model)
    def remove_name(name: str, store: RecordStore = Depends(get_store)):
        return {"success": True, list_key: catalog.remove(store, name)}

    return router


categories_router = build_catalog_router(
    catalog_service.categories, "/api/categories", "categories", CategoryList
)
vendors_router = build_catalog_router(
    catalog_service.vendors, "/api/vendors", "vendors", VendorList
)


__all__ = ["build_catalog_router", "categories_router", "vendors_router"]
