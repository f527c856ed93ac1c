from fastapi import APIRouter, Depends

from stockroom.database.store import RecordStore
from stockroom.dependencies import get_store, require_auth
from stockroom.schemas.product import DashboardStats
from stockroom.services.product_service import dashboard_stats

router = APIRouter(prefix="/api/dashboard", tags=["Dashboard"])


@router.get("/stats", response_model=DashboardStats)
def get_dashboard_stats(
    _auth=Depends(require_auth),
    store: RecordStore = Depends(get_store),
):
    return dashboard_stats(store)


__all__ = ["router"]
