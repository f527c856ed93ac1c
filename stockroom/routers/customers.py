from typing import List

from fastapi import APIRouter, Depends

from stockroom.database.store import RecordStore
from stockroom.dependencies import get_store, require_auth_if_strict
from stockroom.schemas.customer import CustomerIn, CustomerRead
from stockroom.services import customer_service

router = APIRouter(
    prefix="/api/customers",
    tags=["Customers"],
    dependencies=[Depends(require_auth_if_strict)],
)


@router.get("", response_model=List[CustomerRead])
def list_customers(store: RecordStore = Depends(get_store)):
    return customer_service.list_customers(store)


@router.post("", response_model=CustomerRead)
def create_customer(payload: CustomerIn, store: RecordStore = Depends(get_store)):
    return customer_service.create_customer(store, payload.model_dump(by_alias=True))


@router.put("/{customer_id}", response_model=CustomerRead)
def update_customer(
    customer_id: str,
    payload: CustomerIn,
    store: RecordStore = Depends(get_store),
):
    return customer_service.update_customer(
        store, customer_id, payload.model_dump(by_alias=True)
    )


@router.delete("/{customer_id}")
def delete_customer(customer_id: str, store: RecordStore = Depends(get_store)):
    customer_service.delete_customer(store, customer_id)
    return {"success": True}


__all__ = ["router"]
