from datetime import datetime
from typing import List, Optional, Union

from stockroom.schemas.base import CamelModel


class CustomerIn(CamelModel):
    name: Optional[str] = None
    address: Optional[str] = None
    mobile_number: Optional[str] = None
    product_codes: Optional[Union[List[str], str]] = None
    date: Optional[str] = None
    time: Optional[str] = None


class CustomerRead(CamelModel):
    id: str
    name: str
    address: str
    mobile_number: str
    product_codes: List[str]
    date: str
    time: str
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
