from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from stockroom.schemas.base import CamelModel


class ProductBase(CamelModel):
    product_code: str = ""
    name: str
    category: str
    vendor: str
    buying_price: float
    selling_price: float
    quantity: int
    sold: int = 0
    image: Optional[str] = None


class ProductRead(ProductBase):
    id: str
    profit_percentage: float
    available_stock: int
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DashboardStats(CamelModel):
    total_products: int = 0
    total_stock_quantity: int = 0
    total_vendors: int = 0
    low_stock_alerts: int = 0
    total_value: float = 0.0
    total_sold: int = 0
    total_sold_profit: float = 0.0
    categories: Dict[str, int] = Field(default_factory=dict)


class ProductSummary(CamelModel):
    total_products: int = 0
    total_value: float = 0.0
    total_sold: int = 0
    total_profit: float = 0.0
    average_profit_percentage: float = 0.0


class ImportResult(CamelModel):
    success: bool = True
    imported_count: int
    skipped_count: int = 0
    errors: List[str] = Field(default_factory=list)
