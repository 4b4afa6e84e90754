# schemas/sale.py

from pydantic import BaseModel
from datetime import datetime
from typing import List, Literal
from decimal import Decimal

SaleStatus = Literal["not_fulfilled", "fulfilled"]


class SaleItemResponse(BaseModel):
    id: int
    product_id: int
    product_name: str | None = None
    quantity: int
    unit_price: Decimal
    subtotal: Decimal

    class Config:
        from_attributes = True


class SaleResponse(BaseModel):
    id: int
    customer_name: str
    status: SaleStatus
    total_amount: Decimal
    created_at: datetime | None = None
    items: List[SaleItemResponse]

    class Config:
        from_attributes = True
