# schemas/session.py

from pydantic import BaseModel, Field
from decimal import Decimal
from typing import List

from app.schemas.product import ProductResponse
from app.schemas.report import MetricsResponse
from app.schemas.sale import SaleResponse


class CartItemCreate(BaseModel):
    product_id: int
    quantity: int


class CustomerUpdate(BaseModel):
    customer_name: str = Field("", max_length=200)


class CheckoutRequest(BaseModel):
    # Falls back to the name already stored on the session
    customer_name: str | None = None


class CartEntryResponse(BaseModel):
    product_id: int
    product_name: str
    unit_price: Decimal
    quantity: int
    subtotal: Decimal


class CartResponse(BaseModel):
    entries: List[CartEntryResponse]
    total: Decimal


class SessionResponse(BaseModel):
    session_id: str
    customer_name: str
    cart: CartResponse
    metrics: MetricsResponse
    products: List[ProductResponse]
    low_stock: List[ProductResponse]
    recent_sales: List[SaleResponse]
    pending_count: int
