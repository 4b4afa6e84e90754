from decimal import Decimal
from pydantic import BaseModel, Field
from datetime import datetime


class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1)

    price: Decimal = Field(
        ...,
        gt=0,
        lt=100_000_000,
        description="Unit price must be below 100 million"
    )

    cost: Decimal = Field(
        ...,
        ge=0,
        lt=100_000_000,
        description="Unit cost must be below 100 million"
    )

    stock: int = Field(0, ge=0)


class ProductUpdate(BaseModel):
    name: str | None = Field(None, min_length=1)
    price: Decimal | None = Field(None, gt=0, lt=100_000_000)
    cost: Decimal | None = Field(None, ge=0, lt=100_000_000)


class StockUpdate(BaseModel):
    stock: int = Field(..., ge=0)


class ProductResponse(BaseModel):
    id: int
    name: str
    price: Decimal
    cost: Decimal
    stock: int
    created_at: datetime | None = None
    updated_at: datetime | None = None

    class Config:
        from_attributes = True
