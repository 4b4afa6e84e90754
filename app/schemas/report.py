# schemas/report.py

from pydantic import BaseModel
from decimal import Decimal


class MetricsResponse(BaseModel):
    total_sales: int
    total_revenue: Decimal
    total_profit: Decimal
    total_units: int

    class Config:
        from_attributes = True
