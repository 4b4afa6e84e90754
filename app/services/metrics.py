# =========================================================
# DASHBOARD METRICS
#
# Pure functions over in-memory snapshots of products and
# sales. Metrics are re-derived from scratch on every snapshot
# change, never updated incrementally.
#
# Profit uses each product's CURRENT cost, so changing a cost
# after a sale changes the reported profit of that sale.
# =========================================================

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Sequence

from app.models.sales import STATUS_NOT_FULFILLED


@dataclass(frozen=True)
class Metrics:
    total_sales: int = 0
    total_revenue: Decimal = Decimal("0.00")
    total_profit: Decimal = Decimal("0.00")
    total_units: int = 0


def _money(value) -> Decimal:
    if value is None:
        return Decimal("0.00")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def compute_metrics(products: Iterable, sales: Sequence) -> Metrics:
    """
    Summarize a sales snapshot against a product snapshot.

    A line item whose product is missing from `products` still counts
    toward units and revenue but adds nothing to profit.
    """
    cost_by_product = {product.id: _money(product.cost) for product in products}

    total_revenue = Decimal("0.00")
    total_profit = Decimal("0.00")
    total_units = 0

    for sale in sales:
        total_revenue += _money(sale.total_amount)

        for item in sale.items:
            total_units += item.quantity

            cost = cost_by_product.get(item.product_id)
            if cost is None:
                continue

            total_profit += (_money(item.unit_price) - cost) * item.quantity

    return Metrics(
        total_sales=len(sales),
        total_revenue=total_revenue,
        total_profit=total_profit,
        total_units=total_units,
    )


def pending_sales(sales: Iterable) -> list:
    return [sale for sale in sales if sale.status == STATUS_NOT_FULFILLED]


def recent_sales(sales: Sequence, limit: int) -> list:
    # Snapshots arrive newest first
    return list(sales[:limit])


def low_stock_products(products: Iterable, threshold: int) -> list:
    return [product for product in products if product.stock <= threshold]
