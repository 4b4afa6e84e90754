# =========================================================
# SHOPPING CART
#
# Transient selection of products awaiting submission as a
# sale. Never persisted: it lives only as long as the
# dashboard session holding it.
# =========================================================

from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable

from app.core.exceptions import CartValidationError


@dataclass
class CartEntry:
    product: object
    quantity: int

    @property
    def product_id(self) -> int:
        return self.product.id

    @property
    def unit_price(self) -> Decimal:
        return Decimal(str(self.product.price))

    @property
    def subtotal(self) -> Decimal:
        return self.unit_price * self.quantity


class Cart:
    def __init__(self):
        self._entries: dict[int, CartEntry] = {}

    @property
    def entries(self) -> list[CartEntry]:
        return list(self._entries.values())

    @property
    def is_empty(self) -> bool:
        return not self._entries

    @property
    def total(self) -> Decimal:
        return sum((entry.subtotal for entry in self._entries.values()), Decimal("0.00"))

    def quantity_of(self, product_id: int) -> int:
        entry = self._entries.get(product_id)
        return entry.quantity if entry else 0

    def add(self, product, quantity: int) -> CartEntry:
        """
        Add `quantity` units of `product`, merging with an existing entry.

        Rejects a non-positive quantity, or one that would take the entry
        past the product's current stock. A rejected add leaves the cart
        exactly as it was.
        """
        if quantity is None or quantity <= 0:
            raise CartValidationError("Quantity must be greater than zero")

        merged_quantity = self.quantity_of(product.id) + quantity

        if merged_quantity > product.stock:
            raise CartValidationError(
                f"Invalid quantity. Available stock: {product.stock}"
            )

        entry = self._entries.get(product.id)
        if entry is None:
            entry = CartEntry(product=product, quantity=merged_quantity)
            self._entries[product.id] = entry
        else:
            entry.product = product
            entry.quantity = merged_quantity

        return entry

    def remove(self, product_id: int) -> None:
        self._entries.pop(product_id, None)

    def clear(self) -> None:
        self._entries.clear()

    def refresh_products(self, products: Iterable) -> None:
        # Rebind to the latest snapshot so totals follow current prices
        latest = {product.id: product for product in products}

        for product_id in list(self._entries):
            product = latest.get(product_id)
            if product is None:
                del self._entries[product_id]
            else:
                self._entries[product_id].product = product
