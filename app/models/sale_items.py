# models/sale_items.py

from sqlalchemy import CheckConstraint, Column, Integer, ForeignKey, Numeric, DateTime, event, select, update
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base
from app.core.exceptions import InsufficientStockError, ProductNotFoundError
from app.models.products import Product


class SaleItem(Base):
    __tablename__ = "sale_items"

    id = Column(Integer, primary_key=True, index=True)

    sale_id = Column(Integer, ForeignKey("sales.id", ondelete="CASCADE"), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey("products.id"), nullable=False, index=True)

    quantity = Column(Integer, nullable=False)
    unit_price = Column(Numeric(10, 2), nullable=False)
    subtotal = Column(Numeric(10, 2), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    sale = relationship("Sale", back_populates="items")
    product = relationship("Product")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_sale_item_quantity_positive"),
    )

    @property
    def product_name(self):
        return self.product.name if self.product is not None else None


# =========================================================
# STOCK DECREMENT ON LINE ITEM INSERT
#
# Runs on the flushing connection, inside the same transaction
# as the line item row. The guarded UPDATE touches nothing when
# stock is short, so a rejected insert never decrements stock.
# =========================================================
@event.listens_for(SaleItem, "before_insert")
def decrement_stock_on_sale_item(mapper, connection, target):
    products = Product.__table__

    result = connection.execute(
        update(products)
        .where(
            products.c.id == target.product_id,
            products.c.stock >= target.quantity,
        )
        .values(
            stock=products.c.stock - target.quantity,
            updated_at=func.now(),
        )
    )

    if result.rowcount != 1:
        exists = connection.execute(
            select(products.c.id).where(products.c.id == target.product_id)
        ).first()

        if exists is None:
            raise ProductNotFoundError(f"Product {target.product_id} not found")

        raise InsufficientStockError()
