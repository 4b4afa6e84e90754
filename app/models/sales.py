# models/sales.py

from sqlalchemy import CheckConstraint, Column, Index, Integer, DateTime, Numeric, String
from sqlalchemy.sql import func
from sqlalchemy.orm import relationship

from app.database import Base

STATUS_NOT_FULFILLED = "not_fulfilled"
STATUS_FULFILLED = "fulfilled"

SALE_STATUSES = (STATUS_NOT_FULFILLED, STATUS_FULFILLED)


class Sale(Base):
    __tablename__ = "sales"

    id = Column(Integer, primary_key=True, index=True)

    customer_name = Column(String, nullable=False)
    status = Column(String, nullable=False, default=STATUS_NOT_FULFILLED)

    total_amount = Column(Numeric(10, 2), nullable=False)

    created_at = Column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    items = relationship(
        "SaleItem",
        back_populates="sale",
        cascade="all, delete-orphan",
        order_by="SaleItem.id",
    )

    __table_args__ = (
        Index("ix_sales_status_created", "status", "created_at"),
        CheckConstraint(
            "status IN ('not_fulfilled', 'fulfilled')",
            name="ck_sale_status_valid",
        ),
    )
