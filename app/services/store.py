# =========================================================
# DATA ACCESS LAYER
#
# Every read and write the dashboard makes against the store.
# Writes only flush: the caller owns the transaction and
# decides when to commit or roll back.
#
# Stock is decremented by the store itself whenever a line
# item row is inserted (see models/sale_items.py).
# =========================================================

import logging

from sqlalchemy import update
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    DataServiceError,
    ProductNotFoundError,
    SaleNotFoundError,
    SaleStatusError,
)
from app.models.products import Product
from app.models.sales import Sale, SALE_STATUSES, STATUS_FULFILLED, STATUS_NOT_FULFILLED
from app.models.sale_items import SaleItem

logger = logging.getLogger("app")


def _store_message(exc: SQLAlchemyError, fallback: str) -> str:
    orig = getattr(exc, "orig", None)
    if orig is not None and str(orig):
        return str(orig)
    return fallback


# =========================================================
# READS
# =========================================================
def fetch_products(db: Session) -> list[Product]:
    try:
        return db.query(Product).order_by(Product.name.asc()).all()
    except SQLAlchemyError as exc:
        logger.error(f"Failed to fetch products: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to fetch products")) from exc


def fetch_product(db: Session, product_id: int) -> Product:
    try:
        product = db.query(Product).filter(Product.id == product_id).first()
    except SQLAlchemyError as exc:
        logger.error(f"Failed to fetch product {product_id}: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to fetch product")) from exc

    if not product:
        raise ProductNotFoundError("Product not found")

    return product


def find_product_by_name(db: Session, name: str, exclude_id: int | None = None) -> Product | None:
    try:
        query = db.query(Product).filter(Product.name == name)

        if exclude_id is not None:
            query = query.filter(Product.id != exclude_id)

        return query.first()
    except SQLAlchemyError as exc:
        logger.error(f"Failed to look up product {name!r}: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to fetch product")) from exc


def _sales_query(db: Session):
    return (
        db.query(Sale)
        .options(selectinload(Sale.items).joinedload(SaleItem.product))
    )


def fetch_sales(db: Session, status: str | None = None, limit: int | None = None) -> list[Sale]:
    try:
        query = _sales_query(db)

        if status is not None:
            query = query.filter(Sale.status == status)

        query = query.order_by(Sale.created_at.desc(), Sale.id.desc())

        if limit is not None:
            query = query.limit(limit)

        return query.all()
    except SQLAlchemyError as exc:
        logger.error(f"Failed to fetch sales: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to fetch sales")) from exc


def fetch_sale(db: Session, sale_id: int) -> Sale:
    try:
        sale = (
            _sales_query(db)
            .filter(Sale.id == sale_id)
            .populate_existing()
            .first()
        )
    except SQLAlchemyError as exc:
        logger.error(f"Failed to fetch sale {sale_id}: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to fetch sale")) from exc

    if not sale:
        raise SaleNotFoundError("Sale not found")

    return sale


# =========================================================
# WRITES
# =========================================================
def insert_sale(
    db: Session,
    customer_name: str,
    total_amount,
    status: str = STATUS_NOT_FULFILLED,
) -> Sale:
    sale = Sale(
        customer_name=customer_name,
        total_amount=total_amount,
        status=status,
    )

    try:
        db.add(sale)
        db.flush()
    except SQLAlchemyError as exc:
        logger.error(f"Failed to insert sale: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to record sale")) from exc

    return sale


def insert_line_items(db: Session, rows: list[dict]) -> list[SaleItem]:
    """
    Insert line items given as dicts of
    sale_id, product_id, quantity, unit_price and subtotal.

    Raises InsufficientStockError (from the stock rule) when any row
    would take its product below zero.
    """
    items = [
        SaleItem(
            sale_id=row["sale_id"],
            product_id=row["product_id"],
            quantity=row["quantity"],
            unit_price=row["unit_price"],
            subtotal=row["subtotal"],
        )
        for row in rows
    ]

    try:
        db.add_all(items)
        db.flush()
    except SQLAlchemyError as exc:
        logger.error(f"Failed to insert line items: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to record sale items")) from exc

    return items


def update_sale_status(db: Session, sale_id: int, status: str) -> Sale:
    """
    Move a sale from not_fulfilled to `status`.

    The UPDATE only matches a row still in not_fulfilled, so of two
    interleaved requests exactly one performs the transition; the
    other gets SaleStatusError.
    """
    if status not in SALE_STATUSES:
        raise DataServiceError(f"Invalid sale status: {status}")

    if status != STATUS_FULFILLED:
        raise SaleStatusError("A sale cannot return to not_fulfilled")

    try:
        result = db.execute(
            update(Sale)
            .where(
                Sale.id == sale_id,
                Sale.status == STATUS_NOT_FULFILLED,
            )
            .values(status=status)
            .execution_options(synchronize_session=False)
        )
    except SQLAlchemyError as exc:
        logger.error(f"Failed to update sale {sale_id}: {exc}")
        raise DataServiceError(_store_message(exc, "Failed to update sale")) from exc

    if result.rowcount != 1:
        # Raises SaleNotFoundError when there is no such sale
        fetch_sale(db, sale_id)
        raise SaleStatusError("Sale is already fulfilled")

    return fetch_sale(db, sale_id)
