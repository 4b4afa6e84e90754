# =========================================================
# SALE SUBMISSION & FULFILLMENT
#
# Submission writes the sale row and its line items inside
# ONE transaction: if any line item is rejected (for example
# on insufficient stock) the sale row is rolled back with it,
# so no zero-item sale is ever left behind.
#
# Fulfillment is a single one-way transition:
# not_fulfilled -> fulfilled.
# =========================================================

import logging

from sqlalchemy.orm import Session
from sqlalchemy.exc import SQLAlchemyError

from app.core.exceptions import (
    DataServiceError,
    POSError,
    SaleValidationError,
)
from app.models.sales import Sale, STATUS_FULFILLED, STATUS_NOT_FULFILLED
from app.services import store
from app.services.cart import Cart

logger = logging.getLogger("app")


def validate_submission(cart: Cart, customer_name: str | None) -> str:
    name = (customer_name or "").strip()

    if not name:
        raise SaleValidationError("Please enter a customer name")

    if cart.is_empty:
        raise SaleValidationError("Please add at least one product to the cart")

    return name


def submit_sale(db: Session, cart: Cart, customer_name: str | None) -> Sale:
    """
    Record the cart as a new not_fulfilled sale.

    Validation happens before touching the store. On success the cart
    is cleared; on any failure the transaction is rolled back, the cart
    is left untouched, and the error propagates.
    """
    name = validate_submission(cart, customer_name)

    entries = cart.entries
    total_amount = cart.total

    try:
        sale = store.insert_sale(
            db,
            customer_name=name,
            total_amount=total_amount,
            status=STATUS_NOT_FULFILLED,
        )

        store.insert_line_items(
            db,
            [
                {
                    "sale_id": sale.id,
                    "product_id": entry.product_id,
                    "quantity": entry.quantity,
                    "unit_price": entry.unit_price,
                    "subtotal": entry.subtotal,
                }
                for entry in entries
            ],
        )

        db.commit()

    except POSError as exc:
        db.rollback()
        logger.warning(f"Sale for {name} rejected: {exc.message}")
        raise

    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Unable to complete sale for {name}: {exc}")
        raise DataServiceError("Unable to complete sale") from exc

    logger.info(
        f"Sale {sale.id} recorded for {name}: "
        f"{len(entries)} line(s), total {total_amount}"
    )

    cart.clear()

    return store.fetch_sale(db, sale.id)


def mark_fulfilled(db: Session, sale_id: int) -> Sale:
    """
    Fulfill a pending sale.

    Raises SaleNotFoundError for an unknown id and SaleStatusError when
    the sale is already fulfilled, including when another request
    fulfilled it first.
    """
    try:
        store.update_sale_status(db, sale_id, STATUS_FULFILLED)
        db.commit()

    except POSError:
        db.rollback()
        raise

    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Unable to fulfill sale {sale_id}: {exc}")
        raise DataServiceError("Unable to update sale") from exc

    logger.info(f"Sale {sale_id} marked as fulfilled")

    return store.fetch_sale(db, sale_id)
