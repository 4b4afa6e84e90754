# =========================================================
# DASHBOARD SESSIONS ROUTER
#
# One session per open dashboard. Holds the cart and the
# customer name until checkout; metrics and snapshots are
# refreshed after every successful action.
# =========================================================

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.rate_limiter import limiter
from app.database import get_db
from app.schemas.report import MetricsResponse
from app.schemas.sale import SaleResponse
from app.schemas.session import (
    CartEntryResponse,
    CartItemCreate,
    CartResponse,
    CheckoutRequest,
    CustomerUpdate,
    SessionResponse,
)
from app.services.dashboard import DashboardSession, sessions
from app.services.metrics import low_stock_products, recent_sales

router = APIRouter(prefix="/sessions", tags=["Dashboard"])


def _session_view(session: DashboardSession) -> SessionResponse:
    cart = CartResponse(
        entries=[
            CartEntryResponse(
                product_id=entry.product_id,
                product_name=entry.product.name,
                unit_price=entry.unit_price,
                quantity=entry.quantity,
                subtotal=entry.subtotal,
            )
            for entry in session.cart.entries
        ],
        total=session.cart.total,
    )

    return SessionResponse(
        session_id=session.session_id,
        customer_name=session.customer_name,
        cart=cart,
        metrics=MetricsResponse.model_validate(session.metrics),
        products=session.products,
        low_stock=low_stock_products(session.products, settings.LOW_STOCK_THRESHOLD),
        recent_sales=recent_sales(session.sales, settings.RECENT_SALES_LIMIT),
        pending_count=len(session.pending),
    )


# =========================================================
# OPEN / VIEW / CLOSE
# =========================================================
@router.post("", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def open_session(db: Session = Depends(get_db)):
    session = sessions.create()
    session.load(db)
    return _session_view(session)


@router.get("/{session_id}", response_model=SessionResponse)
def view_session(
    session_id: str,
    refresh: bool = False,
    db: Session = Depends(get_db),
):
    session = sessions.get(session_id)

    if refresh:
        session.refresh(db)

    return _session_view(session)


@router.delete("/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
def close_session(session_id: str):
    sessions.drop(session_id)
    return None


# =========================================================
# CART
# =========================================================
@router.post("/{session_id}/cart", response_model=SessionResponse)
def add_to_cart(session_id: str, item: CartItemCreate):
    session = sessions.get(session_id)
    session.add_to_cart(item.product_id, item.quantity)
    return _session_view(session)


@router.delete("/{session_id}/cart/{product_id}", response_model=SessionResponse)
def remove_from_cart(session_id: str, product_id: int):
    session = sessions.get(session_id)
    session.remove_from_cart(product_id)
    return _session_view(session)


@router.put("/{session_id}/customer", response_model=SessionResponse)
def set_customer(session_id: str, data: CustomerUpdate):
    session = sessions.get(session_id)
    session.set_customer_name(data.customer_name)
    return _session_view(session)


# =========================================================
# CHECKOUT
# =========================================================
@router.post(
    "/{session_id}/checkout",
    response_model=SaleResponse,
    status_code=status.HTTP_201_CREATED,
)
@limiter.limit(settings.CHECKOUT_RATE_LIMIT)
def checkout(
    request: Request,
    session_id: str,
    data: CheckoutRequest | None = None,
    db: Session = Depends(get_db),
):
    session = sessions.get(session_id)
    customer_name = data.customer_name if data is not None else None
    return session.submit_sale(db, customer_name)


# =========================================================
# FULFILLMENT
# =========================================================
@router.post("/{session_id}/sales/{sale_id}/fulfill", response_model=SaleResponse)
def fulfill_sale(
    session_id: str,
    sale_id: int,
    db: Session = Depends(get_db),
):
    session = sessions.get(session_id)
    return session.mark_fulfilled(db, sale_id)
