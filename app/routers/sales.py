# =========================================================
# SALES ROUTER
#
# - List sales newest first, optionally only pending ones
# - Fetch a single sale with its line items
# - Mark a pending sale as fulfilled (one-way)
#
# Sales are created through a dashboard session checkout
# (see routers/sessions.py).
# =========================================================

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from app.database import get_db
from app.schemas.sale import SaleResponse, SaleStatus
from app.services import checkout, store

router = APIRouter(prefix="/sales", tags=["Sales"])


# =========================================================
# LIST SALES
# =========================================================
@router.get("", response_model=list[SaleResponse])
def list_sales(
    db: Session = Depends(get_db),
    status: SaleStatus | None = Query(None),
    limit: int | None = Query(None, ge=1, le=500),
):
    return store.fetch_sales(db, status=status, limit=limit)


# =========================================================
# GET SINGLE SALE
# =========================================================
@router.get("/{sale_id}", response_model=SaleResponse)
def get_sale(
    sale_id: int,
    db: Session = Depends(get_db),
):
    return store.fetch_sale(db, sale_id)


# =========================================================
# FULFILL SALE
# =========================================================
@router.post("/{sale_id}/fulfill", response_model=SaleResponse)
def fulfill_sale(
    sale_id: int,
    db: Session = Depends(get_db),
):
    return checkout.mark_fulfilled(db, sale_id)
