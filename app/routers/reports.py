# =========================================================
# REPORTS ROUTER
#
# Dashboard summary re-derived from the full current product
# and sale snapshots on every call.
# =========================================================

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.config import settings
from app.database import get_db
from app.schemas.product import ProductResponse
from app.schemas.report import MetricsResponse
from app.services import store
from app.services.metrics import compute_metrics, low_stock_products

router = APIRouter(prefix="/reports", tags=["Reports"])


@router.get("/summary", response_model=MetricsResponse)
def summary_report(db: Session = Depends(get_db)):
    products = store.fetch_products(db)
    sales = store.fetch_sales(db)

    return compute_metrics(products, sales)


@router.get("/low-stock", response_model=list[ProductResponse])
def low_stock_report(db: Session = Depends(get_db)):
    return low_stock_products(
        store.fetch_products(db),
        settings.LOW_STOCK_THRESHOLD,
    )
