# =========================================================
# DASHBOARD SESSION
#
# Per-UI-session state: the current product and sale
# snapshots, the metrics derived from them, the cart and the
# customer name form field.
#
# Every time a snapshot is replaced, metrics are re-derived
# from both snapshots. Sessions live in process memory only,
# are evicted after SESSION_IDLE_SECONDS without use, and
# a restart discards them along with their carts.
# =========================================================

import logging
import threading
import time
import uuid

from sqlalchemy.orm import Session

from app.core.config import settings
from app.core.exceptions import CartValidationError, SessionNotFoundError
from app.schemas.product import ProductResponse
from app.schemas.sale import SaleResponse
from app.services import checkout, store
from app.services.cart import Cart
from app.services.metrics import Metrics, compute_metrics, pending_sales

logger = logging.getLogger("app")


class DashboardSession:
    def __init__(self, session_id: str):
        self.session_id = session_id
        self.products: list[ProductResponse] = []
        self.sales: list[SaleResponse] = []
        self.metrics = Metrics()
        self.cart = Cart()
        self.customer_name = ""

    # -----------------------------------------------------
    # Snapshots
    # -----------------------------------------------------
    def _set_products(self, products) -> None:
        self.products = [ProductResponse.model_validate(p) for p in products]
        self.cart.refresh_products(self.products)
        self._recompute()

    def _set_sales(self, sales) -> None:
        self.sales = [SaleResponse.model_validate(s) for s in sales]
        self._recompute()

    def _recompute(self) -> None:
        self.metrics = compute_metrics(self.products, self.sales)

    def refresh_products(self, db: Session) -> None:
        self._set_products(store.fetch_products(db))

    def refresh_sales(self, db: Session) -> None:
        self._set_sales(store.fetch_sales(db))

    def load(self, db: Session) -> None:
        self.refresh_products(db)
        self.refresh_sales(db)

    refresh = load

    @property
    def pending(self) -> list[SaleResponse]:
        return pending_sales(self.sales)

    def find_product(self, product_id: int) -> ProductResponse | None:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    # -----------------------------------------------------
    # User actions
    # -----------------------------------------------------
    def add_to_cart(self, product_id: int, quantity: int):
        product = self.find_product(product_id)

        if product is None:
            raise CartValidationError("Selected product not found")

        return self.cart.add(product, quantity)

    def remove_from_cart(self, product_id: int) -> None:
        self.cart.remove(product_id)

    def set_customer_name(self, customer_name: str) -> None:
        self.customer_name = customer_name

    def submit_sale(self, db: Session, customer_name: str | None = None) -> SaleResponse:
        """
        Submit the cart as a sale.

        On success the cart and customer name are cleared and both
        snapshots re-fetched. On failure both are left as they were.
        """
        if customer_name is not None:
            self.customer_name = customer_name

        sale = checkout.submit_sale(db, self.cart, self.customer_name)
        created = SaleResponse.model_validate(sale)

        self.customer_name = ""
        self.load(db)

        return created

    def mark_fulfilled(self, db: Session, sale_id: int) -> SaleResponse:
        sale = checkout.mark_fulfilled(db, sale_id)
        updated = SaleResponse.model_validate(sale)

        self.refresh_sales(db)

        return updated


class SessionRegistry:
    """
    In-memory sessions keyed by id.

    A session not touched for `idle_seconds` is evicted on the next
    `create` or `get`, so abandoned dashboards do not pile up.
    """

    def __init__(self, idle_seconds: float, clock=time.monotonic):
        self.idle_seconds = idle_seconds
        self.clock = clock
        self._sessions: dict[str, DashboardSession] = {}
        self._last_seen: dict[str, float] = {}
        self._lock = threading.Lock()

    def _evict_idle(self, now: float) -> None:
        expired = [
            session_id
            for session_id, seen in self._last_seen.items()
            if now - seen > self.idle_seconds
        ]

        for session_id in expired:
            del self._sessions[session_id]
            del self._last_seen[session_id]

        if expired:
            logger.info(f"Evicted {len(expired)} idle dashboard session(s)")

    def create(self) -> DashboardSession:
        session = DashboardSession(uuid.uuid4().hex)

        with self._lock:
            now = self.clock()
            self._evict_idle(now)
            self._sessions[session.session_id] = session
            self._last_seen[session.session_id] = now

        logger.info(f"Dashboard session {session.session_id} opened")
        return session

    def get(self, session_id: str) -> DashboardSession:
        with self._lock:
            now = self.clock()
            self._evict_idle(now)
            session = self._sessions.get(session_id)
            if session is not None:
                self._last_seen[session_id] = now

        if session is None:
            raise SessionNotFoundError("Session not found")

        return session

    def drop(self, session_id: str) -> None:
        with self._lock:
            session = self._sessions.pop(session_id, None)
            self._last_seen.pop(session_id, None)

        if session is None:
            raise SessionNotFoundError("Session not found")

        logger.info(f"Dashboard session {session_id} closed")

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()
            self._last_seen.clear()

    def __len__(self) -> int:
        return len(self._sessions)


sessions = SessionRegistry(settings.SESSION_IDLE_SECONDS)
