"""
Exception hierarchy for the POS dashboard.

Services raise these; routers translate them into HTTP responses. Catch
`POSError` to handle any failure raised by the service layer.
"""


class POSError(Exception):
    """Base exception for all POS dashboard errors."""

    #: Error code for programmatic handling by the front end.
    code: str = "pos_error"
    status_code: int = 500

    def __init__(self, message: str | None = None) -> None:
        if message is None:
            message = "An unspecified error occurred."
        self.message = message
        super().__init__(message)


# ---------------------------------------------------------------------------
# Validation: raised before any call to the store
# ---------------------------------------------------------------------------


class ValidationError(POSError):
    code: str = "validation_error"
    status_code: int = 400


class CartValidationError(ValidationError):
    """Raised when a cart entry is rejected (bad quantity, stock exceeded)."""

    code: str = "cart_validation_error"


class SaleValidationError(ValidationError):
    """Raised when a sale cannot be submitted (no customer, empty cart)."""

    code: str = "sale_validation_error"


# ---------------------------------------------------------------------------
# Lookups and state transitions
# ---------------------------------------------------------------------------


class NotFoundError(POSError):
    code: str = "not_found"
    status_code: int = 404


class ProductNotFoundError(NotFoundError):
    code: str = "product_not_found"


class SaleNotFoundError(NotFoundError):
    code: str = "sale_not_found"


class SessionNotFoundError(NotFoundError):
    code: str = "session_not_found"


class SaleStatusError(POSError):
    """Raised on an illegal fulfillment transition."""

    code: str = "sale_status_error"
    status_code: int = 409


# ---------------------------------------------------------------------------
# Data service
# ---------------------------------------------------------------------------


class DataServiceError(POSError):
    """
    Raised when the store rejects or fails an operation.

    The message carries the store's own message where one is available.
    """

    code: str = "data_service_error"
    status_code: int = 502


class InsufficientStockError(DataServiceError):
    """Raised when a line item insert would drive a product's stock negative."""

    code: str = "insufficient_stock"
    status_code: int = 409

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or "Insufficient stock for product")
