"""
Typed failures raised by the order core.

Services raise these and never build HTTP responses themselves; the API layer
maps them through app.core.exception_handlers.
"""

from typing import Any, Dict, Optional


class OrderError(Exception):
    """Base class for every failure the order core reports to callers."""

    code = "order_error"
    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class EmptyOrder(OrderError):
    code = "empty_order"
    status_code = 400

    def __init__(self):
        super().__init__("Order items are required")


class ProductNotFound(OrderError):
    code = "product_not_found"
    status_code = 404

    def __init__(self, product_id: int):
        super().__init__(
            f"Product {product_id} not found",
            details={"product_id": product_id},
        )
        self.product_id = product_id


class InsufficientStock(OrderError):
    code = "insufficient_stock"
    status_code = 409

    def __init__(self, product_id: int, requested: int, available: int):
        self.product_id = product_id
        self.requested = requested
        self.available = max(available, 0)
        super().__init__(
            f"Insufficient stock for product {product_id}: "
            f"requested {requested}, available {self.available}",
            details={
                "product_id": product_id,
                "requested": requested,
                "available": self.available,
                "shortfall": self.shortfall,
            },
        )

    @property
    def shortfall(self) -> int:
        return self.requested - self.available


class TransactionFailure(OrderError):
    """The store could not commit; retry the whole placement from scratch."""

    code = "transaction_failure"
    status_code = 503

    def __init__(self, message: str = "Order could not be committed; please retry"):
        super().__init__(message, details={"retryable": True})


class CartItemNotFound(OrderError):
    code = "cart_item_not_found"
    status_code = 404

    def __init__(self, item_id: int):
        super().__init__(f"Cart item {item_id} not found", details={"cart_item_id": item_id})
        self.item_id = item_id


class OrderNotFound(OrderError):
    code = "order_not_found"
    status_code = 404

    def __init__(self, order_id: int):
        super().__init__(f"Order {order_id} not found", details={"order_id": order_id})
        self.order_id = order_id


class InvalidStatusTransition(OrderError):
    code = "invalid_status_transition"
    status_code = 409

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move order from '{current}' to '{target}'",
            details={"current": current, "target": target},
        )
        self.current = current
        self.target = target
