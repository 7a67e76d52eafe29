"""Domain errors raised by the order and inventory services.

Every error carries the HTTP status it maps to and a machine readable
``code``; the API layer turns them into JSON responses.
"""
from typing import Optional


class StoreError(Exception):
    status_code = 400
    code = "store_error"

    def __init__(self, message: str):
        self.message = message
        super().__init__(message)

    def context(self) -> dict:
        return {}

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": self.code, **self.context()}


class CartEmpty(StoreError):
    code = "cart_empty"

    def __init__(self):
        super().__init__("Cart is empty")


class CartItemNotFound(StoreError):
    status_code = 404
    code = "cart_item_not_found"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Item not in cart: {product_id}")

    def context(self):
        return {"product_id": self.product_id}


class InvalidQuantity(StoreError):
    code = "invalid_quantity"

    def __init__(self, quantity: int):
        self.quantity = quantity
        super().__init__("Quantity must be at least 1")

    def context(self):
        return {"quantity": self.quantity}


class InvalidPaymentMethod(StoreError):
    code = "invalid_payment_method"

    def __init__(self, payment_method):
        self.payment_method = payment_method
        super().__init__(f"Unsupported payment method: {payment_method}")

    def context(self):
        return {"payment_method": self.payment_method}


class ProductNotFound(StoreError):
    status_code = 404
    code = "product_not_found"

    def __init__(self, product_id: int):
        self.product_id = product_id
        super().__init__(f"Product not found: {product_id}")

    def context(self):
        return {"product_id": self.product_id}


class InsufficientStock(StoreError):
    status_code = 409
    code = "insufficient_stock"

    def __init__(
        self,
        product_id: int,
        requested: int,
        available: int,
        title: Optional[str] = None,
    ):
        self.product_id = product_id
        self.requested = requested
        self.available = available
        self.title = title
        name = title or f"product {product_id}"
        super().__init__(
            f"Insufficient stock for {name}. "
            f"Available: {available}, Requested: {requested}"
        )

    def context(self):
        return {
            "product_id": self.product_id,
            "requested": self.requested,
            "available": self.available,
        }


class OrderNotFound(StoreError):
    status_code = 404
    code = "order_not_found"

    def __init__(self, order_ref):
        self.order_ref = order_ref
        super().__init__("Order not found")

    def context(self):
        return {"order": self.order_ref}


class OrderCannotCancel(StoreError):
    code = "order_cannot_cancel"

    def __init__(self, current_status: str):
        self.current_status = current_status
        super().__init__(
            f"Order cannot be cancelled at this stage. Current status: {current_status}"
        )

    def context(self):
        return {"current_status": self.current_status}


class InvalidTransition(StoreError):
    code = "invalid_transition"

    def __init__(self, field: str, from_status: str, to_status: str):
        self.field = field
        self.from_status = from_status
        self.to_status = to_status
        super().__init__(f"Cannot change {field} from '{from_status}' to '{to_status}'")

    def context(self):
        return {"field": self.field, "from": self.from_status, "to": self.to_status}


class InternalError(StoreError):
    status_code = 500
    code = "internal_error"


class CheckoutTimeout(InternalError):
    status_code = 504
    code = "checkout_timeout"

    def __init__(self, timeout_seconds: float):
        self.timeout_seconds = timeout_seconds
        super().__init__(f"Checkout did not finish within {timeout_seconds}s")

    def context(self):
        return {"timeout_seconds": self.timeout_seconds}
