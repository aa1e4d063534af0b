"""Error taxonomy for cart, checkout and order handling"""

from typing import Optional


class StorefrontError(Exception):
    """Base class for storefront errors"""


class CapacityExceeded(StorefrontError):
    """Requested quantity is above the known stock ceiling of a cart entry"""

    def __init__(self, max_quantity: int):
        self.max_quantity = max_quantity
        super().__init__(f"Only {max_quantity} items available in stock")


class CheckoutError(StorefrontError):
    """Base class for failures of a checkout attempt"""


class EmptyCart(CheckoutError):
    def __init__(self):
        super().__init__("No items in cart")


class ProductUnavailable(CheckoutError):
    """One or more referenced products (or variants) are gone or inactive"""

    def __init__(self, message: str = "Some products are no longer available"):
        super().__init__(message)


class InsufficientStock(CheckoutError):
    def __init__(self, product_name: str):
        self.product_name = product_name
        super().__init__(f"Insufficient stock for {product_name}")


class CheckoutSessionFailed(CheckoutError):
    """The payment provider could not open a session; the order is an orphaned draft"""

    def __init__(self, order_id: str, reason: Optional[str] = None):
        self.order_id = order_id
        self.reason = reason
        super().__init__(f"Failed to create checkout session for order {order_id}")


class ReconciliationGap(CheckoutError):
    """A payment session was opened but the order could not be linked to it"""

    def __init__(self, order_id: str, session_id: str):
        self.order_id = order_id
        self.session_id = session_id
        super().__init__(
            f"Payment session {session_id} opened but order {order_id} was not linked"
        )


class InvalidStatusTransition(StorefrontError):
    def __init__(self, kind: str, current: str, target: str):
        self.kind = kind
        self.current = current
        self.target = target
        super().__init__(f"Cannot move {kind} from {current} to {target}")


class DuplicateProduct(StorefrontError):
    """A product with the same slug or sku already exists"""


class PaymentGatewayError(StorefrontError):
    """Raised by gateway adapters when the provider call fails"""
