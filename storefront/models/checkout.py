"""Checkout and order models for the storefront"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional

from pydantic import Field, computed_field

from .base import CamelModel


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    CONFIRMED = "CONFIRMED"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"
    REFUNDED = "REFUNDED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


ORDER_TRANSITIONS: dict[OrderStatus, set[OrderStatus]] = {
    OrderStatus.PENDING: {OrderStatus.CONFIRMED, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.CONFIRMED: {OrderStatus.PROCESSING, OrderStatus.CANCELLED, OrderStatus.REFUNDED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),
    OrderStatus.CANCELLED: set(),
    OrderStatus.REFUNDED: set(),
}

PAYMENT_TRANSITIONS: dict[PaymentStatus, set[PaymentStatus]] = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.FAILED: set(),
    PaymentStatus.REFUNDED: set(),
}


class Address(CamelModel):
    """Postal address captured at checkout"""
    name: str
    street: str
    city: str
    state: str
    postal_code: str
    country: str = "US"
    phone: Optional[str] = None


class CheckoutLine(CamelModel):
    """One cart line as submitted to checkout"""
    product_id: str
    variant_id: Optional[str] = None
    quantity: int = Field(gt=0)
    size: Optional[str] = None
    color: Optional[str] = None
    customizations: Optional[dict[str, Any]] = None


class CheckoutRequest(CamelModel):
    """Request to checkout"""
    items: list[CheckoutLine] = []
    shipping_address: Address
    billing_address: Address
    customer_notes: Optional[str] = None
    # Filled from the authenticated session when there is one
    user_id: Optional[str] = None
    customer_email: Optional[str] = None


class CheckoutResponse(CamelModel):
    """Redirect data for the hosted payment page"""
    session_id: str
    url: str
    order_id: str


class OrderItem(CamelModel):
    """Frozen snapshot of a purchased line"""
    product_id: str
    variant_id: Optional[str] = None
    quantity: int
    unit_price: float
    total_price: float
    product_name: str
    product_image: Optional[str] = None
    product_sku: str
    size: Optional[str] = None
    color: Optional[str] = None
    customizations: Optional[dict[str, Any]] = None


class Order(CamelModel):
    """Persisted order"""
    id: str
    order_number: str
    user_id: Optional[str] = None
    status: OrderStatus = OrderStatus.PENDING
    payment_status: PaymentStatus = PaymentStatus.PENDING
    items: list[OrderItem]
    subtotal: float
    tax_amount: float = 0.0
    shipping_amount: float = 0.0
    discount_amount: float = 0.0
    currency: str = "USD"
    shipping_address: Address
    billing_address: Address
    customer_notes: Optional[str] = None
    payment_session_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    @computed_field(alias="totalAmount")
    @property
    def total_amount(self) -> float:
        return round(
            self.subtotal + self.tax_amount + self.shipping_amount - self.discount_amount, 2
        )


class OrderStatusUpdate(CamelModel):
    """Operator request to move an order along its lifecycle"""
    status: Optional[OrderStatus] = None
    payment_status: Optional[PaymentStatus] = None


class ReconciliationRecord(CamelModel):
    """Payment session that could not be linked to its order"""
    order_id: str
    order_number: str
    session_id: str
    flagged_at: datetime
