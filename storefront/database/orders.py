"""Order storage for the storefront"""

import logging
import threading
import time
import uuid
from datetime import datetime
from typing import Optional

from ..core.config import settings
from ..errors import InvalidStatusTransition
from ..models.checkout import (
    ORDER_TRANSITIONS,
    PAYMENT_TRANSITIONS,
    Address,
    Order,
    OrderItem,
    OrderStatus,
    PaymentStatus,
    ReconciliationRecord,
)

logger = logging.getLogger(__name__)


class OrderNotFound(LookupError):
    def __init__(self, order_id: str):
        self.order_id = order_id
        super().__init__(f"Order {order_id} not found")


class OrderDatabase:
    """In-memory order storage"""

    def __init__(self, order_number_prefix: str = settings.order_number_prefix):
        self.order_number_prefix = order_number_prefix
        self._lock = threading.Lock()
        self.reset()

    def reset(self) -> None:
        self.orders: dict[str, Order] = {}
        self.reconciliation_log: list[ReconciliationRecord] = []
        self._last_order_millis = 0

    def next_order_number(self) -> str:
        """Unique order number built from the creation time in milliseconds"""
        with self._lock:
            millis = max(int(time.time() * 1000), self._last_order_millis + 1)
            self._last_order_millis = millis
        return f"{self.order_number_prefix}{millis}"

    def create_order(
        self,
        items: list[OrderItem],
        subtotal: float,
        shipping_amount: float,
        shipping_address: Address,
        billing_address: Address,
        order_number: Optional[str] = None,
        customer_notes: Optional[str] = None,
        user_id: Optional[str] = None,
        tax_amount: float = 0.0,
        discount_amount: float = 0.0,
    ) -> Order:
        """Persist a new order in PENDING / PENDING"""
        now = datetime.utcnow()

        order = Order(
            id=str(uuid.uuid4()),
            order_number=order_number or self.next_order_number(),
            user_id=user_id,
            status=OrderStatus.PENDING,
            payment_status=PaymentStatus.PENDING,
            items=[item.model_copy(deep=True) for item in items],
            subtotal=round(subtotal, 2),
            tax_amount=tax_amount,
            shipping_amount=shipping_amount,
            discount_amount=discount_amount,
            shipping_address=shipping_address.model_copy(deep=True),
            billing_address=billing_address.model_copy(deep=True),
            customer_notes=customer_notes,
            created_at=now,
            updated_at=now,
        )

        self.orders[order.id] = order
        return order

    def get_order(self, order_id: str) -> Optional[Order]:
        """Get an order by ID"""
        return self.orders.get(order_id)

    def _require(self, order_id: str) -> Order:
        order = self.get_order(order_id)
        if not order:
            raise OrderNotFound(order_id)
        return order

    def attach_payment_session(self, order_id: str, session_id: str) -> Order:
        """Record the external payment session on the order"""
        order = self._require(order_id)
        order.payment_session_id = session_id
        order.updated_at = datetime.utcnow()
        return order

    def update_status(self, order_id: str, status: OrderStatus) -> Order:
        """Move the order along its fulfilment lifecycle"""
        return self.update_statuses(order_id, status=status)

    def update_payment_status(self, order_id: str, payment_status: PaymentStatus) -> Order:
        """Move the order along its payment lifecycle"""
        return self.update_statuses(order_id, payment_status=payment_status)

    def update_statuses(
        self,
        order_id: str,
        status: Optional[OrderStatus] = None,
        payment_status: Optional[PaymentStatus] = None,
    ) -> Order:
        """
        Apply an order and a payment transition together.

        Both transitions are checked before either is applied, so a rejected
        update leaves the order unchanged.
        """
        order = self._require(order_id)
        if status is not None and status not in ORDER_TRANSITIONS[order.status]:
            raise InvalidStatusTransition("order status", order.status.value, status.value)
        if (
            payment_status is not None
            and payment_status not in PAYMENT_TRANSITIONS[order.payment_status]
        ):
            raise InvalidStatusTransition(
                "payment status", order.payment_status.value, payment_status.value
            )

        if status is not None:
            order.status = status
        if payment_status is not None:
            order.payment_status = payment_status
        order.updated_at = datetime.utcnow()
        return order

    def list_orders(self, limit: int = 50) -> list[Order]:
        """List recent orders"""
        orders = list(self.orders.values())
        orders.sort(key=lambda o: o.created_at, reverse=True)
        return orders[:limit]

    def flag_reconciliation_gap(self, order: Order, session_id: str) -> ReconciliationRecord:
        """Remember a payment session whose order does not reference it"""
        record = ReconciliationRecord(
            order_id=order.id,
            order_number=order.order_number,
            session_id=session_id,
            flagged_at=datetime.utcnow(),
        )
        self.reconciliation_log.append(record)
        return record


# Singleton instance
order_db = OrderDatabase()
