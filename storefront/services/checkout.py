"""
Checkout orchestration

Validates a cart snapshot against live inventory, records a pending order,
opens a hosted payment session and links the session back to the order.

Stages of one attempt:
    RECEIVED -> VALIDATED -> ORDER_CREATED -> PAYMENT_SESSION_OPENED -> LINKED

Every failure returns immediately. Nothing is written before ORDER_CREATED;
from there on a PENDING order is kept as an auditable record even when the
payment provider or the link-back step fails.
"""

import json
import logging
from collections import defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from ..core.config import Settings, settings as default_settings
from ..database.orders import OrderDatabase
from ..database.products import ProductDatabase
from ..errors import (
    CheckoutSessionFailed,
    EmptyCart,
    InsufficientStock,
    PaymentGatewayError,
    ProductUnavailable,
    ReconciliationGap,
)
from ..gateway.port import CheckoutSessionRequest, PaymentGateway, SessionLineItem
from ..models.checkout import CheckoutLine, CheckoutRequest, Order, OrderItem
from ..models.product import Product, ProductVariant
from .pricing import calculate_shipping, to_cents

logger = logging.getLogger(__name__)

StockLine = tuple[str, Optional[str], int]


class CheckoutStage(str, Enum):
    RECEIVED = "received"
    VALIDATED = "validated"
    ORDER_CREATED = "order_created"
    PAYMENT_SESSION_OPENED = "payment_session_opened"
    LINKED = "linked"


@dataclass
class ValidatedLine:
    """Cart line resolved against the authoritative catalog"""
    line: CheckoutLine
    product: Product
    variant: Optional[ProductVariant]
    unit_price: float

    @property
    def total_price(self) -> float:
        return round(self.unit_price * self.line.quantity, 2)

    @property
    def sku(self) -> str:
        return self.variant.sku if self.variant else self.product.sku

    def to_order_item(self) -> OrderItem:
        return OrderItem(
            product_id=self.product.id,
            variant_id=self.variant.id if self.variant else None,
            quantity=self.line.quantity,
            unit_price=self.unit_price,
            total_price=self.total_price,
            product_name=self.product.name,
            product_image=self.product.primary_image,
            product_sku=self.sku,
            size=self.line.size,
            color=self.line.color,
            customizations=self.line.customizations,
        )

    def to_session_item(self) -> SessionLineItem:
        image = self.product.primary_image
        return SessionLineItem(
            name=self.product.name,
            description=self.product.short_description,
            images=(image,) if image else (),
            unit_amount=to_cents(self.unit_price),
            quantity=self.line.quantity,
            metadata={
                "productId": self.product.id,
                "variantId": self.variant.id if self.variant else "",
                "sku": self.sku,
                "size": self.line.size or "",
                "color": self.line.color or "",
                "customizations": json.dumps(self.line.customizations or {}, sort_keys=True),
            },
        )


@dataclass
class ValidatedCart:
    lines: list[ValidatedLine]
    subtotal: float

    @property
    def stock_lines(self) -> list[StockLine]:
        return [
            (v.product.id, v.variant.id if v.variant else None, v.line.quantity)
            for v in self.lines
        ]


@dataclass(frozen=True)
class CheckoutResult:
    session_id: str
    url: str
    order_id: str
    order_number: str


class CheckoutOrchestrator:
    """Runs one checkout attempt from cart snapshot to payment redirect"""

    def __init__(
        self,
        products: ProductDatabase,
        orders: OrderDatabase,
        gateway: PaymentGateway,
        settings: Settings = default_settings,
    ):
        self.products = products
        self.orders = orders
        self.gateway = gateway
        self.settings = settings

    def checkout(self, request: CheckoutRequest) -> CheckoutResult:
        # RECEIVED
        if not request.items:
            raise EmptyCart()

        cart, reserved = self._validate_and_reserve(request.items)

        # ORDER_CREATED
        try:
            order = self._create_order(request, cart)
        except Exception:
            if reserved:
                self.products.release_stock(cart.stock_lines)
            raise
        self._log_stage(CheckoutStage.ORDER_CREATED, order)

        # PAYMENT_SESSION_OPENED
        try:
            session = self.gateway.create_checkout_session(
                self._session_request(request, cart, order)
            )
        except PaymentGatewayError as e:
            self._abandon_draft(order, cart, reserved, e)
            raise CheckoutSessionFailed(order.id, reason=str(e)) from e
        except Exception as e:
            self._abandon_draft(order, cart, reserved, e)
            raise
        self._log_stage(CheckoutStage.PAYMENT_SESSION_OPENED, order, session.session_id)

        # LINKED
        try:
            self.orders.attach_payment_session(order.id, session.session_id)
        except Exception as e:
            logger.error(
                f"ReconciliationGap: payment session {session.session_id} is not recorded on "
                f"order {order.order_number} ({order.id}): {e}"
            )
            self.orders.flag_reconciliation_gap(order, session.session_id)
            raise ReconciliationGap(order.id, session.session_id) from e
        self._log_stage(CheckoutStage.LINKED, order, session.session_id)

        return CheckoutResult(
            session_id=session.session_id,
            url=session.url,
            order_id=order.id,
            order_number=order.order_number,
        )

    def _abandon_draft(
        self, order: Order, cart: ValidatedCart, reserved: bool, error: Exception
    ) -> None:
        """The order stays PENDING for audit; its stock goes back on sale"""
        logger.error(
            f"Orphaned draft order {order.order_number} ({order.id}): "
            f"payment session could not be opened: {error!r}"
        )
        if reserved:
            self.products.release_stock(cart.stock_lines)

    def validate(self, items: list[CheckoutLine]) -> ValidatedCart:
        """Resolve prices and check stock for every line; all-or-nothing"""
        product_ids = {line.product_id for line in items}
        products = self.products.find_active(product_ids)

        if len(products) < len(product_ids):
            raise ProductUnavailable()

        lines = []
        requested: dict[tuple[str, Optional[str]], int] = defaultdict(int)
        subtotal = 0.0

        for line in items:
            product = products[line.product_id]

            variant = None
            if line.variant_id:
                variant = product.get_variant(line.variant_id)
                if not variant or not variant.is_active:
                    raise ProductUnavailable(f"Product variant {line.variant_id} not found")

            price = variant.price if variant else product.effective_price
            stock = variant.stock_quantity if variant else product.stock_quantity

            # Lines for the same product/variant draw on the same stock
            bucket = (product.id, variant.id if variant else None)
            requested[bucket] += line.quantity
            if requested[bucket] > stock:
                raise InsufficientStock(product.name)

            subtotal += price * line.quantity
            lines.append(ValidatedLine(line=line, product=product, variant=variant, unit_price=price))

        return ValidatedCart(lines=lines, subtotal=round(subtotal, 2))

    def _validate_and_reserve(self, items: list[CheckoutLine]) -> tuple[ValidatedCart, bool]:
        if not self.settings.reserve_stock_on_checkout:
            cart = self.validate(items)
            logger.debug(f"Checkout {CheckoutStage.VALIDATED.value}: subtotal={cart.subtotal}")
            return cart, False

        # A lost race on the conditional decrement is retried from validation once
        for attempt in range(2):
            cart = self.validate(items)
            logger.debug(f"Checkout {CheckoutStage.VALIDATED.value}: subtotal={cart.subtotal}")
            if self.products.reserve_stock(cart.stock_lines):
                return cart, True
            logger.warning(f"Stock reservation lost a race (attempt {attempt + 1})")

        raise InsufficientStock(self._short_line(cart).product.name)

    def _short_line(self, cart: ValidatedCart) -> ValidatedLine:
        for validated in cart.lines:
            current = self.products.get_product(validated.product.id)
            target = current.get_variant(validated.variant.id) if validated.variant else current
            if target is None or target.stock_quantity < validated.line.quantity:
                return validated
        return cart.lines[0]

    def _create_order(self, request: CheckoutRequest, cart: ValidatedCart) -> Order:
        return self.orders.create_order(
            items=[line.to_order_item() for line in cart.lines],
            subtotal=cart.subtotal,
            shipping_amount=calculate_shipping(cart.subtotal),
            # Tax is settled by the payment provider's tax service
            tax_amount=0.0,
            shipping_address=request.shipping_address,
            billing_address=request.billing_address,
            customer_notes=request.customer_notes,
            user_id=request.user_id,
        )

    def _session_request(
        self,
        request: CheckoutRequest,
        cart: ValidatedCart,
        order: Order,
    ) -> CheckoutSessionRequest:
        line_items = [line.to_session_item() for line in cart.lines]
        if order.shipping_amount > 0:
            line_items.append(
                SessionLineItem(
                    name="Shipping",
                    description="Standard shipping",
                    unit_amount=to_cents(order.shipping_amount),
                    quantity=1,
                )
            )

        base_url = self.settings.public_base_url.rstrip("/")
        metadata = {"orderId": order.id, "orderNumber": order.order_number}

        return CheckoutSessionRequest(
            line_items=tuple(line_items),
            currency=self.settings.currency,
            success_url=(
                f"{base_url}/checkout/success?session_id={{CHECKOUT_SESSION_ID}}&order={order.id}"
            ),
            cancel_url=f"{base_url}/cart",
            expires_at=datetime.now(timezone.utc)
            + timedelta(minutes=self.settings.checkout_session_ttl_minutes),
            metadata=metadata,
            allowed_countries=tuple(self.settings.allowed_shipping_countries),
            customer_email=request.customer_email,
            idempotency_key=order.id,
        )

    @staticmethod
    def _log_stage(stage: CheckoutStage, order: Order, session_id: Optional[str] = None) -> None:
        suffix = f" session={session_id}" if session_id else ""
        logger.info(f"Checkout {stage.value}: order={order.order_number}{suffix}")
