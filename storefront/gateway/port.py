"""Payment gateway port (abstract interface).

Defines the contract every hosted-checkout adapter implements, so the
checkout flow can run against FakeGateway in development and tests and
against StripeGateway in production without code changes.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional


@dataclass(frozen=True)
class SessionLineItem:
    """One priced line on the hosted checkout page."""

    name: str
    unit_amount: int  # minor units (cents)
    quantity: int
    description: Optional[str] = None
    images: tuple[str, ...] = ()
    metadata: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class CheckoutSessionRequest:
    """Everything the provider needs to open a hosted checkout session."""

    line_items: tuple[SessionLineItem, ...]
    currency: str
    success_url: str
    cancel_url: str
    expires_at: datetime
    metadata: dict[str, str]
    allowed_countries: tuple[str, ...] = ()
    customer_email: Optional[str] = None
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class CheckoutSession:
    """Result of opening a hosted checkout session."""

    session_id: str
    url: str


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        """Open a hosted checkout session.

        Raises:
            PaymentGatewayError: the provider rejected the request or was unreachable
        """
        ...
