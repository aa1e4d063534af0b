"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway when the payment provider is configured as "stripe"
"""

from typing import Optional

from ..core.config import settings
from .fake_adapter import FakeGateway
from .port import CheckoutSession, CheckoutSessionRequest, PaymentGateway, SessionLineItem
from .stripe_adapter import StripeGateway

_current_gateway: Optional[PaymentGateway] = None


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, built from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        if settings.payment_provider == "stripe":
            if not settings.stripe_configured:
                raise RuntimeError("STRIPE_SECRET_KEY is not defined")
            _current_gateway = StripeGateway(api_key=settings.stripe_secret_key)
        else:
            _current_gateway = FakeGateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to the settings-selected gateway."""
    global _current_gateway
    _current_gateway = None


__all__ = [
    "CheckoutSession",
    "CheckoutSessionRequest",
    "FakeGateway",
    "PaymentGateway",
    "SessionLineItem",
    "StripeGateway",
    "get_gateway",
    "set_gateway",
    "reset_gateway",
]
