"""Stripe payment gateway adapter.

Opens Stripe Checkout sessions with the stripe-python SDK. Order metadata is
attached to both the session and its payment intent so that payment
callbacks can locate the order even when the session id was never recorded
on it.
"""

import logging

import stripe

from ..errors import PaymentGatewayError
from .port import CheckoutSession, CheckoutSessionRequest, PaymentGateway

logger = logging.getLogger(__name__)


class StripeGateway(PaymentGateway):
    """Production Stripe Checkout adapter."""

    def __init__(self, api_key: str) -> None:
        self.api_key = api_key

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        params = {
            "payment_method_types": ["card"],
            "mode": "payment",
            "line_items": [
                {
                    "price_data": {
                        "currency": request.currency,
                        "product_data": self._product_data(item),
                        "unit_amount": item.unit_amount,
                    },
                    "quantity": item.quantity,
                }
                for item in request.line_items
            ],
            "success_url": request.success_url,
            "cancel_url": request.cancel_url,
            "metadata": request.metadata,
            "payment_intent_data": {"metadata": request.metadata},
            "billing_address_collection": "required",
            "expires_at": int(request.expires_at.timestamp()),
        }
        if request.allowed_countries:
            params["shipping_address_collection"] = {
                "allowed_countries": list(request.allowed_countries)
            }
        if request.customer_email:
            params["customer_email"] = request.customer_email

        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                idempotency_key=request.idempotency_key,
                **params,
            )
        except stripe.StripeError as e:
            logger.error(f"Stripe checkout session failed: {e.user_message or e}")
            raise PaymentGatewayError(str(e)) from e

        return CheckoutSession(session_id=session.id, url=session.url)

    @staticmethod
    def _product_data(item) -> dict:
        data = {"name": item.name}
        if item.description:
            data["description"] = item.description
        if item.images:
            data["images"] = list(item.images)
        if item.metadata:
            data["metadata"] = item.metadata
        return data
