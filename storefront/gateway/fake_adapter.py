"""Configurable fake payment gateway for development and testing.

Simulates a hosted checkout provider without any external calls. It can be
configured at runtime to succeed or fail and records every call it receives.
"""

from uuid import uuid4

from ..errors import PaymentGatewayError
from .port import CheckoutSession, CheckoutSessionRequest, PaymentGateway


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, checkout_base_url: str = "https://checkout.example.test/pay") -> None:
        self.checkout_base_url = checkout_base_url.rstrip("/")
        self.should_succeed: bool = True
        self.failure_reason: str = "Provider unavailable"
        self.calls: list[CheckoutSessionRequest] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Provider unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_checkout_session(self, request: CheckoutSessionRequest) -> CheckoutSession:
        self.calls.append(request)

        if not self.should_succeed:
            raise PaymentGatewayError(self.failure_reason)

        session_id = f"cs_fake_{uuid4().hex[:16]}"
        return CheckoutSession(
            session_id=session_id,
            url=f"{self.checkout_base_url}/{session_id}",
        )
