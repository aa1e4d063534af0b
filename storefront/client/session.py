"""Shopper session: the client shell that owns the cart and the API client"""

import logging
import uuid
from datetime import datetime
from typing import Optional

from ..models.checkout import Address, CheckoutResponse
from .api import StorefrontClient
from .cart_store import CartStore

logger = logging.getLogger(__name__)


class ShopperSession:
    """
    One shopper's client-side state.

    Constructed once at startup and handed to whatever needs the cart, rather
    than reaching for a global store.
    """

    def __init__(self, cart: CartStore, client: StorefrontClient):
        self.session_id = str(uuid.uuid4())
        self.created_at = datetime.utcnow()
        self.cart = cart
        self.client = client
        self.pending_order_id: Optional[str] = None

    def start(self) -> None:
        """Rehydrate persisted state"""
        self.cart.load()
        logger.info(
            f"Shopper session {self.session_id} started with "
            f"{self.cart.get_total_items()} items in cart"
        )

    async def checkout(
        self,
        shipping_address: Address,
        billing_address: Address,
        customer_notes: Optional[str] = None,
    ) -> CheckoutResponse:
        """
        Send the current cart to checkout.

        The cart is left as is; call complete_checkout() once the payment
        provider redirects back with success.
        """
        response = await self.client.checkout(
            items=self.cart.snapshot(),
            shipping_address=shipping_address,
            billing_address=billing_address,
            customer_notes=customer_notes,
        )
        self.pending_order_id = response.order_id
        return response

    def complete_checkout(self, order_id: str) -> bool:
        """Clear the cart after the provider confirmed the pending order"""
        if order_id != self.pending_order_id:
            logger.warning(f"Ignoring completion for unknown order {order_id}")
            return False
        self.cart.clear_cart()
        self.pending_order_id = None
        return True

    async def sync(self, user_id: str) -> Optional[dict]:
        """Push the cart to the server copy for this user"""
        return await self.client.sync_cart(user_id, self.cart.items)

    async def close(self) -> None:
        self.cart.close()
        await self.client.close()
