"""Server-side copies of client carts"""

from datetime import datetime
from typing import Optional

from ..models.cart import CartItem, SyncedCart


class CartDatabase:
    """In-memory storage of carts synced from clients, keyed by user"""

    def __init__(self):
        self.carts: dict[str, SyncedCart] = {}

    def save_cart(self, user_id: str, items: list[CartItem]) -> SyncedCart:
        """Replace the stored copy of a user's cart"""
        cart = SyncedCart(
            user_id=user_id,
            items=[item.model_copy(deep=True) for item in items],
            synced_at=datetime.utcnow(),
        )
        self._recalculate_totals(cart)
        self.carts[user_id] = cart
        return cart

    def get_cart(self, user_id: str) -> Optional[SyncedCart]:
        """Get a user's synced cart"""
        return self.carts.get(user_id)

    def delete_cart(self, user_id: str) -> bool:
        """Delete a user's synced cart"""
        if user_id in self.carts:
            del self.carts[user_id]
            return True
        return False

    def reset(self) -> None:
        self.carts = {}

    def _recalculate_totals(self, cart: SyncedCart) -> None:
        """Recalculate cart totals"""
        cart.total_items = sum(item.quantity for item in cart.items)
        cart.subtotal = round(sum(item.price * item.quantity for item in cart.items), 2)


# Singleton instance
cart_db = CartDatabase()
