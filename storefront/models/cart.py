"""Cart models for the storefront"""

from datetime import datetime
from typing import Any, Optional

from pydantic import Field, model_validator

from .base import CamelModel


class NewCartItem(CamelModel):
    """Item handed to the cart before it has a local identity"""
    product_id: str
    variant_id: Optional[str] = None
    name: str
    image: str = ""
    price: float
    quantity: int
    max_quantity: int
    sku: str
    size: Optional[str] = None
    color: Optional[str] = None
    customizations: Optional[dict[str, Any]] = None


class CartItem(NewCartItem):
    """Item in a shopping cart"""
    id: str

    @model_validator(mode="after")
    def check_quantity(self) -> "CartItem":
        if not 1 <= self.quantity <= self.max_quantity:
            raise ValueError(
                f"Quantity {self.quantity} must be between 1 and {self.max_quantity}"
            )
        return self


class PersistedCartState(CamelModel):
    items: list[CartItem] = []


class PersistedCart(CamelModel):
    """Durable form of the client cart; only the items survive a reload"""
    state: PersistedCartState = Field(default_factory=PersistedCartState)
    version: int = 0


class CartSyncRequest(CamelModel):
    """Request to store a copy of a client cart on the server"""
    user_id: str = Field(min_length=1)
    items: list[CartItem]


class SyncedCart(CamelModel):
    """Server-side copy of a user's cart"""
    user_id: str
    items: list[CartItem] = []
    total_items: int = 0
    subtotal: float = 0.0
    currency: str = "USD"
    synced_at: datetime


class CartResponse(CamelModel):
    """Cart API response"""
    cart: SyncedCart
    message: Optional[str] = None
