# Client-side cart state and API access

from .api import StorefrontClient
from .cart_store import CartNotice, CartStore
from .session import ShopperSession
from .storage import CartStorage, FileStorage, MemoryStorage

__all__ = [
    "StorefrontClient",
    "CartNotice",
    "CartStore",
    "ShopperSession",
    "CartStorage",
    "FileStorage",
    "MemoryStorage",
]
