# Storefront Models

from .base import CamelModel
from .product import (
    Category,
    CatalogFilters,
    CatalogQuery,
    Pagination,
    Product,
    ProductCreateRequest,
    ProductImage,
    ProductListResponse,
    ProductSummary,
    ProductVariant,
    Review,
    SortBy,
)
from .cart import CartItem, NewCartItem, PersistedCart, CartSyncRequest, SyncedCart, CartResponse
from .checkout import (
    Address,
    CheckoutLine,
    CheckoutRequest,
    CheckoutResponse,
    Order,
    OrderItem,
    OrderStatus,
    OrderStatusUpdate,
    PaymentStatus,
    ReconciliationRecord,
)

__all__ = [
    "CamelModel",
    "Category",
    "CatalogFilters",
    "CatalogQuery",
    "Pagination",
    "Product",
    "ProductCreateRequest",
    "ProductImage",
    "ProductListResponse",
    "ProductSummary",
    "ProductVariant",
    "Review",
    "SortBy",
    "CartItem",
    "NewCartItem",
    "PersistedCart",
    "CartSyncRequest",
    "SyncedCart",
    "CartResponse",
    "Address",
    "CheckoutLine",
    "CheckoutRequest",
    "CheckoutResponse",
    "Order",
    "OrderItem",
    "OrderStatus",
    "OrderStatusUpdate",
    "PaymentStatus",
    "ReconciliationRecord",
]
