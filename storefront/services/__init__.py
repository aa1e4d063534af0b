# Storefront services

from .catalog import list_products, summarize_product
from .checkout import CheckoutOrchestrator, CheckoutResult, CheckoutStage
from .pricing import calculate_shipping, calculate_tax, discount_percentage, format_price

__all__ = [
    "list_products",
    "summarize_product",
    "CheckoutOrchestrator",
    "CheckoutResult",
    "CheckoutStage",
    "calculate_shipping",
    "calculate_tax",
    "discount_percentage",
    "format_price",
]
