"""Pricing helpers shared by the cart display and checkout"""

from typing import Any, Iterable, Mapping, Optional

# Simplified estimate for display only; charged tax comes from an external service
TAX_RATES: dict[str, float] = {
    "CA": 0.0875,  # California
    "NY": 0.08,  # New York
    "TX": 0.0625,  # Texas
    "FL": 0.06,  # Florida
    "WA": 0.065,  # Washington
}
DEFAULT_TAX_RATE = 0.07


def effective_price(base_price: float, sale_price: Optional[float]) -> float:
    """Sale price if present, else base price"""
    return sale_price if sale_price is not None else base_price


def discount_percentage(base_price: float, sale_price: Optional[float]) -> int:
    """Whole-number discount of the sale price against the base price"""
    if sale_price is None or base_price <= 0:
        return 0
    return round((base_price - sale_price) / base_price * 100)


def average_rating(ratings: Iterable[int]) -> float:
    """Mean rating rounded to one decimal, 0 when there are no ratings"""
    ratings = list(ratings)
    if not ratings:
        return 0
    return round(sum(ratings) / len(ratings), 1)


def calculate_shipping(subtotal: float) -> float:
    """Tiered shipping cost for an order subtotal"""
    # Free shipping over $150
    if subtotal >= 150:
        return 0.0

    if subtotal >= 100:
        return 9.99
    if subtotal >= 50:
        return 14.99

    return 19.99


def calculate_tax(subtotal: float, state: str = "CA") -> float:
    """Estimated sales tax for display"""
    rate = TAX_RATES.get(state.upper(), DEFAULT_TAX_RATE)
    return subtotal * rate


def to_cents(amount: float) -> int:
    return int(round(amount * 100))


def format_price(price: float) -> str:
    """Format an amount as US dollars, e.g. $1,234.50"""
    sign = "-" if price < 0 else ""
    return f"{sign}${abs(price):,.2f}"


def validate_cart_item(item: Mapping[str, Any]) -> list[str]:
    """
    Check a cart item for the fields the cart cannot work without.

    Returns:
        List of human-readable problems, empty when the item is usable
    """
    errors = []

    if not item.get("product_id"):
        errors.append("Product ID is required")
    if not item.get("name"):
        errors.append("Product name is required")
    price = item.get("price")
    if not price or price <= 0:
        errors.append("Valid price is required")
    quantity = item.get("quantity")
    if not quantity or quantity <= 0:
        errors.append("Valid quantity is required")
    max_quantity = item.get("max_quantity")
    if max_quantity and quantity and quantity > max_quantity:
        errors.append(f"Quantity cannot exceed {max_quantity}")

    return errors
