"""
Storefront API Client

HTTP client used by the shopper-facing shell to talk to the storefront API.
"""

import logging
from typing import Any, Optional

import httpx

from ..models.cart import CartItem
from ..models.checkout import Address, CheckoutLine, CheckoutResponse

logger = logging.getLogger(__name__)


class StorefrontClient:
    """Client for the storefront catalog, checkout and cart sync APIs"""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize storefront client.

        Args:
            base_url: Base URL of the storefront API
            timeout: Request timeout in seconds
            transport: Custom httpx transport (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self._http_client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    async def close(self) -> None:
        """Close HTTP client"""
        await self._http_client.aclose()

    async def _request(
        self,
        method: str,
        path: str,
        body: Optional[dict] = None,
        params: Optional[dict] = None,
    ) -> Any:
        """Make an HTTP request and decode the JSON response"""
        response = await self._http_client.request(
            method=method,
            url=path,
            json=body,
            params=params,
        )

        if response.status_code >= 400:
            logger.error(f"Request failed: {response.status_code} - {response.text}")
            response.raise_for_status()

        return response.json()

    # ==================== Product APIs ====================

    async def search_products(
        self,
        search: Optional[str] = None,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        occasion: Optional[str] = None,
        fabric: Optional[str] = None,
        color: Optional[str] = None,
        size: Optional[str] = None,
        sort_by: str = "featured",
        in_stock: bool = False,
        page: int = 1,
        limit: int = 12,
    ) -> dict:
        """Search products in the catalog"""
        params = {
            "search": search,
            "category": category,
            "minPrice": min_price,
            "maxPrice": max_price,
            "occasion": occasion,
            "fabric": fabric,
            "color": color,
            "size": size,
            "sortBy": sort_by,
            "page": page,
            "limit": limit,
        }
        if in_stock:
            params["inStock"] = "true"

        return await self._request(
            "GET",
            "/api/products",
            params={k: v for k, v in params.items() if v is not None},
        )

    async def get_product(self, product_id: str) -> dict:
        """Get product details"""
        return await self._request("GET", f"/api/products/{product_id}")

    async def get_categories(self) -> list[dict]:
        """Get available product categories"""
        return await self._request("GET", "/api/products/categories")

    # ==================== Checkout APIs ====================

    async def checkout(
        self,
        items: list[CheckoutLine],
        shipping_address: Address,
        billing_address: Address,
        customer_notes: Optional[str] = None,
    ) -> CheckoutResponse:
        """Submit a cart snapshot and get the hosted payment redirect"""
        body = {
            "items": [
                item.model_dump(by_alias=True, exclude_none=True, mode="json") for item in items
            ],
            "shippingAddress": shipping_address.model_dump(by_alias=True),
            "billingAddress": billing_address.model_dump(by_alias=True),
        }
        if customer_notes:
            body["customerNotes"] = customer_notes

        data = await self._request("POST", "/api/checkout", body=body)
        return CheckoutResponse.model_validate(data)

    async def get_order(self, order_id: str) -> dict:
        """Get order details"""
        return await self._request("GET", f"/api/checkout/orders/{order_id}")

    # ==================== Cart sync ====================

    async def sync_cart(self, user_id: str, items: list[CartItem]) -> Optional[dict]:
        """
        Store a copy of the cart on the server for cross-device use.

        Returns:
            The server's copy, or None when the sync failed
        """
        body = {
            "userId": user_id,
            "items": [item.model_dump(by_alias=True, mode="json") for item in items],
        }
        try:
            return await self._request("POST", "/api/cart/sync", body=body)
        except httpx.HTTPError as e:
            logger.error(f"Cart sync error: {e}")
            return None
