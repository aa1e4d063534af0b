"""Tests for the storefront API client and the shopper session."""

import json

import httpx
import pytest

from storefront.client import CartStore, ShopperSession, StorefrontClient
from storefront.client import MemoryStorage
from storefront.database import cart_db, order_db, product_db
from storefront.models import CheckoutLine, NewCartItem


def choker_item(quantity=2) -> NewCartItem:
    return NewCartItem(
        product_id="prod-007",
        name="Kundan Choker Set",
        image="/images/products/kundan-choker.jpg",
        price=40.0,
        quantity=quantity,
        max_quantity=50,
        sku="GD-JWL-KUNDAN",
    )


def mock_client(handler) -> StorefrontClient:
    return StorefrontClient("http://storefront.test", transport=httpx.MockTransport(handler))


@pytest.mark.anyio
class TestStorefrontClient:
    async def test_search_products_params(self):
        seen = {}

        def handler(request):
            seen["path"] = request.url.path
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"products": []})

        client = mock_client(handler)
        await client.search_products(search="silk", min_price=100, sort_by="price-asc", in_stock=True)
        await client.close()

        assert seen["path"] == "/api/products"
        assert seen["params"] == {
            "search": "silk",
            "minPrice": "100",
            "sortBy": "price-asc",
            "inStock": "true",
            "page": "1",
            "limit": "12",
        }

    async def test_in_stock_omitted_when_false(self):
        seen = {}

        def handler(request):
            seen["params"] = dict(request.url.params)
            return httpx.Response(200, json={"products": []})

        client = mock_client(handler)
        await client.search_products()
        await client.close()

        assert "inStock" not in seen["params"]

    async def test_checkout_body(self, address):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["path"] = request.url.path
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"sessionId": "cs_1", "url": "https://pay.test/cs_1", "orderId": "o-1"})

        client = mock_client(handler)
        response = await client.checkout(
            items=[CheckoutLine(product_id="prod-007", quantity=2)],
            shipping_address=address,
            billing_address=address,
            customer_notes="Gift wrap",
        )
        await client.close()

        assert response.session_id == "cs_1"
        assert response.order_id == "o-1"
        assert seen["method"] == "POST"
        assert seen["path"] == "/api/checkout"
        assert seen["body"]["items"] == [{"productId": "prod-007", "quantity": 2}]
        assert seen["body"]["shippingAddress"]["postalCode"] == "95112"
        assert seen["body"]["customerNotes"] == "Gift wrap"

    async def test_error_status_raises(self, address):
        def handler(request):
            return httpx.Response(400, json={"detail": "No items in cart"})

        client = mock_client(handler)
        with pytest.raises(httpx.HTTPStatusError):
            await client.checkout(items=[], shipping_address=address, billing_address=address)
        await client.close()

    async def test_sync_failure_returns_none(self):
        def handler(request):
            return httpx.Response(500, json={"detail": "boom"})

        client = mock_client(handler)
        assert await client.sync_cart("user-1", []) is None
        await client.close()


@pytest.fixture()
async def shopper(fake_gateway):
    from storefront.main import app

    client = StorefrontClient("http://storefront.test", transport=httpx.ASGITransport(app=app))
    session = ShopperSession(cart=CartStore(auto_close_delay=None), client=client)
    session.start()
    yield session
    await session.close()


@pytest.mark.anyio
class TestShopperSession:
    async def test_browse(self, shopper):
        listing = await shopper.client.search_products(category="sarees")
        assert {p["id"] for p in listing["products"]} == {"prod-003", "prod-004"}

        product = await shopper.client.get_product("kundan-choker-set")
        assert product["id"] == "prod-007"

        categories = await shopper.client.get_categories()
        assert "sarees" in {c["slug"] for c in categories}

    async def test_checkout_keeps_cart_until_completed(self, shopper, address):
        shopper.cart.add_item(choker_item())

        response = await shopper.checkout(shipping_address=address, billing_address=address)

        assert shopper.pending_order_id == response.order_id
        assert shopper.cart.get_total_items() == 2

        order = await shopper.client.get_order(response.order_id)
        assert order["status"] == "PENDING"
        assert order["items"][0]["quantity"] == 2

        assert shopper.complete_checkout("someone-else") is False
        assert shopper.complete_checkout(response.order_id) is True
        assert shopper.cart.items == []
        assert shopper.pending_order_id is None

    async def test_failed_checkout_leaves_cart(self, shopper, address):
        shopper.cart.add_item(
            NewCartItem(
                product_id="prod-005",
                variant_id="var-005-40",
                name="Ivory Raw Silk Sherwani",
                price=990.0,
                quantity=3,
                max_quantity=10,
                sku="GD-SHW-IVORY-40",
            )
        )
        product_db.update_stock("prod-005", -2, variant_id="var-005-40")

        with pytest.raises(httpx.HTTPStatusError) as exc_info:
            await shopper.checkout(shipping_address=address, billing_address=address)

        assert exc_info.value.response.status_code == 400
        assert shopper.cart.get_total_items() == 3
        assert shopper.pending_order_id is None
        assert order_db.orders == {}

    async def test_sync(self, shopper):
        shopper.cart.add_item(choker_item(quantity=3))

        data = await shopper.sync("user-42")

        assert data["cart"]["totalItems"] == 3
        assert data["cart"]["subtotal"] == 120.0
        assert cart_db.get_cart("user-42").items == shopper.cart.items

    async def test_session_rehydrates_cart(self):
        storage = MemoryStorage()
        CartStore(storage=storage, auto_close_delay=None).add_item(choker_item())

        session = ShopperSession(
            cart=CartStore(storage=storage, auto_close_delay=None),
            client=mock_client(lambda request: httpx.Response(200, json={})),
        )
        session.start()

        assert session.cart.get_total_items() == 2
        assert session.cart.is_open is False
        await session.close()
