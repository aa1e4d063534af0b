import pytest
from fastapi.testclient import TestClient

from storefront.database import cart_db, order_db, product_db
from storefront.gateway import FakeGateway, reset_gateway, set_gateway
from storefront.models import Address


@pytest.fixture(autouse=True)
def reset_state():
    """Every test starts from the seed catalog with no orders or synced carts."""
    product_db.reset()
    order_db.reset()
    cart_db.reset()
    yield
    reset_gateway()


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture()
def fake_gateway():
    gateway = FakeGateway()
    set_gateway(gateway)
    return gateway


@pytest.fixture()
def client(fake_gateway):
    from storefront.main import app

    return TestClient(app)


@pytest.fixture()
def address():
    return Address(
        name="Priya Sharma",
        street="12 Lotus Lane",
        city="San Jose",
        state="CA",
        postal_code="95112",
    )


@pytest.fixture()
def address_payload():
    return {
        "name": "Priya Sharma",
        "street": "12 Lotus Lane",
        "city": "San Jose",
        "state": "CA",
        "postalCode": "95112",
        "country": "US",
    }
