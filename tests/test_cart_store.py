"""Tests for the client cart store."""

import json

import pytest

from storefront.client.cart_store import CartNotice, CartStore, canonical_customizations
from storefront.client.storage import FileStorage, MemoryStorage
from storefront.models import CheckoutLine, NewCartItem

STORAGE_KEY = "glamorousdesi-cart"


def make_item(**overrides) -> NewCartItem:
    defaults = {
        "product_id": "prod-001",
        "variant_id": "var-001-s",
        "name": "Crimson Zardozi Bridal Lehenga",
        "image": "/images/products/crimson-lehenga.jpg",
        "price": 1500.00,
        "quantity": 1,
        "max_quantity": 4,
        "sku": "GD-LEH-CRIMSON-S",
    }
    defaults.update(overrides)
    return NewCartItem(**defaults)


class FailingStorage(MemoryStorage):
    def set_item(self, key, value):
        raise OSError("quota exceeded")


@pytest.fixture()
def notices():
    return []


@pytest.fixture()
def storage():
    return MemoryStorage()


@pytest.fixture()
def store(storage, notices):
    cart = CartStore(storage=storage, auto_close_delay=None, notify=notices.append)
    cart.load()
    yield cart
    cart.close()


class TestAddItem:
    def test_new_item_gets_identity(self, store):
        assert store.add_item(make_item()) is True
        assert len(store.items) == 1
        assert store.items[0].id

    def test_identical_tuples_merge(self, store):
        store.add_item(make_item(quantity=1))
        store.add_item(make_item(quantity=2))

        assert len(store.items) == 1
        assert store.items[0].quantity == 3

    def test_merge_over_capacity_leaves_cart_unchanged(self, store, notices):
        store.add_item(make_item(quantity=3))
        before = store.items

        assert store.add_item(make_item(quantity=2)) is False
        assert store.items == before
        assert notices[-1] == CartNotice(level="error", message="Only 4 items available in stock")

    def test_new_item_over_capacity_is_rejected(self, store, notices):
        assert store.add_item(make_item(quantity=5, max_quantity=4)) is False
        assert store.items == []
        assert notices[-1].level == "error"
        assert "4" in notices[-1].message

    def test_different_variants_are_separate_entries(self, store):
        store.add_item(make_item(variant_id="var-001-s"))
        store.add_item(make_item(variant_id="var-001-m"))
        assert len(store.items) == 2

    def test_customization_key_order_does_not_matter(self, store):
        store.add_item(make_item(customizations={"blouse": "sleeveless", "length": "42"}))
        store.add_item(make_item(customizations={"length": "42", "blouse": "sleeveless"}))

        assert len(store.items) == 1
        assert store.items[0].quantity == 2

    def test_different_customizations_are_separate_entries(self, store):
        store.add_item(make_item(customizations={"blouse": "sleeveless"}))
        store.add_item(make_item(customizations={"blouse": "elbow"}))
        assert len(store.items) == 2

    def test_empty_customizations_match_none(self, store):
        store.add_item(make_item(customizations=None))
        store.add_item(make_item(customizations={}))
        assert len(store.items) == 1

    def test_invalid_item_is_rejected(self, store, notices):
        assert store.add_item(make_item(price=0)) is False
        assert store.items == []
        assert notices[-1].message == "Valid price is required"

    def test_accepts_plain_dict(self, store):
        assert store.add_item(make_item().model_dump()) is True
        assert store.get_total_items() == 1

    def test_malformed_dict_is_rejected(self, store, notices):
        assert store.add_item({"product_id": "prod-001"}) is False
        assert notices[-1].level == "error"

    def test_success_notice(self, store, notices):
        store.add_item(make_item())
        assert notices[-1] == CartNotice(level="success", message="Crimson Zardozi Bridal Lehenga added to cart")
        store.add_item(make_item())
        assert notices[-1].message == "Updated quantity in cart"

    def test_add_opens_drawer(self, store):
        store.add_item(make_item())
        assert store.is_open is True


class TestRemoveAndUpdate:
    def test_remove_item(self, store):
        store.add_item(make_item())
        store.remove_item(store.items[0].id)
        assert store.items == []

    def test_remove_absent_is_noop(self, store, notices):
        store.add_item(make_item())
        count = len(notices)

        store.remove_item("missing")

        assert len(store.items) == 1
        assert len(notices) == count

    def test_update_quantity(self, store):
        store.add_item(make_item())
        item_id = store.items[0].id

        assert store.update_quantity(item_id, 4) is True
        assert store.items[0].quantity == 4

    def test_update_over_capacity_is_rejected(self, store, notices):
        store.add_item(make_item(quantity=2))
        item_id = store.items[0].id

        assert store.update_quantity(item_id, 5) is False
        assert store.items[0].quantity == 2
        assert notices[-1].message == "Only 4 items available in stock"

    def test_update_to_zero_equals_remove(self, notices):
        by_update = CartStore(auto_close_delay=None, notify=notices.append)
        by_remove = CartStore(auto_close_delay=None, notify=notices.append)
        for cart in (by_update, by_remove):
            cart.add_item(make_item(product_id="prod-003", variant_id=None, sku="GD-SAR-KANJI-GOLD"))
            cart.add_item(make_item())

        by_update.update_quantity(by_update.items[1].id, 0)
        by_remove.remove_item(by_remove.items[1].id)

        assert [i.product_id for i in by_update.items] == [i.product_id for i in by_remove.items]
        assert by_update.get_total_items() == by_remove.get_total_items()

    def test_update_negative_removes(self, store):
        store.add_item(make_item())
        store.update_quantity(store.items[0].id, -1)
        assert store.items == []

    def test_update_unknown_id_is_noop(self, store):
        store.add_item(make_item())
        store.update_quantity("missing", 2)
        assert store.items[0].quantity == 1

    def test_clear_cart(self, store):
        store.add_item(make_item())
        store.add_item(make_item(product_id="prod-007", variant_id=None, sku="GD-JWL-KUNDAN"))
        store.clear_cart()
        assert store.items == []


class TestDerivedValues:
    def test_totals(self, store):
        store.add_item(make_item(quantity=2))
        store.add_item(make_item(product_id="prod-007", variant_id=None, price=40.0, quantity=3, max_quantity=50, sku="GD-JWL-KUNDAN"))

        assert store.get_total_items() == 5
        assert store.get_total_price() == pytest.approx(2 * 1500.0 + 3 * 40.0)
        assert store.get_total_price() == pytest.approx(sum(i.price * i.quantity for i in store.items))

    def test_empty_totals(self, store):
        assert store.get_total_items() == 0
        assert store.get_total_price() == 0

    def test_item_count_and_presence(self, store):
        store.add_item(make_item(quantity=2))
        store.add_item(make_item(quantity=1, customizations={"blouse": "elbow"}))

        assert store.get_item_count("prod-001", "var-001-s") == 3
        assert store.get_item_count("prod-001") == 0
        assert store.has_item("prod-001", "var-001-s") is True
        assert store.has_item("prod-001", "var-001-m") is False

    def test_snapshot(self, store):
        store.add_item(make_item(quantity=2, size="S", customizations={"blouse": "elbow"}))

        assert store.snapshot() == [
            CheckoutLine(
                product_id="prod-001",
                variant_id="var-001-s",
                quantity=2,
                size="S",
                customizations={"blouse": "elbow"},
            )
        ]


class TestVisibility:
    def test_toggle_open_close(self, store):
        store.toggle_cart()
        assert store.is_open is True
        store.toggle_cart()
        assert store.is_open is False
        store.open_cart()
        assert store.is_open is True
        store.close_cart()
        assert store.is_open is False

    def test_visibility_does_not_touch_items(self, store):
        store.add_item(make_item())
        before = store.items
        store.toggle_cart()
        store.close_cart()
        assert store.items == before

    def test_auto_close_after_add(self, storage):
        store = CartStore(storage=storage, auto_close_delay=0.01)
        store.add_item(make_item())
        timer = store._close_timer

        timer.join(timeout=2)

        assert store.is_open is False

    def test_new_add_cancels_pending_close(self, storage):
        store = CartStore(storage=storage, auto_close_delay=30)
        store.add_item(make_item())
        first = store._close_timer

        store.add_item(make_item())

        assert first.finished.is_set()
        assert store._close_timer is not first
        assert store.is_open is True
        store.close()

    def test_no_timer_when_disabled(self, store):
        store.add_item(make_item())
        assert store._close_timer is None


class TestPersistence:
    def test_round_trip(self, storage):
        original = CartStore(storage=storage, auto_close_delay=None)
        original.add_item(make_item(quantity=2, customizations={"blouse": "elbow"}))
        original.add_item(make_item(product_id="prod-007", variant_id=None, price=40.0, max_quantity=50, sku="GD-JWL-KUNDAN"))
        assert original.is_open is True

        restored = CartStore(storage=storage, auto_close_delay=None)
        restored.load()

        assert restored.items == original.items
        assert restored.is_open is False

    def test_persisted_format_excludes_visibility(self, store, storage):
        store.add_item(make_item())
        data = json.loads(storage.get_item(STORAGE_KEY))

        assert set(data) == {"state", "version"}
        assert set(data["state"]) == {"items"}
        assert data["state"]["items"][0]["productId"] == "prod-001"
        assert data["state"]["items"][0]["maxQuantity"] == 4

    def test_clear_is_persisted(self, store, storage):
        store.add_item(make_item())
        store.clear_cart()

        restored = CartStore(storage=storage, auto_close_delay=None)
        restored.load()
        assert restored.items == []

    def test_storage_failure_does_not_block_mutation(self, notices):
        store = CartStore(storage=FailingStorage(), auto_close_delay=None, notify=notices.append)

        assert store.add_item(make_item()) is True
        assert len(store.items) == 1
        assert notices[-1].level == "success"

    def test_corrupt_storage_loads_empty(self, storage):
        storage.set_item(STORAGE_KEY, "{not json")
        store = CartStore(storage=storage, auto_close_delay=None)
        store.load()
        assert store.items == []

    def test_undecodable_file_loads_empty(self, tmp_path):
        (tmp_path / f"{STORAGE_KEY}.json").write_bytes(b"\xff\xfe\x00garbage")

        store = CartStore(storage=FileStorage(tmp_path), auto_close_delay=None)
        store.load()

        assert store.items == []

    @pytest.mark.parametrize("quantity, max_quantity", [(9, 2), (0, 4)])
    def test_stored_quantity_outside_capacity_is_discarded(self, storage, quantity, max_quantity):
        stored = make_item().model_dump(by_alias=True)
        stored.update(id="item-1", quantity=quantity, maxQuantity=max_quantity)
        storage.set_item(STORAGE_KEY, json.dumps({"state": {"items": [stored]}, "version": 0}))

        store = CartStore(storage=storage, auto_close_delay=None)
        store.load()

        assert store.items == []

    def test_file_storage_round_trip(self, tmp_path):
        original = CartStore(storage=FileStorage(tmp_path), auto_close_delay=None)
        original.add_item(make_item(quantity=2))

        restored = CartStore(storage=FileStorage(tmp_path), auto_close_delay=None)
        restored.load()

        assert restored.items == original.items
        assert (tmp_path / f"{STORAGE_KEY}.json").exists()


class TestCanonicalCustomizations:
    def test_sorted_keys(self):
        assert canonical_customizations({"b": 1, "a": 2}) == canonical_customizations({"a": 2, "b": 1})

    def test_nested_maps_are_canonical(self):
        first = {"blouse": {"sleeve": "elbow", "neck": "boat"}}
        second = {"blouse": {"neck": "boat", "sleeve": "elbow"}}
        assert canonical_customizations(first) == canonical_customizations(second)

    def test_empty_is_none(self):
        assert canonical_customizations({}) == canonical_customizations(None) == ""
