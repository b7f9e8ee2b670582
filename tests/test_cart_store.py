"""Tests for the cart store."""

import itertools

import pytest

from conftest import make_item
from services.cart_service.repository import DatabaseStorage, MemoryStorage
from services.cart_service.service import CART_STORAGE_KEY, CartStore, session_cart_key
from shared.errors import NotFoundError


@pytest.fixture
def storage():
    return MemoryStorage()


@pytest.fixture
def store(storage):
    ticks = itertools.count(1700000000000)
    return CartStore(storage, clock=lambda: next(ticks))


class TestAddItem:
    async def test_first_add_synthesises_id(self, store):
        items = await store.add_item(make_item())
        assert len(items) == 1
        assert items[0].id == "whey-1-chocolate-1kg-1700000000000"
        assert items[0].quantity == 1

    async def test_same_product_flavor_size_merges(self, store):
        await store.add_item(make_item(quantity=2))
        items = await store.add_item(make_item(quantity=3))
        assert len(items) == 1
        assert items[0].quantity == 5

    async def test_different_flavor_is_new_line(self, store):
        await store.add_item(make_item())
        items = await store.add_item(make_item(flavor="vanilla"))
        assert [item.flavor for item in items] == ["chocolate", "vanilla"]
        assert items[0].id != items[1].id

    async def test_different_size_is_new_line(self, store):
        await store.add_item(make_item())
        items = await store.add_item(make_item(size="2kg"))
        assert len(items) == 2


class TestQuantity:
    async def test_update_quantity(self, store):
        items = await store.add_item(make_item())
        items = await store.update_quantity(items[0].id, 4)
        assert items[0].quantity == 4

    @pytest.mark.parametrize("quantity", [0, -1])
    async def test_non_positive_quantity_removes(self, store, quantity):
        items = await store.add_item(make_item())
        await store.add_item(make_item(product_id="creatine"))
        items = await store.update_quantity(items[0].id, quantity)
        assert [item.product_id for item in items] == ["creatine"]

    async def test_unknown_id_is_ignored(self, store):
        await store.add_item(make_item())
        items = await store.update_quantity("missing", 3)
        assert items[0].quantity == 1

    async def test_remove_item(self, store):
        items = await store.add_item(make_item())
        assert await store.remove_item(items[0].id) == []


class TestTotals:
    async def test_empty_cart(self, store):
        assert await store.get_total() == 0
        assert await store.get_item_count() == 0

    async def test_total_and_count(self, store):
        await store.add_item(make_item(unit_price=60.0, quantity=2))
        await store.add_item(make_item(product_id="bcaa", unit_price=19.99, quantity=3))
        assert await store.get_total() == pytest.approx(179.97)
        assert await store.get_item_count() == 5

    async def test_clear(self, store, storage):
        await store.add_item(make_item())
        await store.clear()
        assert await store.get_items() == []
        assert await storage.get(CART_STORAGE_KEY) is None


class TestPersistence:
    async def test_state_survives_a_new_store(self, storage):
        await CartStore(storage).add_item(make_item(quantity=2))
        reloaded = CartStore(storage)
        items = await reloaded.get_items()
        assert len(items) == 1
        assert items[0].quantity == 2

    async def test_session_keys_are_isolated(self, storage):
        await CartStore(storage, key=session_cart_key("a")).add_item(make_item())
        assert await CartStore(storage, key=session_cart_key("b")).get_items() == []

    async def test_database_storage(self, db):
        await CartStore(DatabaseStorage(db), key="cart-storage:db").add_item(make_item())
        await CartStore(DatabaseStorage(db), key="cart-storage:db").add_item(make_item())
        items = await CartStore(DatabaseStorage(db), key="cart-storage:db").get_items()
        assert items[0].quantity == 2

        await CartStore(DatabaseStorage(db), key="cart-storage:db").clear()
        assert await DatabaseStorage(db).get("cart-storage:db") is None


class TestOwnership:
    async def test_anonymous_cart_has_no_owner(self, storage):
        store = CartStore(storage)
        await store.add_item(make_item())
        assert await store.get_owner() is None
        await store.ensure_access()

    async def test_signed_in_add_stamps_owner(self, storage):
        await CartStore(storage, user_id=7).add_item(make_item())
        assert await CartStore(storage).get_owner() == 7

    async def test_first_signed_in_reader_claims(self, storage):
        await CartStore(storage).add_item(make_item())
        await CartStore(storage, user_id=7).ensure_access()

        assert await CartStore(storage).get_owner() == 7
        with pytest.raises(NotFoundError):
            await CartStore(storage, user_id=8).ensure_access()
        with pytest.raises(NotFoundError):
            await CartStore(storage).ensure_access()

    async def test_owner_survives_mutations(self, storage):
        store = CartStore(storage, user_id=7)
        items = await store.add_item(make_item())
        await CartStore(storage, user_id=7).update_quantity(items[0].id, 3)
        assert await CartStore(storage).get_owner() == 7

    async def test_clear_releases_owner(self, storage):
        store = CartStore(storage, user_id=7)
        await store.add_item(make_item())
        await store.clear()
        await CartStore(storage, user_id=8).ensure_access()

    async def test_claiming_an_empty_cart_writes_nothing(self, storage):
        await CartStore(storage, user_id=7).ensure_access()
        assert await storage.get(CART_STORAGE_KEY) is None
