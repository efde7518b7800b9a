"""Tests for the Cart aggregate: line keys, quantities and clearing."""

import pytest
from ordering.cart.cart import Cart
from ordering.cart.events import CartCleared, CartCreated, CartItemAdded, CartItemQuantityChanged, CartItemRemoved
from ordering.cart.scope import GlobalScope, StoreScope
from ordering.catalogue.product import Product
from ordering.errors import NotFound
from protean.exceptions import ValidationError


def _product(product_id="prod-001", price=200.0, offer_price=150.0, store_ids=None, unit="kg"):
    return Product(
        id=product_id,
        name=f"Product {product_id}",
        price=price,
        offer_price=offer_price,
        unit=unit,
        store_ids=store_ids or [],
    )


def _cart():
    cart = Cart.create(user_id="user-001")
    cart._events.clear()
    return cart


class TestCartCreation:
    def test_new_cart_is_empty_and_live(self):
        cart = Cart.create(user_id="user-001")
        assert cart.user_id == "user-001"
        assert len(cart.items) == 0
        assert cart.is_deleted is False

    def test_creation_raises_cart_created(self):
        cart = Cart.create(user_id="user-001")
        assert len(cart._events) == 1
        assert isinstance(cart._events[0], CartCreated)

    def test_restore_empties_a_soft_deleted_cart(self):
        cart = _cart()
        cart.add_item(_product(), quantity=2)
        cart.is_deleted = True

        cart.restore()

        assert cart.is_deleted is False
        assert len(cart.items) == 0


class TestAddItem:
    def test_new_line_captures_price_snapshot(self):
        cart = _cart()
        cart.add_item(_product(), quantity=2)

        line = cart.items[0]
        assert line.quantity == 2
        assert line.price_at_add == 200.0
        assert line.offer_price_at_add == 150.0
        assert line.unit == "kg"
        assert line.store_id is None
        assert line.added_at is not None

    def test_offer_price_snapshot_falls_back_to_price(self):
        cart = _cart()
        cart.add_item(_product(offer_price=None))
        assert cart.items[0].offer_price_at_add == 200.0

    def test_adding_same_product_twice_increments_one_line(self):
        cart = _cart()
        cart.add_item(_product(), quantity=1)
        cart.add_item(_product(), quantity=3)

        assert len(cart.items) == 1
        assert cart.items[0].quantity == 4

    def test_same_product_in_two_scopes_gets_two_lines(self):
        cart = _cart()
        product = _product(store_ids=["store-a"])
        cart.add_item(product, store_id="store-a", quantity=1)
        cart.add_item(_product(), quantity=1)

        assert len(cart.items) == 2
        assert {line.key() for line in cart.items} == {("prod-001", "store-a"), ("prod-001", None)}

    @pytest.mark.parametrize("quantity", [0, -1, 1.5, None])
    def test_rejects_non_positive_or_non_integer_quantity(self, quantity):
        cart = _cart()
        with pytest.raises(ValidationError) as exc:
            cart.add_item(_product(), quantity=quantity)
        assert "quantity" in exc.value.messages
        assert len(cart.items) == 0

    def test_raises_cart_item_added(self):
        cart = _cart()
        cart.add_item(_product(), store_id="store-a", quantity=2)
        cart.add_item(_product(), store_id="store-a", quantity=1)

        events = [e for e in cart._events if isinstance(e, CartItemAdded)]
        assert len(events) == 2
        assert events[1].quantity_added == 1
        assert events[1].new_quantity == 3
        assert events[1].store_id == "store-a"


class TestQuantityChanges:
    def test_set_absolute_quantity(self):
        cart = _cart()
        cart.add_item(_product(), quantity=1)
        cart.set_item_quantity("prod-001", None, 5)

        assert cart.items[0].quantity == 5
        assert isinstance(cart._events[-1], CartItemQuantityChanged)

    @pytest.mark.parametrize("quantity", [0, -3])
    def test_setting_zero_or_less_removes_the_line(self, quantity):
        cart = _cart()
        cart.add_item(_product(), quantity=2)
        cart.set_item_quantity("prod-001", None, quantity)

        assert len(cart.items) == 0
        assert isinstance(cart._events[-1], CartItemRemoved)

    def test_setting_quantity_on_missing_line_is_not_found(self):
        cart = _cart()
        with pytest.raises(NotFound):
            cart.set_item_quantity("prod-404", None, 2)

    def test_set_quantity_only_touches_the_matching_scope(self):
        cart = _cart()
        cart.add_item(_product(), quantity=1)
        cart.add_item(_product(store_ids=["store-a"]), store_id="store-a", quantity=1)

        cart.set_item_quantity("prod-001", "store-a", 7)

        assert cart.find_line("prod-001", None).quantity == 1
        assert cart.find_line("prod-001", "store-a").quantity == 7

    def test_decrease_subtracts(self):
        cart = _cart()
        cart.add_item(_product(), quantity=3)
        cart.decrease_item("prod-001", None, 1)
        assert cart.items[0].quantity == 2

    def test_decrease_to_zero_removes_the_line(self):
        cart = _cart()
        cart.add_item(_product(), quantity=2)
        cart.decrease_item("prod-001", None, 2)
        assert len(cart.items) == 0

    def test_decrease_below_zero_removes_the_line(self):
        cart = _cart()
        cart.add_item(_product(), quantity=2)
        cart.decrease_item("prod-001", None, 5)
        assert len(cart.items) == 0

    def test_decrease_requires_positive_decrement(self):
        cart = _cart()
        cart.add_item(_product(), quantity=2)
        with pytest.raises(ValidationError):
            cart.decrease_item("prod-001", None, 0)

    def test_remove_missing_line_is_not_found(self):
        cart = _cart()
        cart.add_item(_product(), quantity=1)
        with pytest.raises(NotFound):
            cart.remove_item("prod-001", "store-a")


class TestClear:
    def _mixed_cart(self):
        cart = _cart()
        cart.add_item(_product("g1"), quantity=1)
        cart.add_item(_product("a1", store_ids=["store-a"]), store_id="store-a")
        cart.add_item(_product("a2", store_ids=["store-a"]), store_id="store-a")
        cart.add_item(_product("b1", store_ids=["store-b"]), store_id="store-b")
        cart._events.clear()
        return cart

    def test_clear_store_removes_only_that_store(self):
        cart = self._mixed_cart()
        removed = cart.clear(store_id="store-a")

        assert removed == 2
        assert {line.key() for line in cart.items} == {("g1", None), ("b1", "store-b")}

    def test_clear_without_store_removes_everything(self):
        cart = self._mixed_cart()
        removed = cart.clear()

        assert removed == 4
        assert len(cart.items) == 0

    def test_clear_raises_cart_cleared(self):
        cart = self._mixed_cart()
        cart.clear(store_id="store-b")

        event = cart._events[-1]
        assert isinstance(event, CartCleared)
        assert event.store_id == "store-b"
        assert event.removed_count == 1


class TestScopeSelection:
    def test_lines_in_global_scope(self):
        cart = _cart()
        cart.add_item(_product("g1"))
        cart.add_item(_product("a1", store_ids=["store-a"]), store_id="store-a")

        assert [line.product_id for line in cart.lines_in(GlobalScope())] == ["g1"]
        assert [line.product_id for line in cart.lines_in(StoreScope("store-a"))] == ["a1"]

    def test_check_out_removes_only_consumed_lines(self):
        cart = _cart()
        cart.add_item(_product("g1"))
        cart.add_item(_product("a1", store_ids=["store-a"]), store_id="store-a")
        cart.add_item(_product("a2", store_ids=["store-a"]), store_id="store-a")

        consumed = cart.check_out([("a1", "store-a")], StoreScope("store-a"), "order-001")

        assert [line.product_id for line in consumed] == ["a1"]
        assert {line.key() for line in cart.items} == {("g1", None), ("a2", "store-a")}
