"""Shared BDD fixtures and step definitions for the Ordering domain."""

import pytest
from ordering.cart.cart import Cart
from ordering.cart.items import AddToCart
from ordering.catalogue.product import Product
from ordering.checkout.checkout import Checkout
from ordering.errors import error_kind
from ordering.order.order import Order
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when


def _ids(text):
    return [part.strip() for part in text.split(",") if part.strip()]


# ---------------------------------------------------------------------------
# Scalar fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def user_id():
    return "user-001"


@pytest.fixture()
def outcome():
    """Container for the result of the last When step."""
    return {"order_id": None, "error": None}


# ---------------------------------------------------------------------------
# Given steps: catalogue
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a store "{store_id}"'))
def _(seed_store, store_id):
    seed_store(store_id, name=store_id.title())


@given(parsers.cfparse('a marketplace product "{product_id}" priced at {price:g}'))
def _(seed_product, product_id, price):
    seed_product(product_id, price=price)


@given(parsers.cfparse('a marketplace product "{product_id}" priced at {price:g} offered at {offer:g}'))
def _(seed_product, product_id, price, offer):
    seed_product(product_id, price=price, offer_price=offer)


@given(parsers.cfparse('store "{store_id}" sells "{product_id}" priced at {price:g}'))
def _(seed_product, store_id, product_id, price):
    seed_product(product_id, price=price, store_ids=[store_id])


@given(parsers.cfparse('product "{product_id}" is delisted'))
def _(product_id):
    repo = current_domain.repository_for(Product)
    product = repo.get(product_id)
    product.is_active = False
    repo.add(product)


# ---------------------------------------------------------------------------
# Given steps: cart
# ---------------------------------------------------------------------------
@given(parsers.cfparse('the buyer added {quantity:d} of "{product_id}" from the marketplace'))
def _(user_id, quantity, product_id):
    current_domain.process(
        AddToCart(user_id=user_id, product_id=product_id, quantity=quantity),
        asynchronous=False,
    )


@given(parsers.cfparse('the buyer added {quantity:d} of "{product_id}" from store "{store_id}"'))
def _(user_id, quantity, product_id, store_id):
    current_domain.process(
        AddToCart(user_id=user_id, product_id=product_id, store_id=store_id, quantity=quantity),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
def _checkout(user_id, outcome, store_id=None):
    try:
        outcome["order_id"] = current_domain.process(
            Checkout(user_id=user_id, store_id=store_id),
            asynchronous=False,
        )
    except (ValidationError, ObjectNotFoundError) as exc:
        outcome["error"] = exc
    return outcome


@when("the buyer checks out the marketplace items", target_fixture="outcome")
def _(user_id, outcome):
    return _checkout(user_id, outcome)


@when(parsers.cfparse('the buyer checks out store "{store_id}"'), target_fixture="outcome")
def _(user_id, outcome, store_id):
    return _checkout(user_id, outcome, store_id=store_id)


@given(parsers.cfparse('the buyer checked out store "{store_id}"'), target_fixture="outcome")
def _(user_id, outcome, store_id):
    return _checkout(user_id, outcome, store_id=store_id)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("an order for {grand_total:g} is placed"))
def _(outcome, grand_total):
    assert outcome["error"] is None
    order = current_domain.repository_for(Order).get(outcome["order_id"])
    assert order.grand_total == grand_total


@then(parsers.cfparse('the order contains "{product_ids}"'))
def _(outcome, product_ids):
    order = current_domain.repository_for(Order).get(outcome["order_id"])
    assert sorted(str(item.product_id) for item in order.items) == sorted(_ids(product_ids))


@then(parsers.cfparse('the cart still contains "{product_ids}"'))
def _(user_id, product_ids):
    cart = current_domain.repository_for(Cart).for_user(user_id)
    assert sorted(str(line.product_id) for line in cart.items) == sorted(_ids(product_ids))


@then("the cart is empty")
def _(user_id):
    cart = current_domain.repository_for(Cart).for_user(user_id)
    assert cart is None or len(cart.items) == 0


@then(parsers.cfparse('checkout fails with "{kind}"'))
def _(outcome, kind):
    assert outcome["order_id"] is None
    assert error_kind(outcome["error"]) == kind


@then("no order is placed")
def _(user_id):
    orders = current_domain.repository_for(Order).search(user_id=user_id)
    assert orders == []
