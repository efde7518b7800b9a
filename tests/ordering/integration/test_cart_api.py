"""Integration tests for the cart endpoints via TestClient."""

import pytest
from ordering.cart.cart import Cart
from protean import current_domain

pytestmark = pytest.mark.usefixtures("catalogue")


def _add_item(client, product_id="g1", store_id=None, quantity=1):
    response = client.post(
        "/cart/items",
        json={"product_id": product_id, "store_id": store_id, "quantity": quantity},
    )
    assert response.status_code == 200
    return response.json()


class TestCartReads:
    def test_empty_cart_is_not_created_by_reading(self, client):
        response = client.get("/cart")

        assert response.status_code == 200
        assert response.json()["items"] == []
        assert response.json()["cart_id"] is None
        assert current_domain.repository_for(Cart).for_user("user-001") is None

    def test_lines_carry_product_details(self, client):
        _add_item(client, "g1", quantity=2)

        item = client.get("/cart").json()["items"][0]
        assert item["quantity"] == 2
        assert item["price_at_add"] == 200.0
        assert item["offer_price_at_add"] == 150.0
        assert item["product"]["name"] == "Product g1"

    def test_store_filter(self, client):
        _add_item(client, "g1")
        _add_item(client, "a1", store_id="store-a")

        items = client.get("/cart", params={"store_id": "store-a"}).json()["items"]
        assert [item["product_id"] for item in items] == ["a1"]

    def test_user_id_query_parameter_is_accepted(self, client):
        _add_item(client, "g1")

        response = client.get("/cart", params={"user_id": "user-002"}, headers={"X-User-Id": ""})
        assert response.status_code == 200
        assert response.json()["items"] == []


class TestCartMutations:
    def test_adding_twice_merges_the_line(self, client):
        _add_item(client, "a1", store_id="store-a")
        cart = _add_item(client, "a1", store_id="store-a", quantity=2)

        assert len(cart["items"]) == 1
        assert cart["items"][0]["quantity"] == 3

    def test_update_to_zero_removes_the_line(self, client):
        _add_item(client, "g1", quantity=3)

        response = client.patch("/cart/items", json={"product_id": "g1", "quantity": 0})
        assert response.status_code == 200
        assert response.json()["items"] == []

    def test_decrease(self, client):
        _add_item(client, "g1", quantity=3)

        response = client.patch("/cart/items/decrease", json={"product_id": "g1", "decrement_by": 2})
        assert response.json()["items"][0]["quantity"] == 1

    def test_remove_line(self, client):
        _add_item(client, "g1")
        _add_item(client, "a1", store_id="store-a")

        response = client.delete("/cart/items/a1", params={"store_id": "store-a"})
        assert [item["product_id"] for item in response.json()["items"]] == ["g1"]

    def test_clear_one_store(self, client):
        _add_item(client, "g1")
        _add_item(client, "a1", store_id="store-a")

        response = client.delete("/cart", params={"store_id": "store-a"})
        body = response.json()
        assert body["removed_count"] == 1
        assert [item["product_id"] for item in body["cart"]["items"]] == ["g1"]


class TestCartErrors:
    def test_missing_user_id(self, client):
        response = client.get("/cart", headers={"X-User-Id": ""})

        assert response.status_code == 400
        assert response.json()["kind"] == "validation"

    def test_unknown_product(self, client):
        response = client.post("/cart/items", json={"product_id": "nope"})

        assert response.status_code == 404
        assert response.json()["kind"] == "not_found"

    def test_product_from_another_store(self, client):
        response = client.post("/cart/items", json={"product_id": "b1", "store_id": "store-a"})
        assert response.status_code == 404

    def test_zero_quantity_is_rejected(self, client):
        response = client.post("/cart/items", json={"product_id": "g1", "quantity": 0})

        assert response.status_code == 400
        assert response.json()["kind"] == "validation"
