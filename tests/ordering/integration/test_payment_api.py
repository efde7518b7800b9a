"""Integration tests for payment endpoints via TestClient."""

import pytest
from fastapi.testclient import TestClient


def _initiate(client, payment_method="upi", amount=250.0, **body):
    response = client.post(
        "/payments/initiate",
        json={"amount": amount, "payment_method": payment_method, **body},
    )
    assert response.status_code == 201, response.json()
    return response.json()


class TestInitiateEndpoint:
    def test_cod_is_completed(self, client):
        payment = _initiate(client, payment_method="cod")

        assert payment["status"] == "completed"
        assert payment["currency"] == "INR"

    def test_metadata_round_trips(self, client):
        payment = _initiate(client, metadata={"channel": "app"})
        assert payment["metadata"] == {"channel": "app"}

    def test_invalid_amount(self, client):
        response = client.post("/payments/initiate", json={"amount": -5, "payment_method": "upi"})

        assert response.status_code == 400
        assert response.json()["kind"] == "validation"


class TestSettlementEndpoints:
    def test_verify_requires_a_transaction(self, client):
        payment = _initiate(client)

        response = client.post(f"/payments/{payment['payment_id']}/verify", json={})
        assert response.status_code == 400

    def test_verify_completes(self, client):
        payment = _initiate(client)

        response = client.post(
            f"/payments/{payment['payment_id']}/verify",
            json={"transaction_id": "UPI-42", "upi_id": "asha@upi"},
        )
        body = response.json()
        assert body["is_verified"] is True
        assert body["payment"]["transaction_id"] == "UPI-42"

    def test_fail_then_status(self, client):
        payment = _initiate(client)
        client.post(f"/payments/{payment['payment_id']}/fail", json={"error_message": "Declined"})

        body = client.get(f"/payments/{payment['payment_id']}/status").json()
        assert body["is_failed"] is True
        assert body["payment"]["error_message"] == "Declined"

    def test_complete(self, client):
        payment = _initiate(client)

        body = client.post(f"/payments/{payment['payment_id']}/complete", json={}).json()
        assert body["status"] == "completed"
        assert body["transaction_id"].startswith("TXN")

    def test_other_user_gets_not_found(self, client, app):
        payment = _initiate(client)

        other = TestClient(app, headers={"X-User-Id": "user-002"})
        assert other.get(f"/payments/{payment['payment_id']}/status").status_code == 404


class TestPaymentListing:
    def test_my_payments(self, client):
        _initiate(client, payment_method="cod")
        _initiate(client)

        body = client.get("/payments/my").json()
        assert body["count"] == 2
        assert body["summary"] == {"total": 2, "pending": 1, "completed": 1, "failed": 0}


@pytest.mark.usefixtures("catalogue")
class TestLinkOrderEndpoint:
    def test_link(self, client):
        client.post("/cart/items", json={"product_id": "g1"})
        order = client.post("/orders/checkout", json={}).json()
        payment = _initiate(client, amount=order["grand_total"])

        response = client.patch(
            f"/payments/{payment['payment_id']}/link-order",
            json={"order_id": order["order_id"]},
        )
        assert response.json()["order_id"] == order["order_id"]
        assert client.get(f"/orders/my/{order['order_id']}").json()["payment_id"] == payment["payment_id"]

    def test_unknown_order(self, client):
        payment = _initiate(client)

        response = client.patch(f"/payments/{payment['payment_id']}/link-order", json={"order_id": "order-404"})
        assert response.status_code == 404
