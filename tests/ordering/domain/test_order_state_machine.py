"""Tests for the Order state machines: fulfilment status and payment status."""

import pytest
from ordering.catalogue.product import Product
from ordering.checkout.pricing import order_totals, price_line
from ordering.order.events import OrderPaymentStatusChanged, OrderStatusChanged
from ordering.order.order import Order
from protean.exceptions import ValidationError


def _make_order(store_id="store-a"):
    lines = [price_line(Product(id="prod-001", name="Tea", price=100.0), quantity=1, store_id=store_id)]
    order = Order.place(user_id="user-001", store_id=store_id, lines=lines, totals=order_totals(lines))
    order._events.clear()
    return order


def _order_at_status(status):
    order = _make_order()
    if status != "pending":
        order.update_status(status=status)
        order._events.clear()
    return order


class TestStatusTransitions:
    @pytest.mark.parametrize(
        "current, target",
        [
            ("pending", "confirmed"),
            ("pending", "shipped"),
            ("pending", "cancelled"),
            ("confirmed", "shipped"),
            ("confirmed", "delivered"),
            ("shipped", "delivered"),
            ("shipped", "cancelled"),
        ],
    )
    def test_allowed(self, current, target):
        order = _order_at_status(current)
        order.update_status(status=target)
        assert order.status == target

    @pytest.mark.parametrize(
        "current, target",
        [
            ("delivered", "cancelled"),
            ("delivered", "pending"),
            ("cancelled", "confirmed"),
            ("shipped", "confirmed"),
            ("confirmed", "pending"),
            ("pending", "pending"),
        ],
    )
    def test_rejected(self, current, target):
        order = _order_at_status(current)
        with pytest.raises(ValidationError) as exc:
            order.update_status(status=target)
        assert "status" in exc.value.messages
        assert order.status == current

    def test_unknown_status_is_rejected(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.update_status(status="teleported")


class TestPaymentStatusTransitions:
    def test_pending_to_paid_then_refunded(self):
        order = _make_order()
        order.update_status(payment_status="paid")
        order.update_status(payment_status="refunded")
        assert order.payment_status == "refunded"

    def test_failed_payment_can_be_retried(self):
        order = _make_order()
        order.update_status(payment_status="failed")
        order.update_status(payment_status="pending")
        assert order.payment_status == "pending"

    def test_cannot_refund_unpaid_order(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc:
            order.update_status(payment_status="refunded")
        assert "payment_status" in exc.value.messages

    def test_payment_and_status_move_independently(self):
        order = _make_order()
        order.update_status(payment_status="paid")
        assert order.status == "pending"


class TestUpdateStatus:
    def test_requires_at_least_one_field(self):
        with pytest.raises(ValidationError):
            _make_order().update_status()

    def test_both_fields_are_validated_before_either_applies(self):
        order = _make_order()
        with pytest.raises(ValidationError):
            order.update_status(status="confirmed", payment_status="refunded")
        assert order.status == "pending"
        assert order.payment_status == "pending"

    def test_change_is_appended_to_history(self):
        order = _make_order()
        order.update_status(status="confirmed", payment_status="paid")

        assert len(order.status_history) == 2
        entry = order.status_history[-1]
        assert entry.status == "confirmed"
        assert entry.payment_status == "paid"
        assert entry.changed_by == "admin"

    def test_events_name_both_transitions(self):
        order = _make_order()
        order.update_status(status="shipped", payment_status="paid")

        status_event = next(e for e in order._events if isinstance(e, OrderStatusChanged))
        payment_event = next(e for e in order._events if isinstance(e, OrderPaymentStatusChanged))
        assert status_event.previous_status == "pending"
        assert status_event.new_status == "shipped"
        assert payment_event.new_payment_status == "paid"


class TestStoreOwnerRestrictions:
    def test_store_owner_can_move_status(self):
        order = _make_order()
        order.update_status(status="confirmed", actor="store_owner")

        assert order.status == "confirmed"
        assert order.status_history[-1].changed_by == "store_owner"

    def test_store_owner_cannot_touch_payment_status(self):
        order = _make_order()
        with pytest.raises(ValidationError) as exc:
            order.update_status(payment_status="paid", actor="store_owner")
        assert "payment_status" in exc.value.messages

    def test_store_owner_must_send_a_status(self):
        with pytest.raises(ValidationError):
            _make_order().update_status(status="pending", actor="store_owner")
