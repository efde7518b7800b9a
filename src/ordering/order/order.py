"""Order aggregate — the immutable record of a completed checkout.

An order is created once, from the priced lines of one checkout scope, and
from then on only its two state axes move: the fulfilment ``status`` and the
independent ``payment_status``. Items, totals, the shipping snapshot and the
payment method never change after placement.

Status (fulfilment):
    pending → confirmed → shipped → delivered
    cancelled (from any state except delivered)

Payment status:
    pending → paid | failed, failed → pending | paid, paid → refunded
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    List,
    String,
    Text,
    ValueObject,
)

from ordering.domain import ordering
from ordering.order.events import (
    OrderDeleted,
    OrderPaymentLinked,
    OrderPaymentStatusChanged,
    OrderPlaced,
    OrderStatusChanged,
)
from ordering.utils.display import display_timestamp


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"
    REFUNDED = "refunded"


class PaymentMethod(Enum):
    COD = "cod"
    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    WALLET = "wallet"
    OTHER = "other"


class Actor(Enum):
    SYSTEM = "system"
    ADMIN = "admin"
    STORE_OWNER = "store_owner"


_STATUS_TRANSITIONS = {
    OrderStatus.PENDING: {
        OrderStatus.CONFIRMED,
        OrderStatus.SHIPPED,
        OrderStatus.DELIVERED,
        OrderStatus.CANCELLED,
    },
    OrderStatus.CONFIRMED: {OrderStatus.SHIPPED, OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED, OrderStatus.CANCELLED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

_PAYMENT_TRANSITIONS = {
    PaymentStatus.PENDING: {PaymentStatus.PAID, PaymentStatus.FAILED},
    PaymentStatus.FAILED: {PaymentStatus.PENDING, PaymentStatus.PAID},  # Retry
    PaymentStatus.PAID: {PaymentStatus.REFUNDED},
    PaymentStatus.REFUNDED: set(),  # Terminal
}

# Statuses a store owner may set
STORE_OWNER_STATUSES = {
    OrderStatus.CONFIRMED,
    OrderStatus.SHIPPED,
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
}


def _parse(enum_cls, value, field_name):
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError({field_name: [f"Invalid {field_name} `{value}`. Allowed: {allowed}"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@ordering.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships, captured at checkout.

    A snapshot, not a reference: it survives the user editing or deleting
    their saved addresses. Every field is optional.
    """

    full_name = Text(default="")
    mobile = Text(default="")
    email = Text(default="")
    address_line1 = Text(default="")
    address_line2 = Text(default="")
    landmark = Text(default="")
    city = Text(default="")
    state = Text(default="")
    pincode = Text(default="")
    country = Text(default="")
    latitude = Float()
    longitude = Float()
    accuracy = Float()


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@ordering.entity(part_of="Order")
class OrderItem:
    """A product line copied from the catalogue at checkout time."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    images = List(content_type=String(max_length=1024))
    unit = String(max_length=20, default="piece")
    quantity = Integer(required=True, min_value=1)
    price = Float(required=True, min_value=0.0)
    offer_price = Float(required=True, min_value=0.0)
    percentage_off = Integer(default=0, min_value=0, max_value=100)
    line_total = Float(required=True, min_value=0.0)


@ordering.entity(part_of="Order")
class StatusChange:
    """One entry of the order's audit trail."""

    status = String(max_length=20)
    payment_status = String(max_length=20)
    changed_at = DateTime(required=True)
    changed_by = String(choices=Actor, required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@ordering.aggregate
class Order:
    user_id = Identifier(required=True)
    store_id = Identifier()  # None for marketplace orders
    items = HasMany(OrderItem)
    subtotal = Float(default=0.0, min_value=0.0)
    total_discount = Float(default=0.0)
    grand_total = Float(default=0.0, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.COD.value)
    payment_id = Identifier()
    shipping_address = ValueObject(ShippingAddress)
    notes = Text()
    checkout_key = String(max_length=100)
    status_history = HasMany(StatusChange)
    is_deleted = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()
    created_at_display = String(max_length=50)
    updated_at_display = String(max_length=50)

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        user_id,
        store_id,
        lines,
        totals,
        shipping_address=None,
        payment_method=None,
        notes=None,
        checkout_key=None,
    ):
        """Create an order from priced checkout lines.

        Args:
            user_id: The buyer.
            store_id: The store checked out against, or None for marketplace items.
            lines: ``PricedLine`` objects, all from the same scope.
            totals: ``OrderTotals`` computed from ``lines``.
            shipping_address: Dict of address fields; missing fields stay blank.
            payment_method: One of ``PaymentMethod``; defaults to cash on delivery.
        """
        if not lines:
            raise ValidationError({"items": ["An order needs at least one item"]})

        method = _parse(PaymentMethod, payment_method or PaymentMethod.COD.value, "payment_method")
        now = datetime.now(UTC)
        stamp = display_timestamp(now)

        order = cls(
            user_id=user_id,
            store_id=store_id,
            subtotal=totals.subtotal,
            total_discount=totals.total_discount,
            grand_total=totals.grand_total,
            status=OrderStatus.PENDING.value,
            payment_status=PaymentStatus.PENDING.value,
            payment_method=method.value,
            shipping_address=ShippingAddress(**(shipping_address or {})),
            notes=notes or "",
            checkout_key=checkout_key,
            is_deleted=False,
            created_at=now,
            updated_at=now,
            created_at_display=stamp,
            updated_at_display=stamp,
        )
        for line in lines:
            order.add_items(OrderItem(**line.as_order_item()))
        order.add_status_history(
            StatusChange(
                status=OrderStatus.PENDING.value,
                payment_status=PaymentStatus.PENDING.value,
                changed_at=now,
                changed_by=Actor.SYSTEM.value,
            )
        )

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                store_id=store_id,
                item_count=len(lines),
                subtotal=totals.subtotal,
                total_discount=totals.total_discount,
                grand_total=totals.grand_total,
                payment_method=method.value,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # State transition helpers
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _STATUS_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    def _assert_can_transition_payment(self, target_status):
        current = PaymentStatus(self.payment_status)
        if target_status not in _PAYMENT_TRANSITIONS.get(current, set()):
            raise ValidationError(
                {"payment_status": [f"Cannot transition from {current.value} to {target_status.value}"]}
            )

    def _touch(self, now):
        self.updated_at = now
        self.updated_at_display = display_timestamp(now)

    def belongs_to_store(self, store_id):
        return self.store_id is not None and str(self.store_id) == str(store_id)

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def update_status(self, status=None, payment_status=None, actor=Actor.ADMIN.value):
        """Move the fulfilment and/or payment status and record the change.

        Both targets are validated before either is applied.
        """
        if status is None and payment_status is None:
            raise ValidationError({"status": ["Provide status and/or payment_status to update"]})

        changed_by = _parse(Actor, actor, "actor")
        target_status = _parse(OrderStatus, status, "status") if status is not None else None
        target_payment = (
            _parse(PaymentStatus, payment_status, "payment_status") if payment_status is not None else None
        )

        if changed_by == Actor.STORE_OWNER:
            if target_payment is not None:
                raise ValidationError({"payment_status": ["Store owners can only update the order status"]})
            if target_status not in STORE_OWNER_STATUSES:
                raise ValidationError(
                    {"status": ["Valid status required: confirmed, shipped, delivered, or cancelled"]}
                )

        if target_status is not None:
            self._assert_can_transition(target_status)
        if target_payment is not None:
            self._assert_can_transition_payment(target_payment)

        now = datetime.now(UTC)

        if target_status is not None:
            previous = self.status
            self.status = target_status.value
            self.raise_(
                OrderStatusChanged(
                    order_id=str(self.id),
                    store_id=self.store_id,
                    previous_status=previous,
                    new_status=target_status.value,
                    changed_by=changed_by.value,
                    changed_at=now,
                )
            )

        if target_payment is not None:
            previous = self.payment_status
            self.payment_status = target_payment.value
            self.raise_(
                OrderPaymentStatusChanged(
                    order_id=str(self.id),
                    previous_payment_status=previous,
                    new_payment_status=target_payment.value,
                    changed_by=changed_by.value,
                    changed_at=now,
                )
            )

        self.add_status_history(
            StatusChange(
                status=target_status.value if target_status else None,
                payment_status=target_payment.value if target_payment else None,
                changed_at=now,
                changed_by=changed_by.value,
            )
        )
        self._touch(now)

    def link_payment(self, payment_id):
        self.payment_id = str(payment_id)
        self._touch(datetime.now(UTC))
        self.raise_(OrderPaymentLinked(order_id=str(self.id), payment_id=str(payment_id)))

    def soft_delete(self):
        if self.is_deleted:
            raise ValidationError({"order": ["Order is already deleted"]})

        now = datetime.now(UTC)
        self.is_deleted = True
        self._touch(now)
        self.raise_(OrderDeleted(order_id=str(self.id), deleted_at=now))
