"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String

from ordering.domain import ordering


@ordering.event(part_of="Order")
class OrderPlaced:
    """A checkout produced a new order."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    store_id = Identifier()
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    total_discount = Float(required=True)
    grand_total = Float(required=True)
    payment_method = String(max_length=20)
    placed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderStatusChanged:
    """The fulfilment status of an order moved."""

    __version__ = 1

    order_id = Identifier(required=True)
    store_id = Identifier()
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    changed_by = String(required=True, max_length=20)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentStatusChanged:
    """The payment status of an order moved."""

    __version__ = 1

    order_id = Identifier(required=True)
    previous_payment_status = String(required=True, max_length=20)
    new_payment_status = String(required=True, max_length=20)
    changed_by = String(required=True, max_length=20)
    changed_at = DateTime(required=True)


@ordering.event(part_of="Order")
class OrderPaymentLinked:
    """A payment record was attached to the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = Identifier(required=True)


@ordering.event(part_of="Order")
class OrderDeleted:
    """The order was soft-deleted by an admin."""

    __version__ = 1

    order_id = Identifier(required=True)
    deleted_at = DateTime(required=True)
