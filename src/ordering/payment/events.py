"""Domain events for the Payment aggregate."""

from protean.fields import DateTime, Float, Identifier, String

from ordering.domain import ordering


@ordering.event(part_of="Payment")
class PaymentInitiated:
    __version__ = 1

    payment_id = Identifier(required=True)
    user_id = Identifier(required=True)
    order_id = Identifier()
    payment_method = String(required=True, max_length=20)
    amount = Float(required=True)
    currency = String(max_length=3)
    status = String(required=True, max_length=20)
    initiated_at = DateTime(required=True)


@ordering.event(part_of="Payment")
class PaymentCompleted:
    __version__ = 1

    payment_id = Identifier(required=True)
    user_id = Identifier(required=True)
    transaction_id = String(max_length=100)
    completed_via = String(max_length=50)
    completed_at = DateTime(required=True)


@ordering.event(part_of="Payment")
class PaymentFailed:
    __version__ = 1

    payment_id = Identifier(required=True)
    user_id = Identifier(required=True)
    error_message = String(max_length=500)
    failed_at = DateTime(required=True)


@ordering.event(part_of="Payment")
class PaymentLinkedToOrder:
    __version__ = 1

    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)
