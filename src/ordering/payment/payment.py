"""Payment aggregate — a payment record kept beside, not inside, the order.

A payment is created before or after checkout and linked to its order
later. Cash on delivery needs no gateway round trip and is completed as
soon as it is initiated; every other method waits for a completion or a
verification carrying a transaction reference.

Status:
    pending → completed | failed
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Dict, Float, Identifier, String

from ordering.domain import ordering
from ordering.payment.events import (
    PaymentCompleted,
    PaymentFailed,
    PaymentInitiated,
    PaymentLinkedToOrder,
)
from ordering.utils.display import display_timestamp


class PaymentStatus(Enum):
    PENDING = "pending"
    COMPLETED = "completed"
    FAILED = "failed"


class PaymentMethod(Enum):
    COD = "cod"
    UPI = "upi"
    CARD = "card"
    NETBANKING = "netbanking"
    WALLET = "wallet"


@ordering.aggregate
class Payment:
    user_id = Identifier(required=True)
    order_id = Identifier()
    payment_method = String(choices=PaymentMethod, required=True)
    amount = Float(required=True, min_value=0.0)
    currency = String(max_length=3, default="INR")
    status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)
    transaction_id = String(max_length=100, default="")
    upi_id = String(max_length=100, default="")
    card_last4 = String(max_length=4, default="")
    bank_name = String(max_length=100, default="")
    meta = Dict()  # "metadata" in API payloads
    error_message = String(max_length=500, default="")
    is_deleted = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()
    created_at_display = String(max_length=50)
    updated_at_display = String(max_length=50)

    @classmethod
    def initiate(cls, user_id, amount, payment_method=None, currency="INR", order_id=None, metadata=None):
        method = payment_method or PaymentMethod.COD.value
        if method not in {m.value for m in PaymentMethod}:
            raise ValidationError(
                {"payment_method": ["Invalid payment method. Allowed: cod, upi, card, netbanking, wallet"]}
            )
        if amount is None or amount <= 0:
            raise ValidationError({"amount": ["Valid amount is required"]})

        now = datetime.now(UTC)
        stamp = display_timestamp(now)
        status = PaymentStatus.COMPLETED if method == PaymentMethod.COD.value else PaymentStatus.PENDING

        payment = cls(
            user_id=user_id,
            order_id=order_id,
            payment_method=method,
            amount=amount,
            currency=currency or "INR",
            status=status.value,
            meta=dict(metadata or {}),
            is_deleted=False,
            created_at=now,
            updated_at=now,
            created_at_display=stamp,
            updated_at_display=stamp,
        )
        payment.raise_(
            PaymentInitiated(
                payment_id=str(payment.id),
                user_id=str(user_id),
                order_id=order_id,
                payment_method=method,
                amount=amount,
                currency=payment.currency,
                status=status.value,
                initiated_at=now,
            )
        )
        return payment

    def is_completed(self):
        return self.status == PaymentStatus.COMPLETED.value

    def _touch(self, now):
        self.updated_at = now
        self.updated_at_display = display_timestamp(now)

    def complete(self, transaction_id=None, upi_id="", card_last4="", bank_name="", via="manual_completion"):
        """Mark the payment completed. Returns False if it already was."""
        if self.is_completed():
            return False

        now = datetime.now(UTC)
        self.status = PaymentStatus.COMPLETED.value
        self.transaction_id = transaction_id or f"TXN{int(now.timestamp() * 1000)}"
        self.upi_id = upi_id or ""
        self.card_last4 = card_last4 or ""
        self.bank_name = bank_name or ""
        self.error_message = ""
        self.meta = {**(self.meta or {}), "completed_at": now.isoformat(), "completed_via": via}
        self._touch(now)

        self.raise_(
            PaymentCompleted(
                payment_id=str(self.id),
                user_id=str(self.user_id),
                transaction_id=self.transaction_id,
                completed_via=via,
                completed_at=now,
            )
        )
        return True

    def verify(self, transaction_id=None, upi_id="", card_last4="", bank_name=""):
        """Confirm a payment can back a checkout.

        Completed and cash-on-delivery payments verify as they are. An online
        payment needs the gateway's transaction id, which completes it.
        """
        if self.is_completed() or self.payment_method == PaymentMethod.COD.value:
            return
        if not transaction_id:
            raise ValidationError({"transaction_id": ["Payment not completed. Please complete payment first."]})

        self.complete(
            transaction_id=transaction_id,
            upi_id=upi_id,
            card_last4=card_last4,
            bank_name=bank_name,
            via="api_verification",
        )

    def fail(self, error_message=None):
        if self.is_completed():
            raise ValidationError({"status": ["A completed payment cannot be marked as failed"]})

        now = datetime.now(UTC)
        self.status = PaymentStatus.FAILED.value
        self.error_message = error_message or "Payment failed"
        self.meta = {**(self.meta or {}), "failed_at": now.isoformat()}
        self._touch(now)

        self.raise_(
            PaymentFailed(
                payment_id=str(self.id),
                user_id=str(self.user_id),
                error_message=self.error_message,
                failed_at=now,
            )
        )

    def link_to_order(self, order_id):
        self.order_id = str(order_id)
        self._touch(datetime.now(UTC))
        self.raise_(PaymentLinkedToOrder(payment_id=str(self.id), order_id=str(order_id)))
