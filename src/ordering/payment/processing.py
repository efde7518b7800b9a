"""Payment processing — commands and handler.

Gateway integration is out of scope: completion and failure are driven by
explicit commands, which is also how tests and the admin tooling simulate
a gateway callback.
"""

import structlog
from protean import handle
from protean.fields import Dict, Float, Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Order
from ordering.payment.payment import Payment

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Payment")
class InitiatePayment:
    user_id = Identifier(required=True)
    amount = Float(required=True)
    payment_method = String(max_length=20, default="cod")
    order_id = Identifier()
    meta = Dict()


@ordering.command(part_of="Payment")
class VerifyPayment:
    user_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    transaction_id = String(max_length=100)
    upi_id = String(max_length=100)
    card_last4 = String(max_length=4)
    bank_name = String(max_length=100)


@ordering.command(part_of="Payment")
class CompletePayment:
    user_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    transaction_id = String(max_length=100)
    upi_id = String(max_length=100)
    card_last4 = String(max_length=4)
    bank_name = String(max_length=100)


@ordering.command(part_of="Payment")
class FailPayment:
    user_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    error_message = String(max_length=500)


@ordering.command(part_of="Payment")
class LinkPaymentToOrder:
    """Attach a payment to one of the same user's orders, on both sides."""

    user_id = Identifier(required=True)
    payment_id = Identifier(required=True)
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Payment)
class PaymentHandler:
    @handle(InitiatePayment)
    def initiate_payment(self, command):
        payment = Payment.initiate(
            user_id=command.user_id,
            amount=command.amount,
            payment_method=command.payment_method,
            currency=current_domain.config["custom"].get("DEFAULT_CURRENCY", "INR"),
            order_id=command.order_id,
            metadata=command.meta,
        )
        current_domain.repository_for(Payment).add(payment)

        logger.info(
            "Payment initiated",
            payment_id=str(payment.id),
            user_id=str(command.user_id),
            payment_method=payment.payment_method,
            status=payment.status,
        )
        return str(payment.id)

    @handle(VerifyPayment)
    def verify_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get_for_user(command.payment_id, command.user_id)
        payment.verify(
            transaction_id=command.transaction_id,
            upi_id=command.upi_id,
            card_last4=command.card_last4,
            bank_name=command.bank_name,
        )
        repo.add(payment)
        return str(payment.id)

    @handle(CompletePayment)
    def complete_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get_for_user(command.payment_id, command.user_id)
        if payment.complete(
            transaction_id=command.transaction_id,
            upi_id=command.upi_id,
            card_last4=command.card_last4,
            bank_name=command.bank_name,
        ):
            repo.add(payment)
            logger.info("Payment completed", payment_id=str(payment.id), transaction_id=payment.transaction_id)
        return str(payment.id)

    @handle(FailPayment)
    def fail_payment(self, command):
        repo = current_domain.repository_for(Payment)
        payment = repo.get_for_user(command.payment_id, command.user_id)
        payment.fail(error_message=command.error_message)
        repo.add(payment)

        logger.warning("Payment failed", payment_id=str(payment.id), error_message=payment.error_message)
        return str(payment.id)

    @handle(LinkPaymentToOrder)
    def link_payment_to_order(self, command):
        order_repo = current_domain.repository_for(Order)
        order = order_repo.get_visible(command.order_id, user_id=command.user_id)

        payment_repo = current_domain.repository_for(Payment)
        payment = payment_repo.get_for_user(command.payment_id, command.user_id)

        payment.link_to_order(order.id)
        order.link_payment(payment.id)
        payment_repo.add(payment)
        order_repo.add(order)

        logger.info("Payment linked to order", payment_id=str(payment.id), order_id=str(order.id))
        return str(payment.id)
