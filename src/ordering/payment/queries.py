"""Read side for payments."""

from protean.utils.globals import current_domain

from ordering.payment.payment import Payment, PaymentStatus


def payment_view(payment: Payment) -> dict:
    return {
        "payment_id": str(payment.id),
        "user_id": str(payment.user_id),
        "order_id": str(payment.order_id) if payment.order_id else None,
        "payment_method": payment.payment_method,
        "amount": payment.amount,
        "currency": payment.currency,
        "status": payment.status,
        "transaction_id": payment.transaction_id or "",
        "upi_id": payment.upi_id or "",
        "card_last4": payment.card_last4 or "",
        "bank_name": payment.bank_name or "",
        "metadata": dict(payment.meta or {}),
        "error_message": payment.error_message or "",
        "created_at_display": payment.created_at_display,
        "updated_at_display": payment.updated_at_display,
    }


def payment_status(user_id, payment_id) -> dict:
    payment = current_domain.repository_for(Payment).get_for_user(payment_id, user_id)
    return {
        "payment": payment_view(payment),
        "is_verified": payment.status == PaymentStatus.COMPLETED.value,
        "is_failed": payment.status == PaymentStatus.FAILED.value,
        "is_pending": payment.status == PaymentStatus.PENDING.value,
    }


def my_payments(user_id) -> dict:
    payments = current_domain.repository_for(Payment).for_user(user_id)
    summary = {"total": len(payments)}
    for status in PaymentStatus:
        summary[status.value] = sum(1 for payment in payments if payment.status == status.value)
    return {
        "payments": [payment_view(payment) for payment in payments],
        "count": len(payments),
        "summary": summary,
    }
