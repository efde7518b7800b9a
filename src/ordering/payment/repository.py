"""Repository for the Payment aggregate."""

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.errors import NotFound
from ordering.payment.payment import Payment


@ordering.repository(part_of=Payment)
class PaymentRepository:
    def get_for_user(self, payment_id, user_id) -> Payment:
        """A non-deleted payment owned by ``user_id``; anything else is not found."""
        try:
            payment = self.get(str(payment_id))
        except ObjectNotFoundError:
            raise NotFound("Payment", payment_id) from None

        if payment.is_deleted or str(payment.user_id) != str(user_id):
            raise NotFound("Payment", payment_id)
        return payment

    def for_user(self, user_id) -> list[Payment]:
        return (
            self._dao.query.filter(user_id=str(user_id), is_deleted=False).order_by("-created_at").limit(None).all().items
        )
