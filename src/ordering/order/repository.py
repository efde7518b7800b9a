"""Repository for the Order aggregate.

Soft-deleted orders are invisible to every lookup here.
"""

from datetime import UTC

from protean.exceptions import ObjectNotFoundError

from ordering.domain import ordering
from ordering.errors import NotFound
from ordering.order.order import Order

GLOBAL_SCOPE = "global"
STORE_SCOPE = "store"


def _as_utc(moment):
    if moment is None:
        return None
    return moment.replace(tzinfo=UTC) if moment.tzinfo is None else moment.astimezone(UTC)


@ordering.repository(part_of=Order)
class OrderRepository:
    def get_visible(self, order_id, user_id=None, store_id=None) -> Order:
        """Load a non-deleted order, optionally requiring its owner or its store.

        A mismatch on either is reported as not found.
        """
        try:
            order = self.get(str(order_id))
        except ObjectNotFoundError:
            raise NotFound("Order", order_id) from None

        if order.is_deleted:
            raise NotFound("Order", order_id)
        if user_id is not None and str(order.user_id) != str(user_id):
            raise NotFound("Order", order_id)
        if store_id is not None and not order.belongs_to_store(store_id):
            raise NotFound("Order", order_id)
        return order

    def by_checkout_key(self, user_id, checkout_key) -> Order | None:
        return (
            self._dao.query.filter(user_id=str(user_id), checkout_key=checkout_key, is_deleted=False).all().first
        )

    def search(
        self,
        user_id=None,
        store_id=None,
        scope=None,
        status=None,
        payment_status=None,
        start=None,
        end=None,
    ) -> list[Order]:
        """Non-deleted orders, newest first.

        ``scope="global"`` restricts to marketplace orders and ``scope="store"``
        to store orders; a ``store_id`` restricts to that store's orders. Dates are inclusive bounds on
        ``created_at``.
        """
        filters = {"is_deleted": False}
        if user_id is not None:
            filters["user_id"] = str(user_id)
        if store_id is not None:
            filters["store_id"] = str(store_id)
        if status is not None:
            filters["status"] = status
        if payment_status is not None:
            filters["payment_status"] = payment_status

        orders = self._dao.query.filter(**filters).order_by("-created_at").limit(None).all().items

        if scope == GLOBAL_SCOPE and store_id is None:
            orders = [order for order in orders if order.store_id is None]
        elif scope == STORE_SCOPE and store_id is None:
            orders = [order for order in orders if order.store_id is not None]

        start, end = _as_utc(start), _as_utc(end)
        if start is not None:
            orders = [order for order in orders if _as_utc(order.created_at) >= start]
        if end is not None:
            orders = [order for order in orders if _as_utc(order.created_at) <= end]
        return orders

    def pending_since(self, cutoff) -> list[Order]:
        """Pending, non-deleted orders placed at or after ``cutoff``."""
        return self.search(status="pending", start=cutoff)
