"""Checkout reconciliation — find orders whose cart lines were never removed.

Checkout writes the order and the shrunken cart together, so a leftover line
only appears if a write was lost outside the domain (manual edits, a restore
from backup, an older deployment). This sweep is triggered by an external
scheduler through the maintenance endpoint. It flags every pending order
that still has matching lines in its owner's cart and, when asked to repair,
removes those lines.

A line matches when it has the same ``(product_id, store_id)`` key as an
order item and was added to the cart before the order was placed. Lines
added afterwards are a fresh purchase intent and are left alone.
"""

from datetime import UTC, datetime, timedelta

import structlog
from protean import handle
from protean.fields import Boolean, DateTime, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.scope import normalize_store_id, scope_for
from ordering.domain import ordering
from ordering.order.order import Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class ReconcileCheckouts:
    """Flag (and optionally repair) recent orders with uncleared cart lines."""

    since_hours = Integer(min_value=1)  # Defaults to RECONCILE_WINDOW_HOURS
    repair = Boolean(default=False)
    as_of = DateTime()  # Optional: defaults to now


def _as_utc(moment):
    if moment is None:
        return None
    return moment.replace(tzinfo=UTC) if moment.tzinfo is None else moment.astimezone(UTC)


def stale_lines(cart, order):
    """Cart lines that the given order should already have consumed."""
    store_id = normalize_store_id(order.store_id)
    ordered = {(str(item.product_id), store_id) for item in order.items}
    placed_at = _as_utc(order.created_at)

    return [
        line
        for line in cart.items
        if line.key() in ordered and line.added_at is not None and _as_utc(line.added_at) < placed_at
    ]


@ordering.command_handler(part_of=Cart)
class ReconcileCheckoutsHandler:
    @handle(ReconcileCheckouts)
    def reconcile_checkouts(self, command):
        as_of = _as_utc(command.as_of) or datetime.now(UTC)
        window = command.since_hours or current_domain.config["custom"].get("RECONCILE_WINDOW_HOURS", 24)
        cutoff = as_of - timedelta(hours=int(window))

        logger.info("Reconciling checkouts", cutoff=cutoff.isoformat(), repair=bool(command.repair))

        orders = current_domain.repository_for(Order).pending_since(cutoff)
        cart_repo = current_domain.repository_for(Cart)

        carts = {}
        repaired = {}
        flagged = 0
        for order in orders:
            user_id = str(order.user_id)
            if user_id not in carts:
                carts[user_id] = cart_repo.for_user(user_id)
            cart = carts[user_id]
            if cart is None:
                continue

            leftovers = stale_lines(cart, order)
            if not leftovers:
                continue

            flagged += 1
            logger.warning(
                "order created but cart not cleared",
                order_id=str(order.id),
                user_id=str(order.user_id),
                store_id=order.store_id,
                product_ids=[str(line.product_id) for line in leftovers],
            )

            if command.repair:
                cart.check_out([line.key() for line in leftovers], scope_for(order.store_id), order.id)
                repaired[user_id] = cart

        for cart in repaired.values():
            cart_repo.add(cart)

        logger.info("Checkout reconciliation complete", flagged_count=flagged)
        return flagged
