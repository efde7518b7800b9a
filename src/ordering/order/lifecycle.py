"""Order lifecycle — status updates and soft deletion.

Admins may move either status axis on any order. Store owners act only on
orders placed against their own store, and only on the fulfilment status;
an order outside their store is reported as not found.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from ordering.domain import ordering
from ordering.order.order import Actor, Order

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    status = String(max_length=20)
    payment_status = String(max_length=20)
    actor = String(max_length=20, default=Actor.ADMIN.value)
    store_id = Identifier()  # Required when the actor is a store owner


@ordering.command(part_of="Order")
class SoftDeleteOrder:
    order_id = Identifier(required=True)


@ordering.command_handler(part_of=Order)
class OrderLifecycleHandler:
    @handle(UpdateOrderStatus)
    def update_order_status(self, command):
        repo = current_domain.repository_for(Order)
        actor = command.actor or Actor.ADMIN.value

        if actor == Actor.STORE_OWNER.value:
            if not command.store_id:
                raise ValidationError({"store_id": ["store_id is required for store owners"]})
            order = repo.get_visible(command.order_id, store_id=command.store_id)
        else:
            order = repo.get_visible(command.order_id)

        order.update_status(
            status=command.status,
            payment_status=command.payment_status,
            actor=actor,
        )
        repo.add(order)

        logger.info(
            "Order status updated",
            order_id=str(order.id),
            status=order.status,
            payment_status=order.payment_status,
            actor=actor,
        )
        return str(order.id)

    @handle(SoftDeleteOrder)
    def soft_delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get_visible(command.order_id)
        order.soft_delete()
        repo.add(order)

        logger.info("Order deleted", order_id=str(order.id))
        return str(order.id)
