"""Cart management — get-or-create and clear commands and handler."""

import structlog
from protean import handle
from protean.fields import Identifier
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of="Cart")
class GetOrCreateCart:
    """Return the user's cart, creating an empty one on first use."""

    user_id = Identifier(required=True)


@ordering.command(part_of="Cart")
class ClearCart:
    """Clear one store's lines, or every line when ``store_id`` is omitted."""

    user_id = Identifier(required=True)
    store_id = Identifier()


@ordering.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(GetOrCreateCart)
    def get_or_create_cart(self, command):
        repo = current_domain.repository_for(Cart)
        existing = repo.for_user(command.user_id)
        if existing is not None:
            return str(existing.id)

        cart = repo.get_or_create(command.user_id)
        repo.add(cart)
        logger.info("Cart created", user_id=str(command.user_id), cart_id=str(cart.id))
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        removed = cart.clear(store_id=command.store_id)
        repo.add(cart)
        return removed
