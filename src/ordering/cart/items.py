"""Cart item management — commands and handler.

Every command is one read-modify-write of the user's Cart. The aggregate's
optimistic version guards against a concurrent write to the same cart.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.catalogue.lookup import find_product
from ordering.domain import ordering


@ordering.command(part_of="Cart")
class AddToCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier()
    quantity = Integer(default=1, min_value=1)


@ordering.command(part_of="Cart")
class UpdateCartItemQuantity:
    """Set an absolute quantity; zero or less removes the line."""

    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier()
    quantity = Integer(required=True)


@ordering.command(part_of="Cart")
class DecreaseCartItem:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier()
    decrement_by = Integer(default=1, min_value=1)


@ordering.command(part_of="Cart")
class RemoveFromCart:
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier()


@ordering.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        product = find_product(command.product_id, command.store_id)

        repo = current_domain.repository_for(Cart)
        cart = repo.get_or_create(command.user_id)
        cart.add_item(
            product=product,
            store_id=command.store_id,
            quantity=command.quantity or 1,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(UpdateCartItemQuantity)
    def update_cart_item_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        cart.set_item_quantity(
            product_id=command.product_id,
            store_id=command.store_id,
            quantity=command.quantity,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(DecreaseCartItem)
    def decrease_cart_item(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        cart.decrease_item(
            product_id=command.product_id,
            store_id=command.store_id,
            decrement_by=command.decrement_by or 1,
        )
        repo.add(cart)
        return str(cart.id)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_user(command.user_id)
        cart.remove_item(product_id=command.product_id, store_id=command.store_id)
        repo.add(cart)
        return str(cart.id)
