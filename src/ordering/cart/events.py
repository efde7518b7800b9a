"""Domain events for the Cart aggregate."""

from protean.fields import Identifier, Integer, List, String

from ordering.domain import ordering


@ordering.event(part_of="Cart")
class CartCreated:
    """A user's cart was created on first use."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)


@ordering.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, or its existing line was incremented."""

    __version__ = 1

    cart_id = Identifier(required=True)
    user_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier()
    quantity_added = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartItemQuantityChanged:
    """The quantity of a cart line was set or decreased."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier()
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)


@ordering.event(part_of="Cart")
class CartItemRemoved:
    """A line was removed from the cart."""

    __version__ = 1

    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    store_id = Identifier()


@ordering.event(part_of="Cart")
class CartCleared:
    """Lines were cleared from the cart, either all of them or one store's."""

    __version__ = 1

    cart_id = Identifier(required=True)
    store_id = Identifier()
    removed_count = Integer(required=True)


@ordering.event(part_of="Cart")
class CartCheckedOut:
    """The lines of one scope were consumed by a placed order."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
    scope = String(required=True, max_length=100)
    product_ids = List(content_type=String(max_length=50))
