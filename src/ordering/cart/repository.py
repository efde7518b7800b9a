"""Repository for the Cart aggregate."""

from ordering.cart.cart import Cart
from ordering.domain import ordering
from ordering.errors import NotFound


@ordering.repository(part_of=Cart)
class CartRepository:
    """Carts are looked up by owner rather than by id."""

    def for_user(self, user_id, include_deleted=False) -> Cart | None:
        """Return the user's cart, or None. Soft-deleted carts only when asked."""
        filters = {"user_id": str(user_id)}
        if not include_deleted:
            filters["is_deleted"] = False
        return self._dao.query.filter(**filters).all().first

    def get_for_user(self, user_id) -> Cart:
        cart = self.for_user(user_id)
        if cart is None:
            raise NotFound("Cart")
        return cart

    def get_or_create(self, user_id) -> Cart:
        """The user's live cart, restoring a soft-deleted one or creating a new one.

        The returned cart is not persisted; callers add it once they are done.
        """
        cart = self.for_user(user_id, include_deleted=True)
        if cart is None:
            return Cart.create(user_id=user_id)
        if cart.is_deleted:
            cart.restore()
        return cart
