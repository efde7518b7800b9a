"""Cart aggregate — one mutable cart per user, shared by every store.

A cart line is keyed by ``(product_id, store_id)``: the same product can sit
in the cart once as a marketplace item and once per store that sells it.
Prices captured on a line are a display snapshot only; checkout always
re-reads the catalogue.

Carts are never hard-deleted. Clearing empties the item list and a
soft-deleted cart is restored in place when its owner shops again.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from ordering.cart.events import (
    CartCheckedOut,
    CartCleared,
    CartCreated,
    CartItemAdded,
    CartItemQuantityChanged,
    CartItemRemoved,
)
from ordering.cart.scope import StoreScope, normalize_store_id, scope_for
from ordering.domain import ordering
from ordering.errors import NotFound


@ordering.entity(part_of="Cart")
class CartItem:
    product_id = Identifier(required=True)
    store_id = Identifier()  # None for marketplace items
    quantity = Integer(required=True, min_value=1)
    price_at_add = Float(default=0.0, min_value=0.0)
    offer_price_at_add = Float(default=0.0, min_value=0.0)
    unit = String(max_length=20, default="piece")
    added_at = DateTime()

    def scope(self):
        return scope_for(self.store_id)

    def key(self):
        return (str(self.product_id), normalize_store_id(self.store_id))


def _positive_quantity(field_name, value):
    if value is None or isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise ValidationError({field_name: [f"{field_name} must be a positive number"]})
    return value


@ordering.aggregate
class Cart:
    user_id = Identifier(required=True, unique=True)
    items = HasMany(CartItem)
    is_deleted = Boolean(default=False)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def lines_must_be_unique_per_product_and_store(self):
        keys = [item.key() for item in self.items]
        if len(keys) != len(set(keys)):
            raise ValidationError({"items": ["A product can appear only once per store in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id):
        now = datetime.now(UTC)
        cart = cls(
            user_id=user_id,
            is_deleted=False,
            created_at=now,
            updated_at=now,
        )
        cart.raise_(CartCreated(cart_id=str(cart.id), user_id=str(user_id)))
        return cart

    def restore(self):
        """Bring a soft-deleted cart back into use, empty."""
        for item in list(self.items):
            self.remove_items(item)
        self.is_deleted = False
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def find_line(self, product_id, store_id=None):
        key = (str(product_id), normalize_store_id(store_id))
        return next((item for item in self.items if item.key() == key), None)

    def _get_line(self, product_id, store_id=None):
        line = self.find_line(product_id, store_id)
        if line is None:
            raise NotFound("Cart item", product_id)
        return line

    def lines_in(self, scope):
        """Lines whose store matches ``scope`` (a GlobalScope or StoreScope)."""
        return [item for item in self.items if scope.matches(item.store_id)]

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product, store_id=None, quantity=1):
        """Add ``quantity`` of a catalogue product, incrementing an existing line.

        ``product`` must already have been resolved in the requested scope.
        """
        _positive_quantity("quantity", quantity)
        store_id = normalize_store_id(store_id)
        now = datetime.now(UTC)

        existing = self.find_line(product.id, store_id)
        if existing:
            existing.quantity += quantity
            new_quantity = existing.quantity
        else:
            self.add_items(
                CartItem(
                    product_id=str(product.id),
                    store_id=store_id,
                    quantity=quantity,
                    price_at_add=product.price,
                    offer_price_at_add=product.selling_price(),
                    unit=product.unit or "piece",
                    added_at=now,
                )
            )
            new_quantity = quantity

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                user_id=str(self.user_id),
                product_id=str(product.id),
                store_id=store_id,
                quantity_added=quantity,
                new_quantity=new_quantity,
            )
        )

    def set_item_quantity(self, product_id, store_id=None, quantity=1):
        """Set an absolute quantity. Zero or less removes the line."""
        if quantity is None or isinstance(quantity, bool) or not isinstance(quantity, int):
            raise ValidationError({"quantity": ["quantity must be a number"]})

        line = self._get_line(product_id, store_id)
        if quantity <= 0:
            self.remove_item(product_id, store_id)
            return

        previous_quantity = line.quantity
        line.quantity = quantity
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                product_id=str(product_id),
                store_id=normalize_store_id(store_id),
                previous_quantity=previous_quantity,
                new_quantity=quantity,
            )
        )

    def decrease_item(self, product_id, store_id=None, decrement_by=1):
        """Subtract from a line's quantity, removing the line when nothing is left."""
        _positive_quantity("decrement_by", decrement_by)
        line = self._get_line(product_id, store_id)

        remaining = line.quantity - decrement_by
        if remaining <= 0:
            self.remove_item(product_id, store_id)
            return

        previous_quantity = line.quantity
        line.quantity = remaining
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemQuantityChanged(
                cart_id=str(self.id),
                product_id=str(product_id),
                store_id=normalize_store_id(store_id),
                previous_quantity=previous_quantity,
                new_quantity=remaining,
            )
        )

    def remove_item(self, product_id, store_id=None):
        line = self._get_line(product_id, store_id)
        self.remove_items(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartItemRemoved(
                cart_id=str(self.id),
                product_id=str(product_id),
                store_id=normalize_store_id(store_id),
            )
        )

    def clear(self, store_id=None):
        """Remove one store's lines, or every line when no store is given.

        Without a store this is a full reset: marketplace and store lines alike.
        """
        store_id = normalize_store_id(store_id)
        if store_id is None:
            doomed = list(self.items)
        else:
            doomed = self.lines_in(StoreScope(store_id=store_id))

        for line in doomed:
            self.remove_items(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCleared(
                cart_id=str(self.id),
                store_id=store_id,
                removed_count=len(doomed),
            )
        )
        return len(doomed)

    # -------------------------------------------------------------------
    # Checkout
    # -------------------------------------------------------------------
    def check_out(self, keys, scope, order_id):
        """Remove the lines consumed by an order, identified by ``(product, store)`` key.

        Lines outside the checked-out selection are left untouched.
        """
        keys = set(keys)
        consumed = [item for item in self.items if item.key() in keys and scope.matches(item.store_id)]
        for line in consumed:
            self.remove_items(line)
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CartCheckedOut(
                cart_id=str(self.id),
                order_id=str(order_id),
                scope=scope.describe(),
                product_ids=[str(item.product_id) for item in consumed],
            )
        )
        return consumed
