"""Checkout — turn one scope of the user's cart into an order.

A cart may hold marketplace items and items from several stores at once.
Each checkout selects exactly one of those partitions, reprices it from the
live catalogue, places the order and removes the consumed lines from the
cart. The order and the shrunken cart are written in the same unit of work,
so either both persist or neither does.

Lines from other scopes are never read past selection and never modified.
"""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Dict, Identifier, String, Text
from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.scope import StoreScope, scope_for
from ordering.catalogue.lookup import find_products, find_store
from ordering.checkout.pricing import order_totals, price_line
from ordering.domain import ordering
from ordering.errors import EmptyCart, NoItemsForScope, ProductUnavailable
from ordering.order.order import Order

logger = structlog.get_logger(__name__)

SHIPPING_FIELDS = (
    "full_name",
    "mobile",
    "email",
    "address_line1",
    "address_line2",
    "landmark",
    "city",
    "state",
    "pincode",
    "country",
)
LOCATION_FIELDS = ("latitude", "longitude", "accuracy")


@ordering.command(part_of="Order")
class Checkout:
    """Check out the global partition of the cart, or one store's partition."""

    user_id = Identifier(required=True)
    store_id = Identifier()
    shipping_address = Dict()
    payment_method = String(max_length=20)
    notes = Text()
    checkout_key = String(max_length=100)  # Client-supplied idempotency token


def shipping_snapshot(address: dict | None) -> dict:
    """Keep the known address fields, flattening an optional ``location`` block.

    A missing country falls back to the configured default.
    """
    address = dict(address or {})
    snapshot = {name: str(address[name]) for name in SHIPPING_FIELDS if address.get(name) is not None}

    location = address.get("location") or {}
    for name in LOCATION_FIELDS:
        value = address.get(name, location.get(name))
        if value is not None:
            snapshot[name] = float(value)

    if not snapshot.get("country"):
        snapshot["country"] = current_domain.config["custom"].get("DEFAULT_COUNTRY", "")
    return snapshot


def price_selection(lines, scope):
    """Reprice the selected cart lines from the catalogue.

    Every unavailable product is collected before failing, so the caller
    sees the full list at once.
    """
    products = find_products(line.product_id for line in lines)

    unavailable = []
    priced = []
    for line in lines:
        product = products.get(str(line.product_id))
        if product is None or not product.is_available() or not product.is_sold_in(scope.store_id):
            unavailable.append(str(line.product_id))
            continue
        priced.append(price_line(product, line.quantity, scope.store_id))

    if unavailable:
        raise ProductUnavailable(unavailable)
    return priced


@ordering.command_handler(part_of=Order)
class CheckoutHandler:
    @handle(Checkout)
    def checkout(self, command):
        user_id = str(command.user_id)
        scope = scope_for(command.store_id)
        log = logger.bind(user_id=user_id, scope=scope.describe())

        order_repo = current_domain.repository_for(Order)
        if command.checkout_key:
            existing = order_repo.by_checkout_key(user_id, command.checkout_key)
            if existing is not None:
                if not scope.matches(existing.store_id):
                    log.warning(
                        "Checkout key reused for another scope",
                        order_id=str(existing.id),
                        checkout_key=command.checkout_key,
                    )
                    raise ValidationError(
                        {"checkout_key": [f"Checkout key `{command.checkout_key}` was used for another cart scope"]}
                    )
                log.info("Checkout replayed", order_id=str(existing.id), checkout_key=command.checkout_key)
                return str(existing.id)

        cart_repo = current_domain.repository_for(Cart)
        cart = cart_repo.for_user(user_id)
        if cart is None or not cart.items:
            raise EmptyCart()

        if isinstance(scope, StoreScope):
            find_store(scope.store_id)

        selected = cart.lines_in(scope)
        if not selected:
            raise NoItemsForScope(scope.store_id)

        lines = price_selection(selected, scope)
        totals = order_totals(lines)

        order = Order.place(
            user_id=user_id,
            store_id=scope.store_id,
            lines=lines,
            totals=totals,
            shipping_address=shipping_snapshot(command.shipping_address),
            payment_method=command.payment_method,
            notes=command.notes,
            checkout_key=command.checkout_key,
        )
        cart.check_out([line.key() for line in lines], scope, order.id)

        order_repo.add(order)
        cart_repo.add(cart)

        log.info(
            "Order placed",
            order_id=str(order.id),
            item_count=len(lines),
            grand_total=totals.grand_total,
            remaining_cart_lines=len(cart.items),
        )
        return str(order.id)
