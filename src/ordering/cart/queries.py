"""Read side of the cart: the cart as shown to its owner.

Reading never creates a cart. Each line is decorated with the product's
current catalogue details; the add-time price snapshot is kept alongside.
"""

from protean.utils.globals import current_domain

from ordering.cart.cart import Cart
from ordering.cart.scope import StoreScope, normalize_store_id
from ordering.catalogue.lookup import find_products


def _product_details(product):
    if product is None:
        return None
    return {
        "name": product.name,
        "images": list(product.images or []),
        "price": product.price,
        "offer_price": product.selling_price(),
        "stock_quantity": product.stock_quantity,
        "unit": product.unit,
        "is_active": bool(product.is_active) and not product.is_deleted,
    }


def cart_view(user_id, store_id=None):
    """The user's cart as a dict, optionally restricted to one store's lines."""
    cart = current_domain.repository_for(Cart).for_user(user_id)
    store_id = normalize_store_id(store_id)

    if cart is None:
        return {"cart_id": None, "user_id": str(user_id), "store_id": store_id, "items": []}

    lines = list(cart.items) if store_id is None else cart.lines_in(StoreScope(store_id=store_id))
    products = find_products(line.product_id for line in lines)

    return {
        "cart_id": str(cart.id),
        "user_id": str(cart.user_id),
        "store_id": store_id,
        "items": [
            {
                "product_id": str(line.product_id),
                "store_id": normalize_store_id(line.store_id),
                "quantity": line.quantity,
                "price_at_add": line.price_at_add,
                "offer_price_at_add": line.offer_price_at_add,
                "unit": line.unit,
                "product": _product_details(products.get(str(line.product_id))),
            }
            for line in lines
        ],
    }
