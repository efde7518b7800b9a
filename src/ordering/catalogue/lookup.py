"""Catalogue lookups used by the cart and checkout.

Only active, non-deleted records are visible. A product that exists but is
not sold in the requested scope is reported exactly like a missing one.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from ordering.cart.scope import normalize_store_id
from ordering.catalogue.product import Product
from ordering.catalogue.store import Store
from ordering.errors import NotFound


def find_product(product_id, store_id=None) -> Product:
    """Resolve a product in the global catalogue, or in ``store_id``'s catalogue."""
    try:
        product = current_domain.repository_for(Product).get(str(product_id))
    except ObjectNotFoundError:
        raise NotFound("Product", product_id) from None

    if not product.is_available() or not product.is_sold_in(normalize_store_id(store_id)):
        raise NotFound("Product", product_id)
    return product


def find_store(store_id) -> Store:
    try:
        store = current_domain.repository_for(Store).get(str(store_id))
    except ObjectNotFoundError:
        raise NotFound("Store", store_id) from None

    if not store.is_available():
        raise NotFound("Store", store_id)
    return store


def find_products(product_ids) -> dict[str, Product]:
    """Bulk-load products by id, keyed by id. Missing ids are simply absent."""
    ids = {str(pid) for pid in product_ids}
    if not ids:
        return {}
    products = current_domain.repository_for(Product)._dao.query.filter(id__in=list(ids)).limit(None).all().items
    return {str(p.id): p for p in products}
