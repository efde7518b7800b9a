"""Catalogue replication — commands and handler.

The catalogue collaborator pushes product and store snapshots into the
Ordering domain through these commands. Each sync is an upsert keyed by the
catalogue's own identifier.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Boolean, Float, Identifier, Integer, List, String
from protean.utils.globals import current_domain

from ordering.catalogue.product import Product, ProductUnit
from ordering.catalogue.store import Store
from ordering.domain import ordering

logger = structlog.get_logger(__name__)


@ordering.command(part_of=Product)
class SyncProduct:
    product_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    images = List(content_type=String(max_length=1024))
    price = Float(required=True, min_value=0.0)
    offer_price = Float(min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    unit = String(choices=ProductUnit, default=ProductUnit.PIECE.value)
    store_ids = List(content_type=String(max_length=50))
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)


@ordering.command(part_of=Store)
class SyncStore:
    store_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    image_url = String(max_length=1024)
    manager_name = String(max_length=255)
    manager_phone = String(max_length=20)
    city = String(max_length=100)
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)


_PRODUCT_FIELDS = (
    "name",
    "images",
    "price",
    "offer_price",
    "stock_quantity",
    "unit",
    "store_ids",
    "is_active",
    "is_deleted",
)

_STORE_FIELDS = (
    "name",
    "image_url",
    "manager_name",
    "manager_phone",
    "city",
    "is_active",
    "is_deleted",
)


@ordering.command_handler(part_of=Product)
class SyncProductHandler:
    @handle(SyncProduct)
    def sync_product(self, command):
        repo = current_domain.repository_for(Product)
        values = {field: getattr(command, field) for field in _PRODUCT_FIELDS}
        try:
            product = repo.get(command.product_id)
            for field, value in values.items():
                setattr(product, field, value)
        except ObjectNotFoundError:
            product = Product(id=command.product_id, **values)

        repo.add(product)
        logger.debug("Product synced", product_id=str(command.product_id))
        return str(product.id)


@ordering.command_handler(part_of=Store)
class SyncStoreHandler:
    @handle(SyncStore)
    def sync_store(self, command):
        repo = current_domain.repository_for(Store)
        values = {field: getattr(command, field) for field in _STORE_FIELDS}
        try:
            store = repo.get(command.store_id)
            for field, value in values.items():
                setattr(store, field, value)
        except ObjectNotFoundError:
            store = Store(id=command.store_id, **values)

        repo.add(store)
        logger.debug("Store synced", store_id=str(command.store_id))
        return str(store.id)
