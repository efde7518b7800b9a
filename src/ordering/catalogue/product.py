"""Catalogue replica of a Product, as seen by the Ordering domain.

Products are owned by the catalogue collaborator; the Ordering domain keeps a
read-only copy that is refreshed through ``SyncProduct``. A product with no
``store_ids`` belongs to the global marketplace catalogue; otherwise it is
sold by each of the listed stores.
"""

from enum import Enum

from protean.fields import Boolean, Float, Integer, List, String

from ordering.domain import ordering


class ProductUnit(Enum):
    PIECE = "piece"
    PCS = "pcs"
    KG = "kg"
    G = "g"
    MG = "mg"
    LITRE = "litre"
    ML = "ml"
    DOZEN = "dozen"
    PACKET = "packet"
    BOX = "box"
    METER = "meter"
    CM = "cm"
    SET = "set"
    PAIR = "pair"
    BOTTLE = "bottle"
    BAG = "bag"
    ROLL = "roll"
    UNIT = "unit"


@ordering.aggregate
class Product:
    name = String(required=True, max_length=255)
    images = List(content_type=String(max_length=1024))
    price = Float(required=True, min_value=0.0)
    offer_price = Float(min_value=0.0)
    stock_quantity = Integer(default=0, min_value=0)
    unit = String(choices=ProductUnit, default=ProductUnit.PIECE.value)
    store_ids = List(content_type=String(max_length=50))
    is_active = Boolean(default=True)
    is_deleted = Boolean(default=False)

    def selling_price(self):
        """The selling price: the offer price when one is set, else the list price.

        An offer price of zero counts as no offer.
        """
        return self.offer_price or self.price

    def is_available(self):
        return bool(self.is_active) and not self.is_deleted

    def is_sold_in(self, store_id=None):
        """Whether the product is listed in the given store, or globally when ``store_id`` is None."""
        if store_id is None:
            return not self.store_ids
        return str(store_id) in {str(s) for s in self.store_ids}
