"""Checkout pricing — line and order totals from current catalogue prices.

Money is carried as floats, as everywhere else in the domain; totals are
rounded to cents so that repeated float sums do not leak noise into orders.
"""

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


def _money(value: float) -> float:
    return round(value, 2)


def selling_price(price: float, offer_price: float | None) -> float:
    """The price actually charged: the offer price if there is one, else the list price.

    A zero offer price means no offer.
    """
    return offer_price or price


def percentage_off(price: float, offer_price: float) -> int:
    """Whole-percent discount of ``offer_price`` against ``price``.

    Halves round up (50.5% -> 51%). Zero when there is no discount or the
    list price is zero.
    """
    if not price or price <= 0 or offer_price >= price:
        return 0
    ratio = Decimal(str(100 * (price - offer_price) / price))
    return min(100, int(ratio.quantize(Decimal("1"), rounding=ROUND_HALF_UP)))


@dataclass(frozen=True)
class PricedLine:
    """One checked-out line, priced from the catalogue at checkout time."""

    product_id: str
    store_id: str | None
    name: str
    images: tuple[str, ...]
    unit: str
    quantity: int
    price: float
    offer_price: float
    percentage_off: int
    line_subtotal: float
    line_total: float

    def key(self):
        return (self.product_id, self.store_id)

    def as_order_item(self) -> dict:
        return {
            "product_id": self.product_id,
            "name": self.name,
            "images": list(self.images),
            "unit": self.unit,
            "quantity": self.quantity,
            "price": self.price,
            "offer_price": self.offer_price,
            "percentage_off": self.percentage_off,
            "line_total": self.line_total,
        }


@dataclass(frozen=True)
class OrderTotals:
    subtotal: float
    grand_total: float
    total_discount: float


def price_line(product, quantity: int, store_id: str | None = None) -> PricedLine:
    """Price ``quantity`` units of a catalogue product at its current price."""
    price = product.price or 0.0
    offer = selling_price(price, product.offer_price)
    return PricedLine(
        product_id=str(product.id),
        store_id=store_id,
        name=product.name,
        images=tuple(product.images or ()),
        unit=product.unit or "piece",
        quantity=quantity,
        price=price,
        offer_price=offer,
        percentage_off=percentage_off(price, offer),
        line_subtotal=_money(price * quantity),
        line_total=_money(offer * quantity),
    )


def order_totals(lines) -> OrderTotals:
    subtotal = 0.0
    grand_total = 0.0
    for line in lines:
        subtotal += line.line_subtotal
        grand_total += line.line_total

    subtotal = _money(subtotal)
    grand_total = _money(grand_total)
    return OrderTotals(
        subtotal=subtotal,
        grand_total=grand_total,
        total_discount=_money(subtotal - grand_total),
    )
