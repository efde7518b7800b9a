"""Read side for orders: buyer, admin and store-owner views.

Orders are read straight from the aggregate repository and flattened to
plain dicts for the API. Soft-deleted orders never appear.
"""

from protean.utils.globals import current_domain

from ordering.catalogue.lookup import find_store
from ordering.order.order import Order, OrderStatus


def _iso(moment):
    return moment.isoformat() if moment else None


def order_view(order: Order) -> dict:
    address = order.shipping_address
    return {
        "order_id": str(order.id),
        "user_id": str(order.user_id),
        "store_id": str(order.store_id) if order.store_id else None,
        "items": [
            {
                "product_id": str(item.product_id),
                "name": item.name,
                "images": list(item.images or []),
                "unit": item.unit,
                "quantity": item.quantity,
                "price": item.price,
                "offer_price": item.offer_price,
                "percentage_off": item.percentage_off,
                "line_total": item.line_total,
            }
            for item in order.items
        ],
        "subtotal": order.subtotal,
        "total_discount": order.total_discount,
        "grand_total": order.grand_total,
        "status": order.status,
        "payment_status": order.payment_status,
        "payment_method": order.payment_method,
        "payment_id": str(order.payment_id) if order.payment_id else None,
        "shipping_address": address.to_dict() if address else None,
        "notes": order.notes or "",
        "status_history": [
            {
                "status": change.status,
                "payment_status": change.payment_status,
                "changed_at": _iso(change.changed_at),
                "changed_by": change.changed_by,
            }
            for change in order.status_history
        ],
        "created_at": _iso(order.created_at),
        "updated_at": _iso(order.updated_at),
        "created_at_display": order.created_at_display,
        "updated_at_display": order.updated_at_display,
    }


def _repo():
    return current_domain.repository_for(Order)


def my_orders(user_id, scope=None, store_id=None) -> list[dict]:
    """The user's orders; ``scope="global"`` for marketplace orders, or one store's."""
    orders = _repo().search(user_id=user_id, store_id=store_id, scope=scope)
    return [order_view(order) for order in orders]


def my_order(user_id, order_id) -> dict:
    return order_view(_repo().get_visible(order_id, user_id=user_id))


def admin_orders(status=None, payment_status=None, store_id=None, start=None, end=None) -> list[dict]:
    orders = _repo().search(
        store_id=store_id,
        status=status,
        payment_status=payment_status,
        start=start,
        end=end,
    )
    return [order_view(order) for order in orders]


def admin_order(order_id) -> dict:
    return order_view(_repo().get_visible(order_id))


def store_order_stats(orders) -> dict:
    stats = {"total": len(orders)}
    for status in OrderStatus:
        stats[status.value] = sum(1 for order in orders if order.status == status.value)
    stats["total_revenue"] = round(sum(order.grand_total or 0.0 for order in orders), 2)
    return stats


def store_orders(store_id, status=None, start=None, end=None) -> dict:
    """A store's orders with per-status counts and revenue.

    ``status="all"`` is the same as no status filter.
    """
    store = find_store(store_id)
    if status == "all":
        status = None

    orders = _repo().search(store_id=store_id, status=status, start=start, end=end)
    return {
        "store": {"store_id": str(store.id), "name": store.name},
        "orders": [order_view(order) for order in orders],
        "stats": store_order_stats(orders),
    }


def store_order(store_id, order_id) -> dict:
    find_store(store_id)
    return order_view(_repo().get_visible(order_id, store_id=store_id))
