"""FastAPI routes for the Ordering domain: carts, orders and payments."""

from datetime import UTC, datetime, timedelta

from fastapi import APIRouter, Depends, Query
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from ordering.api.identity import current_user_id
from ordering.api.schemas import (
    AddToCartRequest,
    CartResponse,
    CheckoutRequest,
    ClearCartResponse,
    DecreaseCartItemRequest,
    FailPaymentRequest,
    InitiatePaymentRequest,
    LinkOrderRequest,
    OrderListResponse,
    OrderResponse,
    PaymentListResponse,
    PaymentReferenceRequest,
    PaymentResponse,
    PaymentStatusResponse,
    ReconcileCheckoutsRequest,
    ReconcileCheckoutsResponse,
    StatusResponse,
    StoreOrdersResponse,
    StoreOwnerStatusRequest,
    UpdateCartItemRequest,
    UpdateOrderStatusRequest,
)
from ordering.cart.items import AddToCart, DecreaseCartItem, RemoveFromCart, UpdateCartItemQuantity
from ordering.cart.management import ClearCart
from ordering.cart.queries import cart_view
from ordering.checkout.checkout import Checkout
from ordering.checkout.reconciliation import ReconcileCheckouts
from ordering.order.lifecycle import SoftDeleteOrder, UpdateOrderStatus
from ordering.order.order import Actor
from ordering.order.queries import admin_order, admin_orders, my_order, my_orders, store_order, store_orders
from ordering.payment.processing import (
    CompletePayment,
    FailPayment,
    InitiatePayment,
    LinkPaymentToOrder,
    VerifyPayment,
)
from ordering.payment.queries import my_payments, payment_status


def _parse_date(value: str | None, field_name: str, end_of_day: bool = False) -> datetime | None:
    """Parse an ISO date or datetime query parameter.

    A bare date used as an upper bound covers that whole day.
    """
    if not value:
        return None
    try:
        moment = datetime.fromisoformat(value)
    except ValueError:
        raise ValidationError({field_name: [f"Invalid date `{value}`"]}) from None

    if end_of_day and "T" not in value and " " not in value:
        moment = moment + timedelta(days=1) - timedelta(microseconds=1)
    return moment if moment.tzinfo else moment.replace(tzinfo=UTC)


def _order_list(orders: list[dict]) -> OrderListResponse:
    return OrderListResponse(orders=orders, count=len(orders))


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/cart", tags=["cart"])


@cart_router.get("", response_model=CartResponse)
async def get_cart(store_id: str | None = None, user_id: str = Depends(current_user_id)) -> CartResponse:
    return CartResponse(**cart_view(user_id, store_id))


@cart_router.post("/items", response_model=CartResponse)
async def add_cart_item(body: AddToCartRequest, user_id: str = Depends(current_user_id)) -> CartResponse:
    command = AddToCart(
        user_id=user_id,
        product_id=body.product_id,
        store_id=body.store_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse(**cart_view(user_id))


@cart_router.patch("/items", response_model=CartResponse)
async def update_cart_item(body: UpdateCartItemRequest, user_id: str = Depends(current_user_id)) -> CartResponse:
    command = UpdateCartItemQuantity(
        user_id=user_id,
        product_id=body.product_id,
        store_id=body.store_id,
        quantity=body.quantity,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse(**cart_view(user_id))


@cart_router.patch("/items/decrease", response_model=CartResponse)
async def decrease_cart_item(body: DecreaseCartItemRequest, user_id: str = Depends(current_user_id)) -> CartResponse:
    command = DecreaseCartItem(
        user_id=user_id,
        product_id=body.product_id,
        store_id=body.store_id,
        decrement_by=body.decrement_by,
    )
    current_domain.process(command, asynchronous=False)
    return CartResponse(**cart_view(user_id))


@cart_router.delete("/items/{product_id}", response_model=CartResponse)
async def remove_cart_item(
    product_id: str,
    store_id: str | None = None,
    user_id: str = Depends(current_user_id),
) -> CartResponse:
    command = RemoveFromCart(user_id=user_id, product_id=product_id, store_id=store_id)
    current_domain.process(command, asynchronous=False)
    return CartResponse(**cart_view(user_id))


@cart_router.delete("", response_model=ClearCartResponse)
async def clear_cart(store_id: str | None = None, user_id: str = Depends(current_user_id)) -> ClearCartResponse:
    removed = current_domain.process(ClearCart(user_id=user_id, store_id=store_id), asynchronous=False)
    return ClearCartResponse(removed_count=removed, cart=CartResponse(**cart_view(user_id)))


# ---------------------------------------------------------------------------
# Order Router (buyer)
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/checkout", status_code=201, response_model=OrderResponse)
async def checkout(body: CheckoutRequest, user_id: str = Depends(current_user_id)) -> OrderResponse:
    """Check out the global partition of the cart, or one store's partition.

    Lines belonging to other scopes stay in the cart.
    """
    command = Checkout(
        user_id=user_id,
        store_id=body.store_id,
        shipping_address=body.shipping_address.model_dump(exclude_none=True),
        payment_method=body.payment_method,
        notes=body.notes,
        checkout_key=body.checkout_key,
    )
    order_id = current_domain.process(command, asynchronous=False)
    return OrderResponse(**my_order(user_id, order_id))


@order_router.get("/my", response_model=OrderListResponse)
async def list_my_orders(
    scope: str | None = Query(default=None, pattern="^(global|store)$"),
    store_id: str | None = None,
    user_id: str = Depends(current_user_id),
) -> OrderListResponse:
    return _order_list(my_orders(user_id, scope=scope, store_id=store_id))


@order_router.get("/my/{order_id}", response_model=OrderResponse)
async def get_my_order(order_id: str, user_id: str = Depends(current_user_id)) -> OrderResponse:
    return OrderResponse(**my_order(user_id, order_id))


# ---------------------------------------------------------------------------
# Admin Order Router
# ---------------------------------------------------------------------------
admin_order_router = APIRouter(prefix="/admin/orders", tags=["admin"])


@admin_order_router.get("", response_model=OrderListResponse)
async def list_orders(
    status: str | None = None,
    payment_status: str | None = None,
    store_id: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> OrderListResponse:
    orders = admin_orders(
        status=status,
        payment_status=payment_status,
        store_id=store_id,
        start=_parse_date(start_date, "start_date"),
        end=_parse_date(end_date, "end_date", end_of_day=True),
    )
    return _order_list(orders)


@admin_order_router.post("/maintenance/reconcile-checkouts", response_model=ReconcileCheckoutsResponse)
async def reconcile_checkouts(body: ReconcileCheckoutsRequest) -> ReconcileCheckoutsResponse:
    """Flag recent orders whose lines are still in the buyer's cart.

    Called periodically by an external scheduler.
    """
    command = ReconcileCheckouts(since_hours=body.since_hours, repair=body.repair)
    flagged = current_domain.process(command, asynchronous=False)
    return ReconcileCheckoutsResponse(flagged_count=flagged, repaired=body.repair)


@admin_order_router.get("/{order_id}", response_model=OrderResponse)
async def get_order(order_id: str) -> OrderResponse:
    return OrderResponse(**admin_order(order_id))


@admin_order_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_order_status(order_id: str, body: UpdateOrderStatusRequest) -> OrderResponse:
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        payment_status=body.payment_status,
        actor=Actor.ADMIN.value,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse(**admin_order(order_id))


@admin_order_router.delete("/{order_id}", response_model=StatusResponse)
async def delete_order(order_id: str) -> StatusResponse:
    current_domain.process(SoftDeleteOrder(order_id=order_id), asynchronous=False)
    return StatusResponse(status="deleted")


# ---------------------------------------------------------------------------
# Store Owner Router
# ---------------------------------------------------------------------------
store_owner_router = APIRouter(prefix="/store-owner/{store_id}/orders", tags=["store-owner"])


@store_owner_router.get("", response_model=StoreOrdersResponse)
async def list_store_orders(
    store_id: str,
    status: str | None = None,
    start_date: str | None = None,
    end_date: str | None = None,
) -> StoreOrdersResponse:
    result = store_orders(
        store_id,
        status=status,
        start=_parse_date(start_date, "start_date"),
        end=_parse_date(end_date, "end_date", end_of_day=True),
    )
    return StoreOrdersResponse(**result)


@store_owner_router.get("/{order_id}", response_model=OrderResponse)
async def get_store_order(store_id: str, order_id: str) -> OrderResponse:
    return OrderResponse(**store_order(store_id, order_id))


@store_owner_router.patch("/{order_id}/status", response_model=OrderResponse)
async def update_store_order_status(store_id: str, order_id: str, body: StoreOwnerStatusRequest) -> OrderResponse:
    store_order(store_id, order_id)
    command = UpdateOrderStatus(
        order_id=order_id,
        status=body.status,
        actor=Actor.STORE_OWNER.value,
        store_id=store_id,
    )
    current_domain.process(command, asynchronous=False)
    return OrderResponse(**store_order(store_id, order_id))


# ---------------------------------------------------------------------------
# Payment Router
# ---------------------------------------------------------------------------
payment_router = APIRouter(prefix="/payments", tags=["payments"])


def _payment(user_id: str, payment_id: str) -> PaymentResponse:
    return PaymentResponse(**payment_status(user_id, payment_id)["payment"])


@payment_router.post("/initiate", status_code=201, response_model=PaymentResponse)
async def initiate_payment(body: InitiatePaymentRequest, user_id: str = Depends(current_user_id)) -> PaymentResponse:
    """Create a payment record. Cash on delivery is completed immediately."""
    command = InitiatePayment(
        user_id=user_id,
        amount=body.amount,
        payment_method=body.payment_method,
        order_id=body.order_id,
        meta=body.metadata,
    )
    payment_id = current_domain.process(command, asynchronous=False)
    return _payment(user_id, payment_id)


@payment_router.post("/{payment_id}/verify", response_model=PaymentStatusResponse)
async def verify_payment(
    payment_id: str,
    body: PaymentReferenceRequest,
    user_id: str = Depends(current_user_id),
) -> PaymentStatusResponse:
    command = VerifyPayment(user_id=user_id, payment_id=payment_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return PaymentStatusResponse(**payment_status(user_id, payment_id))


@payment_router.post("/{payment_id}/complete", response_model=PaymentResponse)
async def complete_payment(
    payment_id: str,
    body: PaymentReferenceRequest,
    user_id: str = Depends(current_user_id),
) -> PaymentResponse:
    command = CompletePayment(user_id=user_id, payment_id=payment_id, **body.model_dump(exclude_none=True))
    current_domain.process(command, asynchronous=False)
    return _payment(user_id, payment_id)


@payment_router.post("/{payment_id}/fail", response_model=PaymentResponse)
async def fail_payment(
    payment_id: str,
    body: FailPaymentRequest,
    user_id: str = Depends(current_user_id),
) -> PaymentResponse:
    command = FailPayment(user_id=user_id, payment_id=payment_id, error_message=body.error_message)
    current_domain.process(command, asynchronous=False)
    return _payment(user_id, payment_id)


@payment_router.get("/my", response_model=PaymentListResponse)
async def list_my_payments(user_id: str = Depends(current_user_id)) -> PaymentListResponse:
    return PaymentListResponse(**my_payments(user_id))


@payment_router.get("/{payment_id}/status", response_model=PaymentStatusResponse)
async def get_payment_status(payment_id: str, user_id: str = Depends(current_user_id)) -> PaymentStatusResponse:
    return PaymentStatusResponse(**payment_status(user_id, payment_id))


@payment_router.patch("/{payment_id}/link-order", response_model=PaymentResponse)
async def link_payment_to_order(
    payment_id: str,
    body: LinkOrderRequest,
    user_id: str = Depends(current_user_id),
) -> PaymentResponse:
    command = LinkPaymentToOrder(user_id=user_id, payment_id=payment_id, order_id=body.order_id)
    current_domain.process(command, asynchronous=False)
    return _payment(user_id, payment_id)
