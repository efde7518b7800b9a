"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer), separate from
internal Protean commands.
"""

from typing import Literal

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class LocationSchema(BaseModel):
    latitude: float | None = None
    longitude: float | None = None
    accuracy: float | None = None


class ShippingAddressSchema(BaseModel):
    full_name: str = ""
    mobile: str = ""
    email: str = ""
    address_line1: str = ""
    address_line2: str = ""
    landmark: str = ""
    city: str = ""
    state: str = ""
    pincode: str = ""
    country: str = ""
    location: LocationSchema | None = None


# ---------------------------------------------------------------------------
# Cart Request Schemas
# ---------------------------------------------------------------------------
class AddToCartRequest(BaseModel):
    product_id: str
    store_id: str | None = None
    quantity: int = Field(ge=1, default=1)

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "product_id": "prod-001",
                    "store_id": None,
                    "quantity": 2,
                }
            ]
        }
    }


class UpdateCartItemRequest(BaseModel):
    product_id: str
    store_id: str | None = None
    quantity: int  # Zero or less removes the line


class DecreaseCartItemRequest(BaseModel):
    product_id: str
    store_id: str | None = None
    decrement_by: int = Field(ge=1, default=1)


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    store_id: str | None = None
    shipping_address: ShippingAddressSchema = Field(default_factory=ShippingAddressSchema)
    payment_method: str = "cod"
    notes: str = ""
    checkout_key: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "store_id": "store-001",
                    "shipping_address": {
                        "full_name": "Asha Rao",
                        "mobile": "9876543210",
                        "address_line1": "12 MG Road",
                        "city": "Bengaluru",
                        "state": "Karnataka",
                        "pincode": "560001",
                    },
                    "payment_method": "cod",
                    "notes": "Leave at the gate",
                    "checkout_key": "chk-7f3a",
                }
            ]
        }
    }


class UpdateOrderStatusRequest(BaseModel):
    status: str | None = None
    payment_status: str | None = None


class StoreOwnerStatusRequest(BaseModel):
    status: str


class ReconcileCheckoutsRequest(BaseModel):
    since_hours: int | None = Field(default=None, ge=1)
    repair: bool = False


# ---------------------------------------------------------------------------
# Payment Request Schemas
# ---------------------------------------------------------------------------
class InitiatePaymentRequest(BaseModel):
    amount: float
    payment_method: str = "cod"
    order_id: str | None = None
    metadata: dict = Field(default_factory=dict)


class PaymentReferenceRequest(BaseModel):
    transaction_id: str | None = None
    upi_id: str | None = None
    card_last4: str | None = None
    bank_name: str | None = None


class FailPaymentRequest(BaseModel):
    error_message: str = "Payment failed"


class LinkOrderRequest(BaseModel):
    order_id: str


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class ProductDetailsResponse(BaseModel):
    name: str
    images: list[str] = []
    price: float
    offer_price: float
    stock_quantity: int | None = None
    unit: str | None = None
    is_active: bool


class CartItemResponse(BaseModel):
    product_id: str
    store_id: str | None = None
    quantity: int
    price_at_add: float
    offer_price_at_add: float
    unit: str | None = None
    product: ProductDetailsResponse | None = None


class CartResponse(BaseModel):
    cart_id: str | None = None
    user_id: str
    store_id: str | None = None
    items: list[CartItemResponse] = []


class ClearCartResponse(BaseModel):
    removed_count: int
    cart: CartResponse


class OrderItemResponse(BaseModel):
    product_id: str
    name: str
    images: list[str] = []
    unit: str | None = None
    quantity: int
    price: float
    offer_price: float
    percentage_off: int
    line_total: float


class StatusChangeResponse(BaseModel):
    status: str | None = None
    payment_status: str | None = None
    changed_at: str | None = None
    changed_by: str


class OrderResponse(BaseModel):
    order_id: str
    user_id: str
    store_id: str | None = None
    items: list[OrderItemResponse]
    subtotal: float
    total_discount: float
    grand_total: float
    status: str
    payment_status: str
    payment_method: str
    payment_id: str | None = None
    shipping_address: dict | None = None
    notes: str = ""
    status_history: list[StatusChangeResponse] = []
    created_at: str | None = None
    updated_at: str | None = None
    created_at_display: str | None = None
    updated_at_display: str | None = None


class OrderListResponse(BaseModel):
    orders: list[OrderResponse]
    count: int


class StoreOrderStatsResponse(BaseModel):
    total: int
    pending: int
    confirmed: int
    shipped: int
    delivered: int
    cancelled: int
    total_revenue: float


class StoreSummaryResponse(BaseModel):
    store_id: str
    name: str


class StoreOrdersResponse(BaseModel):
    store: StoreSummaryResponse
    orders: list[OrderResponse]
    stats: StoreOrderStatsResponse


class ReconcileCheckoutsResponse(BaseModel):
    flagged_count: int
    repaired: bool


class PaymentResponse(BaseModel):
    payment_id: str
    user_id: str
    order_id: str | None = None
    payment_method: str
    amount: float
    currency: str
    status: Literal["pending", "completed", "failed"]
    transaction_id: str = ""
    upi_id: str = ""
    card_last4: str = ""
    bank_name: str = ""
    metadata: dict = {}
    error_message: str = ""
    created_at_display: str | None = None
    updated_at_display: str | None = None


class PaymentStatusResponse(BaseModel):
    payment: PaymentResponse
    is_verified: bool
    is_failed: bool
    is_pending: bool


class PaymentSummaryResponse(BaseModel):
    total: int
    pending: int
    completed: int
    failed: int


class PaymentListResponse(BaseModel):
    payments: list[PaymentResponse]
    count: int
    summary: PaymentSummaryResponse


class StatusResponse(BaseModel):
    status: str = "ok"
