"""Pydantic request/response schemas for the Storefront API.

These are external contracts, kept separate from the internal Protean
commands. Client-sent prices and names are accepted for compatibility but
never used for pricing.
"""

from datetime import datetime

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class CartLineSchema(BaseModel):
    id: str | int
    quantity: int
    price: float | None = None  # Ignored: repriced server-side
    name: str | None = None  # Ignored: renamed server-side


class CustomerSchema(BaseModel):
    name: str
    email: str | None = None
    phone: str | None = None


class ShippingSchema(BaseModel):
    address: str
    city: str


# ---------------------------------------------------------------------------
# Checkout
# ---------------------------------------------------------------------------
class CheckoutRequest(BaseModel):
    items: list[CartLineSchema] = Field(default_factory=list)
    order_id: str | None = None
    coupon_code: str | None = None
    customer: CustomerSchema | None = None
    shipping: ShippingSchema | None = None
    user_id: str | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "items": [{"id": "prod-001", "quantity": 2}],
                    "coupon_code": "SAVE10",
                    "customer": {"name": "Ana Gómez", "email": "ana@example.com", "phone": "3001234567"},
                    "shipping": {"address": "Calle 1 # 2-3", "city": "Bogotá"},
                }
            ]
        }
    }


class CheckoutResponse(BaseModel):
    url: str
    order_id: str


# ---------------------------------------------------------------------------
# Orders
# ---------------------------------------------------------------------------
class ConfirmOrderRequest(BaseModel):
    order_id: str
    payment_data: dict = Field(default_factory=dict)


class ConfirmOrderResponse(BaseModel):
    status: str = "success"
    order_id: str
    order_status: str
    already_processed: bool


class UpdateOrderStatusRequest(BaseModel):
    status: str
    carrier: str | None = None
    tracking_number: str | None = None


class OrderStatusResponse(BaseModel):
    order_id: str
    status: str


# ---------------------------------------------------------------------------
# Coupons
# ---------------------------------------------------------------------------
class ValidateCouponRequest(BaseModel):
    code: str
    cart_total: float = Field(ge=0)


class AppliedCouponSchema(BaseModel):
    code: str
    discount_type: str
    discount_value: float
    applied_discount: float


class ValidateCouponResponse(BaseModel):
    success: bool = True
    coupon: AppliedCouponSchema


class CreateCouponRequest(BaseModel):
    code: str = Field(min_length=1, max_length=50)
    discount_type: str  # percentage, fixed
    discount_value: float = Field(gt=0)
    expiration_date: datetime | None = None
    usage_limit: int | None = None
    min_purchase_amount: float = Field(default=0.0, ge=0)


class CouponIdResponse(BaseModel):
    coupon_id: str


class CouponStatusResponse(BaseModel):
    coupon_id: str
    is_active: bool


class StatusResponse(BaseModel):
    status: str = "success"
