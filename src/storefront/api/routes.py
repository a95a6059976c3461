"""FastAPI routes for the Storefront: checkout, provider webhooks, orders and coupons."""

import json

import structlog
from fastapi import APIRouter, Header, HTTPException, Request
from fastapi.responses import JSONResponse
from protean.utils.globals import current_domain

from storefront.api.schemas import (
    AppliedCouponSchema,
    CheckoutRequest,
    CheckoutResponse,
    ConfirmOrderRequest,
    ConfirmOrderResponse,
    CouponIdResponse,
    CouponStatusResponse,
    CreateCouponRequest,
    OrderStatusResponse,
    StatusResponse,
    UpdateOrderStatusRequest,
    ValidateCouponRequest,
    ValidateCouponResponse,
)
from storefront.checkout.placement import PlaceOrder
from storefront.coupon.management import CreateCoupon, DeleteCoupon, ToggleCouponStatus
from storefront.coupon.validation import validate_coupon
from storefront.exceptions import InvalidSignature
from storefront.order.confirmation import ConfirmOrder
from storefront.order.status import UpdateOrderStatus
from storefront.payment.notification import reconcile_notification

logger = structlog.get_logger(__name__)

# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("", response_model=CheckoutResponse)
async def checkout(body: CheckoutRequest) -> CheckoutResponse:
    """Price the cart server-side, place a pending order and return the provider checkout URL."""
    command = PlaceOrder(
        items=json.dumps([{"id": str(item.id), "quantity": item.quantity} for item in body.items]),
        order_id=body.order_id,
        coupon_code=body.coupon_code,
        customer=json.dumps(body.customer.model_dump()) if body.customer else None,
        shipping=json.dumps(body.shipping.model_dump()) if body.shipping else None,
        user_id=body.user_id,
    )
    result = current_domain.process(command, asynchronous=False)
    return CheckoutResponse(**result)


# ---------------------------------------------------------------------------
# Webhook Router
# ---------------------------------------------------------------------------
webhook_router = APIRouter(prefix="/webhooks", tags=["webhooks"])


async def _read_json_body(request: Request) -> dict:
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = json.loads(raw)
    except ValueError:
        logger.warning("webhook_body_not_json", path=request.url.path)
        return {}
    return body if isinstance(body, dict) else {}


@webhook_router.post("/mercadopago")
async def mercadopago_webhook(
    request: Request,
    x_signature: str | None = Header(default=None),
    x_request_id: str | None = Header(default=None),
):
    """Receive a Mercado Pago notification.

    Unexpected failures answer 500 so the provider redelivers the notification.
    """
    body = await _read_json_body(request)
    try:
        reconcile_notification(
            query=dict(request.query_params),
            body=body,
            signature_header=x_signature,
            request_id=x_request_id,
        )
    except InvalidSignature as exc:
        raise HTTPException(status_code=401, detail=exc.message) from exc
    except Exception as exc:
        logger.exception("webhook_processing_failed", query=dict(request.query_params))
        return JSONResponse(status_code=500, content={"status": "error", "error": str(exc)})

    return {"status": "success"}


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.post("/confirm", response_model=ConfirmOrderResponse)
async def confirm_order(body: ConfirmOrderRequest) -> ConfirmOrderResponse:
    """Return-page fallback: confirm an order whose payment the provider reports as approved."""
    command = ConfirmOrder(
        order_id=body.order_id,
        payment_data=json.dumps(body.payment_data),
    )
    result = current_domain.process(command, asynchronous=False)
    return ConfirmOrderResponse(**result.to_dict())


@order_router.put("/{order_id}/status", response_model=OrderStatusResponse)
async def update_order_status(
    order_id: str,
    body: UpdateOrderStatusRequest,
    x_user_id: str | None = Header(default=None),
) -> OrderStatusResponse:
    """Owner-only manual status change."""
    command = UpdateOrderStatus(
        actor_id=x_user_id,
        order_id=order_id,
        status=body.status,
        carrier=body.carrier,
        tracking_number=body.tracking_number,
    )
    status = current_domain.process(command, asynchronous=False)
    return OrderStatusResponse(order_id=order_id, status=status)


# ---------------------------------------------------------------------------
# Coupon Router
# ---------------------------------------------------------------------------
coupon_router = APIRouter(prefix="/coupons", tags=["coupons"])


@coupon_router.post("/validate", response_model=ValidateCouponResponse)
async def validate(body: ValidateCouponRequest) -> ValidateCouponResponse:
    """Check a coupon against a cart total without consuming it."""
    applied = validate_coupon(body.code, body.cart_total)
    return ValidateCouponResponse(coupon=AppliedCouponSchema(**applied.to_dict()))


@coupon_router.post("", status_code=201, response_model=CouponIdResponse)
async def create_coupon(
    body: CreateCouponRequest,
    x_user_id: str | None = Header(default=None),
) -> CouponIdResponse:
    command = CreateCoupon(
        actor_id=x_user_id,
        code=body.code,
        discount_type=body.discount_type,
        discount_value=body.discount_value,
        expiration_date=body.expiration_date,
        usage_limit=body.usage_limit,
        min_purchase_amount=body.min_purchase_amount,
    )
    coupon_id = current_domain.process(command, asynchronous=False)
    return CouponIdResponse(coupon_id=coupon_id)


@coupon_router.put("/{coupon_id}/toggle", response_model=CouponStatusResponse)
async def toggle_coupon(
    coupon_id: str,
    x_user_id: str | None = Header(default=None),
) -> CouponStatusResponse:
    command = ToggleCouponStatus(actor_id=x_user_id, coupon_id=coupon_id)
    is_active = current_domain.process(command, asynchronous=False)
    return CouponStatusResponse(coupon_id=coupon_id, is_active=is_active)


@coupon_router.delete("/{coupon_id}", response_model=StatusResponse)
async def delete_coupon(
    coupon_id: str,
    x_user_id: str | None = Header(default=None),
) -> StatusResponse:
    command = DeleteCoupon(actor_id=x_user_id, coupon_id=coupon_id)
    current_domain.process(command, asynchronous=False)
    return StatusResponse(status="deleted")
