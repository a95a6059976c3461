"""Payment preference creation for a priced cart."""

import structlog

from storefront.checkout.pricing import PricedCart
from storefront.config import get_settings
from storefront.exceptions import GatewayConfigurationError, GatewayError, PaymentInitializationFailed
from storefront.payment.gateway import get_gateway
from storefront.payment.gateway.port import PreferenceItem, PreferenceRequest, PreferenceResult

logger = structlog.get_logger(__name__)

RETURN_OUTCOMES = ("success", "failure", "pending")


def build_preference_request(priced_cart: PricedCart, order_id: str) -> PreferenceRequest:
    """Map server-priced lines to provider items tied to ``order_id``."""
    settings = get_settings()

    items = tuple(
        PreferenceItem(
            id=line.product_id,
            title=line.title,
            quantity=line.quantity,
            unit_price=float(line.unit_price),
            currency_id=settings.currency,
        )
        for line in priced_cart.lines
    )

    return PreferenceRequest(
        items=items,
        external_reference=str(order_id),
        back_urls={outcome: settings.url_for(f"cart/{outcome}") for outcome in RETURN_OUTCOMES},
        notification_url=settings.url_for("webhooks/mercadopago"),
        auto_return="approved",
    )


def create_preference(priced_cart: PricedCart, order_id: str) -> PreferenceResult:
    """Create the provider checkout for ``order_id``.

    Missing credentials propagate as ``GatewayConfigurationError``; any other
    provider failure becomes ``PaymentInitializationFailed``. Nothing is retried.
    """
    request = build_preference_request(priced_cart, order_id)

    try:
        result = get_gateway().create_preference(request, idempotency_key=str(order_id))
    except GatewayConfigurationError:
        logger.error("payment_gateway_not_configured", order_id=str(order_id))
        raise
    except GatewayError as exc:
        logger.error("preference_creation_failed", order_id=str(order_id), error=exc.message)
        raise PaymentInitializationFailed(order_id=str(order_id)) from exc

    logger.info(
        "preference_created",
        order_id=str(order_id),
        preference_id=result.preference_id,
        total=priced_cart.total,
    )
    return result
