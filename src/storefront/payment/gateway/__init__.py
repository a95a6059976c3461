"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- MercadoPagoGateway when PAYMENT_GATEWAY is "mercadopago" (the default)
- FakeGateway when PAYMENT_GATEWAY is "fake", and in tests
"""

from storefront.config import get_settings
from storefront.payment.gateway.fake_adapter import FakeGateway
from storefront.payment.gateway.mercadopago_adapter import MercadoPagoGateway
from storefront.payment.gateway.port import PaymentGateway

_current_gateway: PaymentGateway | None = None


def _build_gateway() -> PaymentGateway:
    settings = get_settings()
    if settings.gateway == "fake":
        return FakeGateway()
    return MercadoPagoGateway(access_token=settings.access_token)


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, built from settings on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _build_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to the gateway configured in settings."""
    global _current_gateway
    _current_gateway = None
