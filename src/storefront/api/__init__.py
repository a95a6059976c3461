"""Storefront API package."""

from storefront.api.errors import register_error_handlers
from storefront.api.routes import checkout_router, coupon_router, order_router, webhook_router

__all__ = [
    "checkout_router",
    "coupon_router",
    "order_router",
    "webhook_router",
    "register_error_handlers",
]
