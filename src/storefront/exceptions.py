"""Storefront error taxonomy.

Each error carries the HTTP status it maps to, a stable machine-readable
``code`` and extra details for client display. Rule violations inside
aggregates keep using ``protean.exceptions.ValidationError``; these errors
cover checkout, coupon, authorization and payment-provider failures.
"""


class StorefrontError(Exception):
    """Base class for errors reported to API clients as ``{error, code, ...}``."""

    status_code = 400
    code = "storefront_error"
    default_message = "Request could not be processed"

    def __init__(self, message: str | None = None, **details):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, **self.details}


# ---------------------------------------------------------------------------
# Client input
# ---------------------------------------------------------------------------
class EmptyCart(StorefrontError):
    code = "empty_cart"
    default_message = "No items in cart"


class InvalidCartLine(StorefrontError):
    code = "invalid_cart_line"
    default_message = "Cart line is invalid"


# ---------------------------------------------------------------------------
# Business rules
# ---------------------------------------------------------------------------
class ProductNotFound(StorefrontError):
    status_code = 404
    code = "product_not_found"
    default_message = "Product not found"


class InsufficientStock(StorefrontError):
    status_code = 409
    code = "insufficient_stock"
    default_message = "Insufficient stock"


class CouponRejected(StorefrontError):
    """A coupon failed one of its eligibility rules.

    ``reason`` is one of ``invalid_code``, ``expired``, ``limit_reached`` or
    ``minimum_not_met``.
    """

    code = "coupon_rejected"
    default_message = "Coupon cannot be applied"

    def __init__(self, reason: str, message: str | None = None, **details):
        self.reason = reason
        super().__init__(message, **details)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.reason, **self.details}


class IllegalTransition(StorefrontError):
    status_code = 409
    code = "illegal_transition"
    default_message = "Order status transition is not allowed"


class Unauthorized(StorefrontError):
    status_code = 403
    code = "unauthorized"
    default_message = "Unauthorized"


# ---------------------------------------------------------------------------
# Payment provider
# ---------------------------------------------------------------------------
class InvalidSignature(StorefrontError):
    status_code = 401
    code = "invalid_signature"
    default_message = "Invalid webhook signature"


class GatewayError(StorefrontError):
    """The payment provider could not be reached or rejected the call."""

    status_code = 502
    code = "gateway_error"
    default_message = "Payment provider request failed"


class GatewayConfigurationError(GatewayError):
    status_code = 500
    code = "gateway_not_configured"
    default_message = "Server Config Error: missing payment provider credentials"


class PaymentInitializationFailed(StorefrontError):
    status_code = 502
    code = "payment_initialization_failed"
    default_message = "Payment initialization failed"


class PaymentNotVerified(StorefrontError):
    """The provider does not report an approved payment for the order."""

    code = "payment_not_verified"
    default_message = "Payment could not be verified"
