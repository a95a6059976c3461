"""Coupon validation against a cart subtotal.

Read-only: validating a coupon never changes its usage count. Usage is
counted when an order carrying the coupon is confirmed as paid.
"""

from dataclasses import dataclass

import structlog
from protean.utils.globals import current_domain

from storefront.coupon.coupon import Coupon
from storefront.exceptions import CouponRejected

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class AppliedCoupon:
    """A coupon that passed every eligibility rule for a given subtotal."""

    coupon_id: str
    code: str
    discount_type: str
    discount_value: float
    applied_discount: float

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "discount_type": self.discount_type,
            "discount_value": self.discount_value,
            "applied_discount": self.applied_discount,
        }


def validate_coupon(code: str, cart_subtotal: float) -> AppliedCoupon:
    """Check ``code`` against ``cart_subtotal`` and compute the discount.

    Raises ``CouponRejected`` with one of the reasons ``invalid_code``,
    ``expired``, ``limit_reached`` or ``minimum_not_met``.
    """
    coupon = current_domain.repository_for(Coupon).find_active_by_code(code)
    if coupon is None:
        raise CouponRejected("invalid_code", "Invalid or inactive coupon code")

    if coupon.is_expired():
        raise CouponRejected("expired", "Coupon has expired")

    if coupon.is_exhausted():
        raise CouponRejected("limit_reached", "Coupon usage limit reached")

    if not coupon.meets_minimum(cart_subtotal):
        minimum = coupon.min_purchase_amount
        raise CouponRejected(
            "minimum_not_met",
            f"Minimum purchase of ${minimum:,.0f} required",
            min_purchase_amount=minimum,
        )

    applied = AppliedCoupon(
        coupon_id=str(coupon.id),
        code=coupon.code,
        discount_type=coupon.discount_type,
        discount_value=coupon.discount_value,
        applied_discount=coupon.discount_for(cart_subtotal),
    )
    logger.debug(
        "coupon_validated",
        code=applied.code,
        subtotal=cart_subtotal,
        applied_discount=applied.applied_discount,
    )
    return applied
