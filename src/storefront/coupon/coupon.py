"""Coupon aggregate: discount codes with eligibility rules.

A coupon is usable only while it is active, not expired, below its usage
limit (when one is set) and when the cart subtotal reaches the minimum
purchase amount. Codes are case-insensitive: they are stored upper-cased and
matched upper-cased.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String

from storefront.coupon.events import CouponCreated, CouponRedeemed, CouponStatusToggled
from storefront.domain import storefront


class DiscountType(Enum):
    PERCENTAGE = "percentage"
    FIXED = "fixed"


def normalize_code(code: str) -> str:
    return (code or "").strip().upper()


def _as_utc(value: datetime) -> datetime:
    # Naive timestamps are stored as UTC
    return value if value.tzinfo is not None else value.replace(tzinfo=UTC)


@storefront.aggregate
class Coupon:
    code = String(required=True, max_length=50)
    discount_type = String(choices=DiscountType, required=True)
    discount_value = Float(required=True, min_value=0.0)
    expiration_date = DateTime()
    usage_limit = Integer(min_value=1)  # None means unlimited
    usage_count = Integer(default=0, min_value=0)
    min_purchase_amount = Float(default=0.0, min_value=0.0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def percentage_cannot_exceed_one_hundred(self):
        if self.discount_type == DiscountType.PERCENTAGE.value and (self.discount_value or 0) > 100:
            raise ValidationError({"discount_value": ["Percentage discount cannot exceed 100"]})

    @invariant.post
    def discount_value_must_be_positive(self):
        if self.discount_value is not None and self.discount_value <= 0:
            raise ValidationError({"discount_value": ["Discount value must be greater than zero"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        code,
        discount_type,
        discount_value,
        expiration_date=None,
        usage_limit=None,
        min_purchase_amount=0.0,
        **kwargs,
    ):
        """Create an active coupon. A usage limit of zero or less means unlimited."""
        now = datetime.now(UTC)
        coupon = cls(
            code=normalize_code(code),
            discount_type=discount_type,
            discount_value=discount_value,
            expiration_date=expiration_date,
            usage_limit=usage_limit if usage_limit and usage_limit > 0 else None,
            usage_count=0,
            min_purchase_amount=min_purchase_amount or 0.0,
            is_active=True,
            created_at=now,
            updated_at=now,
            **kwargs,
        )
        coupon.raise_(
            CouponCreated(
                coupon_id=str(coupon.id),
                code=coupon.code,
                discount_type=coupon.discount_type,
                discount_value=coupon.discount_value,
                usage_limit=coupon.usage_limit,
                min_purchase_amount=coupon.min_purchase_amount,
                expiration_date=coupon.expiration_date,
                created_at=now,
            )
        )
        return coupon

    # -------------------------------------------------------------------
    # Eligibility
    # -------------------------------------------------------------------
    def is_expired(self, now=None) -> bool:
        if self.expiration_date is None:
            return False
        now = now or datetime.now(UTC)
        return _as_utc(self.expiration_date) < _as_utc(now)

    def is_exhausted(self) -> bool:
        return self.usage_limit is not None and (self.usage_count or 0) >= self.usage_limit

    def meets_minimum(self, subtotal) -> bool:
        return subtotal >= (self.min_purchase_amount or 0.0)

    def discount_for(self, subtotal) -> float:
        """Discount granted on ``subtotal``, never more than the subtotal itself."""
        if DiscountType(self.discount_type) == DiscountType.PERCENTAGE:
            discount = subtotal * self.discount_value / 100
        else:
            discount = self.discount_value

        return min(discount, subtotal)

    # -------------------------------------------------------------------
    # Administration and usage
    # -------------------------------------------------------------------
    def toggle_status(self):
        self.is_active = not self.is_active
        self.updated_at = datetime.now(UTC)

        self.raise_(
            CouponStatusToggled(
                coupon_id=str(self.id),
                code=self.code,
                is_active=self.is_active,
            )
        )

    def redeem(self, order_id):
        """Count one use of the coupon by a paid order."""
        self.usage_count = (self.usage_count or 0) + 1
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            CouponRedeemed(
                coupon_id=str(self.id),
                code=self.code,
                order_id=str(order_id),
                usage_count=self.usage_count,
                redeemed_at=now,
            )
        )


@storefront.repository(part_of=Coupon)
class CouponRepository:
    def find_by_code(self, code: str) -> Coupon | None:
        """Find a coupon by code regardless of its status."""
        results = self._dao.query.filter(code=normalize_code(code)).all().items
        return results[0] if results else None

    def find_active_by_code(self, code: str) -> Coupon | None:
        results = self._dao.query.filter(code=normalize_code(code), is_active=True).all().items
        return results[0] if results else None
