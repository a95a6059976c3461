"""Tests for Coupon aggregate creation, eligibility and usage."""

from datetime import UTC, datetime, timedelta

import pytest
from protean.exceptions import ValidationError

from storefront.coupon.coupon import Coupon, DiscountType
from storefront.coupon.events import CouponCreated, CouponRedeemed, CouponStatusToggled


def _make_coupon(**overrides):
    defaults = {
        "code": "save10",
        "discount_type": DiscountType.PERCENTAGE.value,
        "discount_value": 10.0,
    }
    defaults.update(overrides)
    return Coupon.create(**defaults)


class TestCouponCreation:
    def test_code_is_upper_cased(self):
        coupon = _make_coupon(code="  summer25 ")
        assert coupon.code == "SUMMER25"

    def test_created_active_with_no_usage(self):
        coupon = _make_coupon()
        assert coupon.is_active is True
        assert coupon.usage_count == 0

    def test_non_positive_usage_limit_means_unlimited(self):
        assert _make_coupon(usage_limit=0).usage_limit is None
        assert _make_coupon(usage_limit=-5).usage_limit is None

    def test_positive_usage_limit_is_kept(self):
        assert _make_coupon(usage_limit=3).usage_limit == 3

    def test_percentage_above_one_hundred_rejected(self):
        with pytest.raises(ValidationError) as exc:
            _make_coupon(discount_value=120.0)
        assert "Percentage discount cannot exceed 100" in str(exc.value)

    def test_fixed_discount_can_exceed_one_hundred(self):
        coupon = _make_coupon(discount_type=DiscountType.FIXED.value, discount_value=5000.0)
        assert coupon.discount_value == 5000.0

    def test_zero_discount_rejected(self):
        with pytest.raises(ValidationError):
            _make_coupon(discount_type=DiscountType.FIXED.value, discount_value=0.0)

    def test_unknown_discount_type_rejected(self):
        with pytest.raises(ValidationError):
            _make_coupon(discount_type="bogo")

    def test_raises_created_event(self):
        coupon = _make_coupon()
        assert len(coupon._events) == 1
        event = coupon._events[0]
        assert isinstance(event, CouponCreated)
        assert event.code == "SAVE10"


class TestCouponEligibility:
    def test_no_expiration_never_expires(self):
        assert _make_coupon().is_expired() is False

    def test_past_expiration_is_expired(self):
        coupon = _make_coupon(expiration_date=datetime.now(UTC) - timedelta(days=1))
        assert coupon.is_expired() is True

    def test_future_expiration_is_not_expired(self):
        coupon = _make_coupon(expiration_date=datetime.now(UTC) + timedelta(days=1))
        assert coupon.is_expired() is False

    def test_naive_expiration_treated_as_utc(self):
        coupon = _make_coupon(expiration_date=datetime(2020, 1, 1))
        assert coupon.is_expired(now=datetime(2020, 1, 2, tzinfo=UTC)) is True
        assert coupon.is_expired(now=datetime(2019, 12, 31, tzinfo=UTC)) is False

    def test_exhausted_at_usage_limit(self):
        coupon = _make_coupon(usage_limit=2)
        coupon.usage_count = 2
        assert coupon.is_exhausted() is True

    def test_not_exhausted_below_limit(self):
        coupon = _make_coupon(usage_limit=2)
        coupon.usage_count = 1
        assert coupon.is_exhausted() is False

    def test_unlimited_never_exhausted(self):
        coupon = _make_coupon()
        coupon.usage_count = 10_000
        assert coupon.is_exhausted() is False

    def test_minimum_purchase(self):
        coupon = _make_coupon(min_purchase_amount=50000.0)
        assert coupon.meets_minimum(49999.0) is False
        assert coupon.meets_minimum(50000.0) is True


class TestCouponDiscount:
    def test_percentage_discount(self):
        assert _make_coupon().discount_for(100000.0) == 10000.0

    def test_fixed_discount(self):
        coupon = _make_coupon(discount_type=DiscountType.FIXED.value, discount_value=15000.0)
        assert coupon.discount_for(100000.0) == 15000.0

    def test_fixed_discount_clamped_to_subtotal(self):
        coupon = _make_coupon(discount_type=DiscountType.FIXED.value, discount_value=15000.0)
        assert coupon.discount_for(8000.0) == 8000.0

    def test_full_percentage_equals_subtotal(self):
        coupon = _make_coupon(discount_value=100.0)
        assert coupon.discount_for(42000.0) == 42000.0


class TestCouponStatusAndUsage:
    def test_toggle_deactivates_and_reactivates(self):
        coupon = _make_coupon()
        coupon.toggle_status()
        assert coupon.is_active is False
        coupon.toggle_status()
        assert coupon.is_active is True

    def test_toggle_raises_event(self):
        coupon = _make_coupon()
        coupon.toggle_status()
        event = coupon._events[-1]
        assert isinstance(event, CouponStatusToggled)
        assert event.is_active is False

    def test_redeem_increments_usage(self):
        coupon = _make_coupon()
        coupon.redeem("ord-001")
        assert coupon.usage_count == 1

    def test_redeem_raises_event(self):
        coupon = _make_coupon()
        coupon.redeem("ord-001")
        event = coupon._events[-1]
        assert isinstance(event, CouponRedeemed)
        assert event.order_id == "ord-001"
        assert event.usage_count == 1
