"""Domain events for the Coupon aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Coupon")
class CouponCreated:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    discount_type = String(required=True)
    discount_value = Float(required=True)
    usage_limit = Integer()
    min_purchase_amount = Float()
    expiration_date = DateTime()
    created_at = DateTime(required=True)


@storefront.event(part_of="Coupon")
class CouponStatusToggled:
    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    is_active = Boolean()


@storefront.event(part_of="Coupon")
class CouponRedeemed:
    """A coupon was consumed by a paid order."""

    __version__ = 1

    coupon_id = Identifier(required=True)
    code = String(required=True)
    order_id = Identifier(required=True)
    usage_count = Integer(required=True)
    redeemed_at = DateTime(required=True)
