"""Coupon administration: owner-only create, toggle and delete."""

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.account.profile import require_owner
from storefront.coupon.coupon import Coupon, DiscountType
from storefront.domain import storefront

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Coupon")
class CreateCoupon:
    actor_id = Identifier()
    code = String(required=True, max_length=50)
    discount_type = String(required=True, choices=DiscountType)
    discount_value = Float(required=True)
    expiration_date = DateTime()
    usage_limit = Integer()
    min_purchase_amount = Float(default=0.0)


@storefront.command(part_of="Coupon")
class ToggleCouponStatus:
    actor_id = Identifier()
    coupon_id = Identifier(required=True)


@storefront.command(part_of="Coupon")
class DeleteCoupon:
    actor_id = Identifier()
    coupon_id = Identifier(required=True)


@storefront.command_handler(part_of=Coupon)
class CouponManagementHandler:
    @handle(CreateCoupon)
    def create_coupon(self, command):
        require_owner(command.actor_id)

        repo = current_domain.repository_for(Coupon)
        if repo.find_by_code(command.code) is not None:
            raise ValidationError({"code": ["Coupon code already exists"]})

        coupon = Coupon.create(
            code=command.code,
            discount_type=command.discount_type,
            discount_value=command.discount_value,
            expiration_date=command.expiration_date,
            usage_limit=command.usage_limit,
            min_purchase_amount=command.min_purchase_amount,
        )
        repo.add(coupon)

        logger.info("coupon_created", coupon_id=str(coupon.id), code=coupon.code)
        return str(coupon.id)

    @handle(ToggleCouponStatus)
    def toggle_coupon_status(self, command):
        require_owner(command.actor_id)

        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        coupon.toggle_status()
        repo.add(coupon)
        return coupon.is_active

    @handle(DeleteCoupon)
    def delete_coupon(self, command):
        require_owner(command.actor_id)

        repo = current_domain.repository_for(Coupon)
        coupon = repo.get(command.coupon_id)
        repo._dao.delete(coupon)

        logger.info("coupon_deleted", coupon_id=str(coupon.id), code=coupon.code)
