"""Order placement at checkout: command and handler.

Prices the client cart server-side, builds a pending order with the charged
unit prices and creates the provider checkout for it. The order is saved only
after the provider accepted the checkout, so a provider failure leaves no
pending order behind.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.checkout.preference import create_preference
from storefront.checkout.pricing import build_order
from storefront.domain import storefront
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    items = Text(required=True)  # JSON: list of {id, quantity, price?, name?}
    order_id = Identifier()
    coupon_code = String(max_length=50)
    customer = Text()  # JSON: {name, email, phone}
    shipping = Text()  # JSON: {address, city}
    user_id = Identifier()


def _load_json(value):
    return json.loads(value) if isinstance(value, str) else value


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        items = _load_json(command.items) or []
        customer = _load_json(command.customer) or None
        shipping = _load_json(command.shipping) or None

        repo = current_domain.repository_for(Order)
        if command.order_id and repo._dao.query.filter(id=command.order_id).all().items:
            raise ValidationError({"order_id": ["Order already exists"]})

        priced = build_order(
            items,
            coupon_code=command.coupon_code,
            city=shipping.get("city") if shipping else None,
        )

        extra = {"id": command.order_id} if command.order_id else {}
        order = Order.create(
            items_data=[
                {
                    "product_id": line.product_id,
                    "title": line.title,
                    "quantity": line.quantity,
                    "price_at_time": line.unit_price,
                }
                for line in priced.product_lines
            ],
            subtotal=priced.subtotal,
            shipping_cost=priced.shipping_cost,
            discount_total=priced.discount,
            total=priced.total,
            customer=customer,
            shipping=shipping,
            user_id=command.user_id,
            coupon_code=priced.coupon.code if priced.coupon else None,
            **extra,
        )
        # Persisted only once the provider accepted the checkout
        preference = create_preference(priced, str(order.id))
        order.record_preference(preference.preference_id)
        repo.add(order)

        logger.info(
            "order_placed",
            order_id=str(order.id),
            user_id=command.user_id,
            total=order.total,
            preference_id=preference.preference_id,
        )
        return {"url": preference.redirect_url, "order_id": str(order.id)}
