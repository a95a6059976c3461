"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A pending order was created from a server-priced cart at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier()
    items = Text(required=True)  # JSON: list of item dicts
    subtotal = Float(required=True)
    shipping_cost = Float()
    discount_total = Float()
    total = Float(required=True)
    coupon_code = String()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderPaid:
    """Payment was approved and stock deducted for the order."""

    __version__ = 1

    order_id = Identifier(required=True)
    payment_id = String()
    total = Float(required=True)
    coupon_code = String()
    paid_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderShipped:
    __version__ = 1

    order_id = Identifier(required=True)
    carrier = String()
    tracking_number = String()
    shipped_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderDelivered:
    __version__ = 1

    order_id = Identifier(required=True)
    delivered_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_status = String(required=True)
    cancelled_at = DateTime(required=True)
