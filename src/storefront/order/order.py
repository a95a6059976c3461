"""Order aggregate.

State Machine:
    PENDING → PAID → SHIPPED → DELIVERED
    CANCELLED (from PENDING, PAID)

Orders are created pending at checkout with the server-priced items and
totals. Payment confirmation moves them to paid exactly once; everything after
that is a manual dashboard action.
"""

import json
from datetime import UTC, datetime
from enum import Enum

from protean.fields import (
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
    ValueObject,
)

from storefront.domain import storefront
from storefront.exceptions import IllegalTransition
from storefront.order.events import (
    OrderCancelled,
    OrderDelivered,
    OrderPaid,
    OrderPlaced,
    OrderShipped,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PAID, OrderStatus.CANCELLED},
    OrderStatus.PAID: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
}

# Orders past payment; confirming them again is a no-op
PROCESSED_STATES = {OrderStatus.PAID, OrderStatus.SHIPPED, OrderStatus.DELIVERED}


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@storefront.value_object(part_of="Order")
class CustomerContact:
    name = String(required=True, max_length=150)
    email = String(max_length=254)
    phone = String(max_length=30)


@storefront.value_object(part_of="Order")
class ShippingDetails:
    """Where the order ships. Captured at checkout and never changed afterwards."""

    address = String(required=True, max_length=255)
    city = String(required=True, max_length=100)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderItem:
    """A purchased product line.

    ``price_at_time`` is the unit price charged at checkout, independent of
    later catalogue price changes.
    """

    product_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    quantity = Integer(required=True, min_value=1)
    price_at_time = Float(required=True, min_value=0.0)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    user_id = Identifier()  # None for guest checkouts
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    items = HasMany(OrderItem)
    customer = ValueObject(CustomerContact)
    shipping = ValueObject(ShippingDetails)
    subtotal = Float(default=0.0)
    shipping_cost = Float(default=0.0)
    discount_total = Float(default=0.0)
    total = Float(default=0.0)
    coupon_code = String(max_length=50)
    preference_id = String(max_length=255)
    payment_id = String(max_length=255)
    payment_metadata = Text()  # JSON: provider payment details
    paid_at = DateTime()
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def create(
        cls,
        items_data,
        subtotal,
        shipping_cost,
        discount_total,
        total,
        customer=None,
        shipping=None,
        user_id=None,
        coupon_code=None,
        **kwargs,
    ):
        """Create a pending order from a priced cart.

        Args:
            items_data: List of dicts with product_id, title, quantity and
                        price_at_time.
            customer: Dict with name, email, phone.
            shipping: Dict with address, city.
        """
        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            status=OrderStatus.PENDING.value,
            customer=CustomerContact(**customer) if customer else None,
            shipping=ShippingDetails(**shipping) if shipping else None,
            subtotal=subtotal,
            shipping_cost=shipping_cost,
            discount_total=discount_total,
            total=total,
            coupon_code=coupon_code,
            created_at=now,
            updated_at=now,
            **kwargs,
        )
        for item_data in items_data:
            order.add_items(OrderItem(**item_data))

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id) if user_id else None,
                items=json.dumps(items_data),
                subtotal=subtotal,
                shipping_cost=shipping_cost,
                discount_total=discount_total,
                total=total,
                coupon_code=coupon_code,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def is_processed(self) -> bool:
        return OrderStatus(self.status) in PROCESSED_STATES

    def quantities_by_product(self) -> dict[str, int]:
        """Total quantity ordered per product id."""
        quantities: dict[str, int] = {}
        for item in self.items:
            key = str(item.product_id)
            quantities[key] = quantities.get(key, 0) + item.quantity
        return quantities

    # -------------------------------------------------------------------
    # State transition helper
    # -------------------------------------------------------------------
    def assert_can_transition(self, target_status):
        current = OrderStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise IllegalTransition(
                f"Cannot transition from {current.value} to {target_status.value}",
                current_status=current.value,
                requested_status=target_status.value,
            )

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def record_preference(self, preference_id):
        self.preference_id = preference_id
        self.updated_at = datetime.now(UTC)

    def mark_paid(self, payment_id=None, payment_metadata=None):
        """Move a pending order to paid and attach the provider payment details."""
        self.assert_can_transition(OrderStatus.PAID)

        now = datetime.now(UTC)
        self.status = OrderStatus.PAID.value
        self.payment_id = str(payment_id) if payment_id else None
        self.payment_metadata = json.dumps(payment_metadata, default=str) if payment_metadata else None
        self.paid_at = now
        self.updated_at = now

        self.raise_(
            OrderPaid(
                order_id=str(self.id),
                payment_id=self.payment_id,
                total=self.total,
                coupon_code=self.coupon_code,
                paid_at=now,
            )
        )

    def ship(self, carrier=None, tracking_number=None):
        self.assert_can_transition(OrderStatus.SHIPPED)

        now = datetime.now(UTC)
        self.status = OrderStatus.SHIPPED.value
        self.carrier = carrier
        self.tracking_number = tracking_number
        self.updated_at = now

        self.raise_(
            OrderShipped(
                order_id=str(self.id),
                carrier=carrier,
                tracking_number=tracking_number,
                shipped_at=now,
            )
        )

    def deliver(self):
        self.assert_can_transition(OrderStatus.DELIVERED)

        now = datetime.now(UTC)
        self.status = OrderStatus.DELIVERED.value
        self.updated_at = now

        self.raise_(OrderDelivered(order_id=str(self.id), delivered_at=now))

    def cancel(self):
        self.assert_can_transition(OrderStatus.CANCELLED)

        previous_status = self.status
        now = datetime.now(UTC)
        self.status = OrderStatus.CANCELLED.value
        self.updated_at = now

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                previous_status=previous_status,
                cancelled_at=now,
            )
        )
