"""Tests for the Order aggregate: creation and the status state machine."""

import json

import pytest

from storefront.exceptions import IllegalTransition
from storefront.order.events import OrderCancelled, OrderDelivered, OrderPaid, OrderPlaced, OrderShipped
from storefront.order.order import Order, OrderStatus


def _make_order(**overrides):
    defaults = {
        "items_data": [
            {"product_id": "prod-001", "title": "Hoodie", "quantity": 2, "price_at_time": 50000.0},
            {"product_id": "prod-002", "title": "Cap", "quantity": 1, "price_at_time": 20000.0},
        ],
        "subtotal": 120000.0,
        "shipping_cost": 10000.0,
        "discount_total": 0.0,
        "total": 130000.0,
        "customer": {"name": "Ana Gómez", "email": "ana@example.com", "phone": "3001234567"},
        "shipping": {"address": "Calle 1 # 2-3", "city": "Bogotá"},
    }
    defaults.update(overrides)
    return Order.create(**defaults)


def _paid_order():
    order = _make_order()
    order.mark_paid(payment_id="pay-001", payment_metadata={"payment_id": "pay-001"})
    return order


class TestOrderCreation:
    def test_created_pending(self):
        assert _make_order().status == OrderStatus.PENDING.value

    def test_items_keep_price_at_time(self):
        order = _make_order()
        assert len(order.items) == 2
        hoodie = next(i for i in order.items if i.product_id == "prod-001")
        assert hoodie.price_at_time == 50000.0
        assert hoodie.quantity == 2

    def test_contact_and_shipping_captured(self):
        order = _make_order()
        assert order.customer.name == "Ana Gómez"
        assert order.shipping.city == "Bogotá"

    def test_guest_order_has_no_user(self):
        assert _make_order().user_id is None

    def test_accepts_explicit_id(self):
        order = _make_order(id="ord-fixed-001")
        assert str(order.id) == "ord-fixed-001"

    def test_raises_placed_event(self):
        order = _make_order(coupon_code="SAVE10")
        event = order._events[0]
        assert isinstance(event, OrderPlaced)
        assert event.total == 130000.0
        assert event.coupon_code == "SAVE10"
        assert len(json.loads(event.items)) == 2


class TestOrderQueries:
    def test_quantities_summed_per_product(self):
        order = _make_order(
            items_data=[
                {"product_id": "prod-001", "title": "Hoodie", "quantity": 2, "price_at_time": 50000.0},
                {"product_id": "prod-001", "title": "Hoodie", "quantity": 3, "price_at_time": 50000.0},
            ]
        )
        assert order.quantities_by_product() == {"prod-001": 5}

    def test_pending_is_not_processed(self):
        assert _make_order().is_processed() is False

    @pytest.mark.parametrize("status", ["paid", "shipped", "delivered"])
    def test_processed_states(self, status):
        order = _make_order()
        order.status = status
        assert order.is_processed() is True

    def test_cancelled_is_not_processed(self):
        order = _make_order()
        order.cancel()
        assert order.is_processed() is False


class TestMarkPaid:
    def test_sets_status_and_payment_details(self):
        order = _paid_order()
        assert order.status == OrderStatus.PAID.value
        assert order.payment_id == "pay-001"
        assert order.paid_at is not None
        assert json.loads(order.payment_metadata) == {"payment_id": "pay-001"}

    def test_raises_paid_event(self):
        order = _paid_order()
        event = order._events[-1]
        assert isinstance(event, OrderPaid)
        assert event.payment_id == "pay-001"

    def test_cannot_pay_twice(self):
        order = _paid_order()
        with pytest.raises(IllegalTransition):
            order.mark_paid(payment_id="pay-002")

    def test_cannot_pay_cancelled_order(self):
        order = _make_order()
        order.cancel()
        with pytest.raises(IllegalTransition):
            order.mark_paid(payment_id="pay-001")


class TestManualTransitions:
    def test_ship_records_carrier_and_tracking(self):
        order = _paid_order()
        order.ship(carrier="Servientrega", tracking_number="SV-123")
        assert order.status == OrderStatus.SHIPPED.value
        assert order.carrier == "Servientrega"
        assert order.tracking_number == "SV-123"
        assert isinstance(order._events[-1], OrderShipped)

    def test_deliver_after_ship(self):
        order = _paid_order()
        order.ship(carrier="Servientrega", tracking_number="SV-123")
        order.deliver()
        assert order.status == OrderStatus.DELIVERED.value
        assert isinstance(order._events[-1], OrderDelivered)

    def test_cannot_ship_pending_order(self):
        with pytest.raises(IllegalTransition) as exc:
            _make_order().ship(carrier="Servientrega")
        assert exc.value.details == {"current_status": "pending", "requested_status": "shipped"}

    def test_cannot_deliver_paid_order(self):
        with pytest.raises(IllegalTransition):
            _paid_order().deliver()

    def test_cancel_paid_order(self):
        order = _paid_order()
        order.cancel()
        assert order.status == OrderStatus.CANCELLED.value
        event = order._events[-1]
        assert isinstance(event, OrderCancelled)
        assert event.previous_status == "paid"

    def test_cannot_cancel_shipped_order(self):
        order = _paid_order()
        order.ship()
        with pytest.raises(IllegalTransition):
            order.cancel()

    def test_delivered_is_terminal(self):
        order = _paid_order()
        order.ship()
        order.deliver()
        for target in OrderStatus:
            with pytest.raises(IllegalTransition):
                order.assert_can_transition(target)
