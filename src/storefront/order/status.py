"""Manual order status changes from the owner dashboard."""

import structlog
from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.account.profile import require_owner
from storefront.domain import storefront
from storefront.order.confirmation import settle_order
from storefront.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateOrderStatus:
    actor_id = Identifier()
    order_id = Identifier(required=True)
    status = String(required=True, choices=OrderStatus)
    carrier = String(max_length=100)
    tracking_number = String(max_length=255)


@storefront.command_handler(part_of=Order)
class UpdateOrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        require_owner(command.actor_id)

        target = OrderStatus(command.status)
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)

        if target == OrderStatus.PAID:
            # Same path as provider confirmation so stock is deducted once
            order.assert_can_transition(OrderStatus.PAID)
            result = settle_order(order, payment_metadata={"source": "manual", "actor_id": command.actor_id})
            return result.status

        if target == OrderStatus.SHIPPED:
            order.ship(carrier=command.carrier, tracking_number=command.tracking_number)
        elif target == OrderStatus.DELIVERED:
            order.deliver()
        elif target == OrderStatus.CANCELLED:
            order.cancel()
        else:
            order.assert_can_transition(target)
        repo.add(order)

        logger.info(
            "order_status_updated",
            order_id=str(order.id),
            status=order.status,
            actor_id=command.actor_id,
        )
        return order.status
