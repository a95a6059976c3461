"""Sends the order confirmation email when an order is paid.

Runs after the payment is committed. Orders without a customer email are
skipped, and a failed delivery is logged without affecting the order.
"""

import structlog
from protean import handle
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.notification import get_email_channel
from storefront.notification.order_confirmation import OrderConfirmationTemplate
from storefront.order.events import OrderPaid
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.event_handler(part_of=Order)
class OrderEmailHandler:
    @handle(OrderPaid)
    def on_order_paid(self, event: OrderPaid) -> None:
        order = current_domain.repository_for(Order).get(event.order_id)
        email = order.customer.email if order.customer else None
        if not email:
            logger.info("order_confirmation_email_skipped", order_id=str(order.id), reason="no customer email")
            return

        content = OrderConfirmationTemplate.render(
            {
                "order_id": str(order.id),
                "total": order.total,
                "items": [
                    {"title": item.title, "quantity": item.quantity, "price": item.price_at_time}
                    for item in order.items
                ],
                "language": get_settings().email_language,
            }
        )

        result = get_email_channel().send(
            to=email,
            subject=content["subject"],
            body=content["body"],
            html_body=content["html_body"],
        )
        if result["status"] != "sent":
            logger.error(
                "order_confirmation_email_failed",
                order_id=str(order.id),
                error=result.get("error"),
            )
            return

        logger.info("order_confirmation_email_sent", order_id=str(order.id), message_id=result["message_id"])
