"""Provider payment notifications: parsing, authentication and reconciliation.

Mercado Pago delivers notifications in two shapes: the legacy IPN style with
``topic`` and ``id`` in the query string, and the webhook style with ``type``
and ``data.id`` in the query string or JSON body. Both are reduced to a
``PaymentNotification`` before anything else happens.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import String
from protean.utils.globals import current_domain

from storefront.config import get_settings
from storefront.domain import storefront
from storefront.exceptions import InvalidSignature
from storefront.order.confirmation import settle_order
from storefront.order.order import Order
from storefront.payment.gateway import get_gateway
from storefront.payment.signature import verify_signature

logger = structlog.get_logger(__name__)

PAYMENT_TOPIC = "payment"


@dataclass(frozen=True)
class PaymentNotification:
    topic: str | None
    resource_id: str | None

    @classmethod
    def parse(cls, query: dict, body: dict | None = None) -> "PaymentNotification":
        """Resolve topic and resource id, preferring the query string over the body."""
        body = body if isinstance(body, dict) else {}
        body_data = body.get("data") if isinstance(body.get("data"), dict) else {}

        topic = query.get("topic") or query.get("type") or body.get("type")
        resource_id = query.get("id") or query.get("data.id") or body_data.get("id")

        return cls(
            topic=str(topic) if topic else None,
            resource_id=str(resource_id) if resource_id else None,
        )

    @property
    def is_payment(self) -> bool:
        return self.topic == PAYMENT_TOPIC and bool(self.resource_id)


def authenticate_notification(
    notification: PaymentNotification,
    signature_header: str | None,
    request_id: str | None,
) -> None:
    """Raise ``InvalidSignature`` unless the notification is signed with the configured secret.

    Without a configured secret nothing is checked.
    """
    secret = get_settings().webhook_secret
    if not secret:
        logger.warning("webhook_signature_unchecked", reason="MP_WEBHOOK_SECRET not configured")
        return

    if not verify_signature(secret, signature_header, request_id, notification.resource_id):
        logger.error(
            "webhook_signature_rejected",
            topic=notification.topic,
            resource_id=notification.resource_id,
            request_id=request_id,
        )
        raise InvalidSignature()


@storefront.command(part_of="Order")
class ReconcilePaymentNotification:
    topic = String(max_length=50)
    resource_id = String(max_length=100)


@storefront.command_handler(part_of=Order)
class PaymentNotificationHandler:
    @handle(ReconcilePaymentNotification)
    def reconcile(self, command):
        """Confirm the order behind an approved payment. Everything else is logged and ignored."""
        notification = PaymentNotification(topic=command.topic, resource_id=command.resource_id)
        if not notification.is_payment:
            logger.info("webhook_ignored", topic=notification.topic, resource_id=notification.resource_id)
            return None

        payment = get_gateway().get_payment(notification.resource_id)
        if not payment.is_approved:
            logger.info(
                "webhook_payment_not_approved",
                payment_id=payment.payment_id,
                payment_status=payment.status,
                external_reference=payment.external_reference,
            )
            return None

        if not payment.external_reference:
            logger.warning("webhook_payment_without_reference", payment_id=payment.payment_id)
            return None

        logger.info(
            "webhook_confirming_order",
            order_id=payment.external_reference,
            payment_id=payment.payment_id,
        )
        order = current_domain.repository_for(Order).get(payment.external_reference)
        return settle_order(
            order,
            payment_id=payment.payment_id,
            payment_metadata=payment.to_metadata(),
        )


def reconcile_notification(
    query: dict,
    body: dict | None,
    signature_header: str | None,
    request_id: str | None,
):
    """Authenticate a provider notification and reconcile it into the order it names."""
    notification = PaymentNotification.parse(query, body)
    authenticate_notification(notification, signature_header, request_id)

    command = ReconcilePaymentNotification(
        topic=notification.topic,
        resource_id=notification.resource_id,
    )
    return current_domain.process(command, asynchronous=False)
