"""Order payment confirmation: command, handler and the shared settle routine.

Both the provider webhook and the return-page fallback converge here, as does
a manual "paid" status change from the dashboard. Stock is deducted and the
order marked paid at most once per order:

1. Orders already paid, shipped or delivered short-circuit as processed.
2. Products are loaded before any write so a missing product cannot leave a
   half-applied deduction.
3. The order is saved as paid first. Its version guard rejects a concurrent
   confirmation that read the same pending order: the stale write raises
   ``ExpectedVersionError``, the handler unit of work rolls back, and the
   retried command finds the order paid and reports it as processed.
4. Stock deductions and coupon usage are written in the same unit of work
   as the order, so a failure part way through leaves nothing applied.
"""

import json
from dataclasses import dataclass

import structlog
from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.coupon.coupon import Coupon
from storefront.domain import storefront
from storefront.exceptions import PaymentNotVerified
from storefront.order.order import Order, OrderStatus
from storefront.payment.gateway import get_gateway

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ConfirmationResult:
    order_id: str
    confirmed: bool
    already_processed: bool
    status: str

    def to_dict(self) -> dict:
        return {
            "status": "success",
            "order_id": self.order_id,
            "order_status": self.status,
            "already_processed": self.already_processed,
        }


@storefront.command(part_of="Order")
class ConfirmOrder:
    order_id = Identifier(required=True)
    payment_data = Text()  # JSON: provider payment details


def _load_products(order):
    """Load every product on the order, keyed by id. Missing products are skipped."""
    repo = current_domain.repository_for(Product)
    products = {}
    for product_id in order.quantities_by_product():
        results = repo._dao.query.filter(id=product_id).all().items
        if not results:
            logger.warning("product_missing_on_confirmation", order_id=str(order.id), product_id=product_id)
            continue
        products[product_id] = results[0]
    return products


def _redeem_coupon(order):
    repo = current_domain.repository_for(Coupon)
    coupon = repo.find_by_code(order.coupon_code)
    if coupon is None:
        logger.warning("coupon_missing_on_confirmation", order_id=str(order.id), coupon_code=order.coupon_code)
        return

    coupon.redeem(order.id)
    repo.add(coupon)


def settle_order(order, payment_id=None, payment_metadata=None) -> ConfirmationResult:
    """Confirm payment for a loaded ``order`` exactly once.

    Must run inside a unit of work. A concurrent confirmation of the same order
    surfaces as ``ExpectedVersionError`` from the order save or the commit.
    """
    if order.is_processed():
        logger.info("order_already_processed", order_id=str(order.id), status=order.status)
        return ConfirmationResult(str(order.id), confirmed=False, already_processed=True, status=order.status)

    if order.status == OrderStatus.CANCELLED.value:
        logger.warning("payment_for_cancelled_order", order_id=str(order.id), payment_id=payment_id)
        return ConfirmationResult(str(order.id), confirmed=False, already_processed=False, status=order.status)

    products = _load_products(order)

    order.mark_paid(payment_id=payment_id, payment_metadata=payment_metadata)
    current_domain.repository_for(Order).add(order)

    product_repo = current_domain.repository_for(Product)
    for product_id, quantity in order.quantities_by_product().items():
        product = products.get(product_id)
        if product is None:
            continue
        product.deduct_stock(quantity, order_id=order.id)
        product_repo.add(product)

    if order.coupon_code:
        _redeem_coupon(order)

    logger.info(
        "order_confirmed",
        order_id=str(order.id),
        payment_id=payment_id,
        total=order.total,
    )
    return ConfirmationResult(str(order.id), confirmed=True, already_processed=False, status=order.status)


@storefront.command_handler(part_of=Order)
class ConfirmOrderHandler:
    @handle(ConfirmOrder)
    def confirm_order(self, command):
        """Return-page fallback: confirm only a payment the provider reports as approved."""
        # Unknown orders fail before the provider is called
        order = current_domain.repository_for(Order).get(command.order_id)
        if order.is_processed():
            logger.info("order_already_processed", order_id=str(order.id), status=order.status)
            return ConfirmationResult(str(order.id), confirmed=False, already_processed=True, status=order.status)

        payment_data = json.loads(command.payment_data) if command.payment_data else {}
        payment_id = payment_data.get("payment_id") or payment_data.get("collection_id")
        if not payment_id:
            raise PaymentNotVerified("payment_id is required to confirm an order")

        payment = get_gateway().get_payment(str(payment_id))
        if not payment.is_approved or str(payment.external_reference) != str(command.order_id):
            logger.warning(
                "return_page_payment_rejected",
                order_id=command.order_id,
                payment_id=payment.payment_id,
                payment_status=payment.status,
                external_reference=payment.external_reference,
            )
            raise PaymentNotVerified(payment_status=payment.status)

        return settle_order(order, payment_id=payment.payment_id, payment_metadata=payment.to_metadata())
