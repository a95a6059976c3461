"""Storefront bounded context: Catalogue stock, Coupons, Orders and Payments.

Handles server-side cart pricing, order placement, payment preference
creation with the payment provider, and reconciliation of provider
notifications into paid orders with exactly-once stock deduction.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
