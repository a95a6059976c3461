"""Domain events for the Product aggregate."""

from protean.fields import DateTime, Identifier, Integer

from storefront.domain import storefront


@storefront.event(part_of="Product")
class StockDeducted:
    """Stock was deducted for a paid order."""

    __version__ = 1

    product_id = Identifier(required=True)
    order_id = Identifier(required=True)
    requested_quantity = Integer(required=True)
    previous_stock = Integer(required=True)
    new_stock = Integer(required=True)
    deducted_at = DateTime(required=True)
