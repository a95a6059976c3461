"""Product aggregate: the authoritative price and stock used at checkout.

Catalogue editing lives in the admin dashboard; checkout only reads
``effective_price`` and ``stock``, and the payment reconciler deducts stock
once an order is paid.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Integer, String, Text

from storefront.catalogue.events import StockDeducted
from storefront.domain import storefront


@storefront.aggregate
class Product:
    name = String(required=True, max_length=255)
    description = Text()
    price = Float(required=True, min_value=0.0)
    sale_price = Float(min_value=0.0)  # Overrides price while set
    stock = Integer(default=0, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def sale_price_cannot_exceed_price(self):
        if self.sale_price is not None and self.price is not None and self.sale_price > self.price:
            raise ValidationError({"sale_price": ["Sale price cannot be higher than the regular price"]})

    @classmethod
    def create(cls, name, price, stock=0, sale_price=None, description=None, **kwargs):
        now = datetime.now(UTC)
        return cls(
            name=name,
            price=price,
            sale_price=sale_price,
            stock=stock,
            description=description,
            created_at=now,
            updated_at=now,
            **kwargs,
        )

    @property
    def effective_price(self) -> float:
        """Unit price charged at checkout."""
        return self.sale_price if self.sale_price is not None else self.price

    def has_stock_for(self, quantity) -> bool:
        return (self.stock or 0) >= quantity

    def deduct_stock(self, quantity, order_id):
        """Deduct stock for a paid order, never going below zero."""
        if quantity <= 0:
            raise ValidationError({"quantity": ["Quantity must be positive"]})

        previous_stock = self.stock or 0
        self.stock = max(0, previous_stock - quantity)
        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            StockDeducted(
                product_id=str(self.id),
                order_id=str(order_id),
                requested_quantity=quantity,
                previous_stock=previous_stock,
                new_stock=self.stock,
                deducted_at=now,
            )
        )
