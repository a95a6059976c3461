"""Server-side cart revalidation and pricing.

The client cart only says which products and how many. Names, unit prices,
shipping and discounts are all rebuilt here from stored data:

- Each product line uses the product's current name and effective price
  (sale price when set).
- Quantities are summed per product and checked against stock.
- Any client-sent ``shipping`` line is dropped; shipping comes from the
  configured city rate table.
- A coupon code is validated against the product subtotal and appended as a
  negative ``discount`` line.
"""

from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.config import get_settings
from storefront.coupon.validation import AppliedCoupon, validate_coupon
from storefront.exceptions import EmptyCart, InsufficientStock, InvalidCartLine, ProductNotFound

logger = structlog.get_logger(__name__)

SHIPPING_LINE_ID = "shipping"
DISCOUNT_LINE_ID = "discount"


@dataclass(frozen=True)
class PricedLine:
    product_id: str
    title: str
    quantity: int
    unit_price: float
    kind: str = "product"

    @property
    def amount(self) -> float:
        return self.unit_price * self.quantity


@dataclass(frozen=True)
class PricedCart:
    lines: tuple[PricedLine, ...]
    subtotal: float
    shipping_cost: float
    discount: float
    coupon: AppliedCoupon | None = None

    @property
    def total(self) -> float:
        return self.subtotal + self.shipping_cost - self.discount

    @property
    def product_lines(self) -> list[PricedLine]:
        return [line for line in self.lines if line.kind == "product"]


def shipping_cost_for(city: str | None) -> float:
    """Flat shipping rate for ``city``. No city means no shipping charge."""
    if not city:
        return 0.0

    settings = get_settings()
    rates = {name.casefold(): rate for name, rate in settings.shipping_rates.items()}
    return rates.get(city.strip().casefold(), settings.default_shipping_cost)


def _parse_quantity(raw) -> int:
    if isinstance(raw, bool):
        raise InvalidCartLine("Quantity must be a whole number")
    try:
        quantity = int(raw)
    except (TypeError, ValueError) as exc:
        raise InvalidCartLine("Quantity must be a whole number") from exc

    if quantity != raw and str(quantity) != str(raw).strip():
        raise InvalidCartLine("Quantity must be a whole number")
    if quantity <= 0:
        raise InvalidCartLine("Quantity must be positive", quantity=quantity)
    return quantity


def _requested_quantities(client_items) -> dict[str, int]:
    """Sum requested quantities per product id, in first-seen order."""
    requested: dict[str, int] = {}
    for item in client_items:
        product_id = item.get("id") or item.get("product_id")
        if not product_id:
            raise InvalidCartLine("Cart line is missing a product id")

        product_id = str(product_id)
        if product_id == SHIPPING_LINE_ID:
            continue

        requested[product_id] = requested.get(product_id, 0) + _parse_quantity(item.get("quantity"))
    return requested


def _load_product(product_id: str) -> Product:
    try:
        return current_domain.repository_for(Product).get(product_id)
    except ObjectNotFoundError as exc:
        raise ProductNotFound(f"Product {product_id} not found", product_id=product_id) from exc


def build_order(client_items, coupon_code: str | None = None, city: str | None = None) -> PricedCart:
    """Rebuild a client cart from stored product data and price it.

    Raises ``EmptyCart``, ``InvalidCartLine``, ``ProductNotFound``,
    ``InsufficientStock`` or ``CouponRejected``.
    """
    if not client_items:
        raise EmptyCart()

    requested = _requested_quantities(client_items)
    if not requested:
        raise EmptyCart()

    lines: list[PricedLine] = []
    subtotal = 0.0
    for product_id, quantity in requested.items():
        product = _load_product(product_id)
        if not product.has_stock_for(quantity):
            raise InsufficientStock(
                f"Insufficient stock for {product.name}",
                product_id=product_id,
                requested=quantity,
                available=product.stock or 0,
            )

        line = PricedLine(
            product_id=str(product.id),
            title=product.name,
            quantity=quantity,
            unit_price=product.effective_price,
        )
        lines.append(line)
        subtotal += line.amount

    shipping_cost = shipping_cost_for(city)
    if shipping_cost > 0:
        lines.append(
            PricedLine(
                product_id=SHIPPING_LINE_ID,
                title=f"Shipping ({city})",
                quantity=1,
                unit_price=shipping_cost,
                kind="shipping",
            )
        )

    coupon = None
    discount = 0.0
    if coupon_code:
        coupon = validate_coupon(coupon_code, subtotal)
        discount = coupon.applied_discount
        if discount > 0:
            lines.append(
                PricedLine(
                    product_id=DISCOUNT_LINE_ID,
                    title=f"Discount ({coupon.code})",
                    quantity=1,
                    unit_price=-discount,
                    kind="discount",
                )
            )

    priced = PricedCart(
        lines=tuple(lines),
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        discount=discount,
        coupon=coupon,
    )
    logger.debug(
        "cart_priced",
        products=len(requested),
        subtotal=subtotal,
        shipping_cost=shipping_cost,
        discount=discount,
        total=priced.total,
    )
    return priced
