"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Product")
class ProductAdded:
    """A product was added to the catalogue with an opening stock count."""

    __version__ = 1

    product_id = Identifier(required=True)
    sku = String(required=True)
    name = String(required=True)
    price = Float(required=True)
    quantity = Integer(required=True)
    taxable = Boolean(default=False)
    added_at = DateTime(required=True)


@storefront.event(part_of="Product")
class ProductRestocked:
    """Stock was credited back to a product (cancelled order or line)."""

    __version__ = 1

    product_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reason = String(required=True)
    order_id = Identifier()
    restocked_at = DateTime(required=True)
