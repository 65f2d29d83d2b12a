"""Domain events for the Cart aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="Cart")
class CartItemAdded:
    """A product was added to the cart, with its price and taxability snapshot."""

    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True)


@storefront.event(part_of="Cart")
class CartBoundToOrder:
    """The cart was claimed by a newly placed order."""

    __version__ = 1

    cart_id = Identifier(required=True)
    order_id = Identifier(required=True)
    bound_at = DateTime(required=True)


@storefront.event(part_of="Cart")
class LineItemStatusChanged:
    __version__ = 1

    cart_id = Identifier(required=True)
    item_id = Identifier(required=True)
    product_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    changed_at = DateTime(required=True)
