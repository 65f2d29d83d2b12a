"""Domain events for the Order aggregate."""

from protean.fields import DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A customer placed an order from their cart.

    ``items`` is a JSON array of resolved lines (product name, brand, sku,
    quantity, unit price) so consumers never need to read the catalogue.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    total = Float(required=True)
    items = Text(required=True)
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class OrderCancelled:
    """The order was withdrawn and removed together with its cart.

    ``cancelled_by`` is the requester's user id; ``restocked_units`` is the
    total quantity credited back to inventory by this cancellation.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    cancelled_by = Identifier(required=True)
    reason = String(required=True, max_length=50)
    restocked_units = Integer(default=0)
    cancelled_at = DateTime(required=True)
