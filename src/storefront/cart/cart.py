"""Cart aggregate (CQRS): the set of line items an order is placed from.

A cart stays attached to its order after placement: the order's line items
*are* the cart's line items, and each line carries its own fulfillment
status. Deleting an order deletes its cart.

Line Item State Machine:
    NOT_PROCESSED → PROCESSING → SHIPPED → DELIVERED
    any active status → CANCELLED
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from storefront.cart.events import CartBoundToOrder, CartItemAdded, LineItemStatusChanged
from storefront.domain import storefront


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class LineItemStatus(Enum):
    NOT_PROCESSED = "Not_processed"
    PROCESSING = "Processing"
    SHIPPED = "Shipped"
    DELIVERED = "Delivered"
    CANCELLED = "Cancelled"


ACTIVE_STATUSES = frozenset({LineItemStatus.NOT_PROCESSED, LineItemStatus.PROCESSING, LineItemStatus.SHIPPED})
TERMINAL_STATUSES = frozenset({LineItemStatus.DELIVERED, LineItemStatus.CANCELLED})

_VALID_TRANSITIONS = {
    LineItemStatus.NOT_PROCESSED: {
        LineItemStatus.PROCESSING,
        LineItemStatus.SHIPPED,
        LineItemStatus.DELIVERED,
        LineItemStatus.CANCELLED,
    },
    LineItemStatus.PROCESSING: {
        LineItemStatus.SHIPPED,
        LineItemStatus.DELIVERED,
        LineItemStatus.CANCELLED,
    },
    LineItemStatus.SHIPPED: {LineItemStatus.DELIVERED, LineItemStatus.CANCELLED},
    LineItemStatus.DELIVERED: set(),  # Terminal
    LineItemStatus.CANCELLED: set(),  # Terminal
}


def parse_status(value) -> LineItemStatus:
    """Coerce a status name (``"Shipped"``) or enum member to a ``LineItemStatus``."""
    if isinstance(value, LineItemStatus):
        return value
    try:
        return LineItemStatus(value)
    except ValueError:
        raise ValidationError({"status": [f"Unknown line item status: {value}"]}) from None


def can_transition(current: LineItemStatus, target: LineItemStatus) -> bool:
    return target in _VALID_TRANSITIONS[current]


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Cart")
class LineItem:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    unit_price = Float(required=True, min_value=0.0)
    taxable = Boolean(default=False)
    status = String(choices=LineItemStatus, default=LineItemStatus.NOT_PROCESSED.value)
    added_at = DateTime()
    updated_at = DateTime()

    @property
    def current_status(self) -> LineItemStatus:
        return LineItemStatus(self.status)

    @property
    def is_active(self) -> bool:
        return self.current_status in ACTIVE_STATUSES


# ---------------------------------------------------------------------------
# Aggregate
# ---------------------------------------------------------------------------
@storefront.aggregate
class Cart:
    user_id = Identifier()  # Nullable for guest carts
    order_id = Identifier()  # Set once an order is placed from this cart
    items = HasMany(LineItem)
    created_at = DateTime()
    updated_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, user_id=None):
        now = datetime.now(UTC)
        return cls(user_id=user_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    def find_item(self, item_id):
        return next((i for i in self.items if str(i.id) == str(item_id)), None)

    def items_in(self, status):
        status = parse_status(status)
        return [i for i in self.items if i.current_status == status]

    @property
    def all_cancelled(self) -> bool:
        return bool(self.items) and all(i.current_status == LineItemStatus.CANCELLED for i in self.items)

    # -------------------------------------------------------------------
    # Item management
    # -------------------------------------------------------------------
    def add_item(self, product_id, quantity, unit_price, taxable=False):
        """Add a product to the cart (or increase quantity if already present)."""
        if self.order_id:
            raise ValidationError({"cart": ["Items cannot be added to a cart that has been ordered"]})

        existing = next((i for i in self.items if str(i.product_id) == str(product_id)), None)
        now = datetime.now(UTC)

        if existing:
            existing.quantity += quantity
            existing.updated_at = now
            item_id = str(existing.id)
        else:
            item = LineItem(
                product_id=product_id,
                quantity=quantity,
                unit_price=unit_price,
                taxable=taxable,
                status=LineItemStatus.NOT_PROCESSED.value,
                added_at=now,
                updated_at=now,
            )
            self.add_items(item)
            item_id = str(item.id)

        self.updated_at = now

        self.raise_(
            CartItemAdded(
                cart_id=str(self.id),
                item_id=item_id,
                product_id=str(product_id),
                quantity=quantity,
            )
        )
        return item_id

    def update_item_status(self, item_id, new_status):
        """Move one line to ``new_status``. Returns the line's previous status."""
        item = self.find_item(item_id)
        if item is None:
            raise ObjectNotFoundError(f"Cannot find item with the id: {item_id}.")

        current = item.current_status
        target = parse_status(new_status)
        if not can_transition(current, target):
            raise ValidationError({"status": [f"Cannot transition line item from {current.value} to {target.value}"]})

        now = datetime.now(UTC)
        item.status = target.value
        item.updated_at = now
        self.updated_at = now

        self.raise_(
            LineItemStatusChanged(
                cart_id=str(self.id),
                item_id=str(item.id),
                product_id=str(item.product_id),
                previous_status=current.value,
                new_status=target.value,
                changed_at=now,
            )
        )
        return current

    # -------------------------------------------------------------------
    # Lifecycle
    # -------------------------------------------------------------------
    def bind_to_order(self, order_id, user_id=None):
        """Attach the cart to its order. A guest cart is adopted by ``user_id``."""
        if self.order_id:
            raise ValidationError({"cart": ["This cart has already been ordered"]})
        if not self.items:
            raise ValidationError({"cart": ["An order cannot be placed from an empty cart"]})

        now = datetime.now(UTC)
        self.order_id = order_id
        if not self.user_id and user_id:
            self.user_id = user_id
        self.updated_at = now

        self.raise_(
            CartBoundToOrder(
                cart_id=str(self.id),
                order_id=str(order_id),
                bound_at=now,
            )
        )
