"""Order aggregate (CQRS): a customer's commitment to buy the lines of a cart.

The order itself is immutable after creation: it records who placed it,
which cart it was placed from, and the total agreed at placement. Everything
that changes afterwards (line statuses, the live totals) lives on the bound
cart, and the order's state is derived from those lines:

    OPEN            at least one line is still active
    FULLY_CANCELLED every line is Cancelled
    COMPLETED       every line is terminal and at least one was Delivered
"""

from datetime import UTC, datetime
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import DateTime, Float, Identifier

from storefront.cart.cart import TERMINAL_STATUSES, LineItemStatus
from storefront.domain import storefront
from storefront.order.events import OrderCancelled, OrderPlaced


class OrderState(Enum):
    OPEN = "Open"
    FULLY_CANCELLED = "FullyCancelled"
    COMPLETED = "Completed"


class CancellationReason(Enum):
    ORDER_CANCELLED = "Order_Cancelled"
    ALL_ITEMS_CANCELLED = "All_Items_Cancelled"


def derive_state(items) -> OrderState:
    statuses = [LineItemStatus(i.status) for i in items]
    if statuses and all(s == LineItemStatus.CANCELLED for s in statuses):
        return OrderState.FULLY_CANCELLED
    if statuses and all(s in TERMINAL_STATUSES for s in statuses) and LineItemStatus.DELIVERED in statuses:
        return OrderState.COMPLETED
    return OrderState.OPEN


def _round_total(value) -> float:
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@storefront.aggregate
class Order:
    user_id = Identifier(required=True)
    cart_id = Identifier(required=True)
    total = Float(required=True, min_value=0.0)
    created_at = DateTime()

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, user_id, cart_id, total, items="[]"):
        """Create an order for ``cart_id``.

        ``items`` is the serialized line summary carried on ``OrderPlaced``.
        """
        if total is None or total < 0:
            raise ValidationError({"total": ["Order total must be a non-negative amount"]})

        now = datetime.now(UTC)
        order = cls(
            user_id=user_id,
            cart_id=cart_id,
            total=_round_total(total),
            created_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                user_id=str(user_id),
                cart_id=str(cart_id),
                total=order.total,
                items=items,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Ownership
    # -------------------------------------------------------------------
    def is_owned_by(self, user_id) -> bool:
        return str(self.user_id) == str(user_id)

    # -------------------------------------------------------------------
    # Withdrawal
    # -------------------------------------------------------------------
    def withdraw(self, cancelled_by, reason: CancellationReason, restocked_units=0):
        """Record that the order is going away. The caller deletes it."""
        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                user_id=str(self.user_id),
                cart_id=str(self.cart_id),
                cancelled_by=str(cancelled_by),
                reason=reason.value,
                restocked_units=restocked_units,
                cancelled_at=datetime.now(UTC),
            )
        )
