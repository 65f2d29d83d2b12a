"""Order cancellation: command and handler.

Cancelling an order credits every still-active line back to inventory and
then removes the order together with its cart. Lines that were already
cancelled one by one have been credited at that point and are skipped;
delivered lines are gone from stock for good.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.line_store import CartLineStore
from storefront.domain import storefront
from storefront.inventory.ledger import InventoryLedger
from storefront.order.access import load_order_for, order_not_found
from storefront.order.order import CancellationReason, Order, OrderState, derive_state
from storefront.shared.identity import Requester

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    user_id = Identifier(required=True)
    role = String(max_length=20)


def withdraw_order(order, cart, cancelled_by, reason, restocked_units, lines):
    """Remove ``order`` and its ``cart``, recording ``OrderCancelled``."""
    order_repo = current_domain.repository_for(Order)
    order.withdraw(cancelled_by, reason, restocked_units=restocked_units)
    order_repo.add(order)
    lines.delete_cart(cart)
    order_repo.remove(order)


@storefront.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrder)
    def cancel_order(self, command):
        requester = Requester.of(command.user_id, command.role)
        order = load_order_for(requester, command.order_id)

        lines = CartLineStore()
        try:
            cart = lines.get_cart(order.cart_id)
        except ObjectNotFoundError:
            raise order_not_found(command.order_id) from None

        if derive_state(cart.items) == OrderState.COMPLETED:
            raise ValidationError({"order_id": ["A completed order cannot be cancelled"]})

        credits = [(str(item.product_id), item.quantity) for item in cart.items if item.is_active]
        restocked = InventoryLedger().restock_many(credits, order_id=order.id)

        withdraw_order(
            order,
            cart,
            cancelled_by=requester.user_id,
            reason=CancellationReason.ORDER_CANCELLED,
            restocked_units=sum(restocked.values()),
            lines=lines,
        )

        logger.info(
            "Order cancelled",
            order_id=str(order.id),
            cancelled_by=requester.user_id,
            restocked_products=len(restocked),
        )
        return restocked
