"""Line item status updates: command and handler.

Cancelling a line is the only status change that touches inventory: the
transition into ``Cancelled`` credits the line's quantity back exactly once,
and cancelling the last open line removes the whole order. Every other
status change is a fulfillment update reserved for admins and merchants.
"""

from dataclasses import dataclass

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String

from storefront.cart.cart import TERMINAL_STATUSES, LineItemStatus, parse_status
from storefront.cart.line_store import CartLineStore
from storefront.domain import storefront
from storefront.inventory.ledger import InventoryLedger
from storefront.order.access import load_order_for, order_not_found
from storefront.order.cancellation import withdraw_order
from storefront.order.order import CancellationReason, Order
from storefront.shared.identity import Requester

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class UpdateItemStatus:
    order_id = Identifier(required=True)
    item_id = Identifier(required=True)
    cart_id = Identifier()
    status = String(max_length=20, default=LineItemStatus.CANCELLED.value)
    user_id = Identifier(required=True)
    role = String(max_length=20)


@dataclass(frozen=True)
class ItemStatusResult:
    order_id: str
    item_id: str
    status: str
    order_cancelled: bool = False
    conflict: bool = False
    restocked: int = 0


def _item_not_found(item_id) -> ObjectNotFoundError:
    return ObjectNotFoundError(f"Cannot find item with the id: {item_id}.")


@storefront.command_handler(part_of=Order)
class UpdateItemStatusHandler:
    @handle(UpdateItemStatus)
    def update_item_status(self, command):
        requester = Requester.of(command.user_id, command.role)
        target = parse_status(command.status or LineItemStatus.CANCELLED.value)

        if target != LineItemStatus.CANCELLED and not (requester.is_admin or requester.is_merchant):
            raise ValidationError({"status": ["Only an administrator or merchant can update fulfillment status"]})

        order = load_order_for(requester, command.order_id, allow_merchant=True)
        if command.cart_id and str(command.cart_id) != str(order.cart_id):
            raise _item_not_found(command.item_id)

        lines = CartLineStore()
        try:
            cart = lines.get_cart(order.cart_id)
        except ObjectNotFoundError:
            raise order_not_found(command.order_id) from None

        item = cart.find_item(command.item_id)
        if item is None:
            raise _item_not_found(command.item_id)

        if target == LineItemStatus.CANCELLED:
            return self._cancel_item(requester, order, cart, item, lines)
        return self._set_status(order, cart, item, target, lines)

    def _set_status(self, order, cart, item, target, lines):
        if item.current_status == target:
            return ItemStatusResult(str(order.id), str(item.id), target.value, conflict=True)

        lines.set_status(cart, item.id, target)
        return ItemStatusResult(str(order.id), str(item.id), target.value)

    def _cancel_item(self, requester, order, cart, item, lines):
        if item.current_status in TERMINAL_STATUSES:
            logger.info(
                "Line item already final, nothing to cancel",
                order_id=str(order.id),
                item_id=str(item.id),
                status=item.status,
            )
            return ItemStatusResult(str(order.id), str(item.id), item.status, conflict=True)

        lines.set_status(cart, item.id, LineItemStatus.CANCELLED)
        InventoryLedger().restock(item.product_id, item.quantity, order_id=order.id)

        cart = lines.get_cart(cart.id)
        cancelled = lines.list_by_status(cart.id, LineItemStatus.CANCELLED)
        order_cancelled = len(cancelled) == len(cart.items)

        if order_cancelled:
            withdraw_order(
                order,
                cart,
                cancelled_by=requester.user_id,
                reason=CancellationReason.ALL_ITEMS_CANCELLED,
                restocked_units=item.quantity,
                lines=lines,
            )

        logger.info(
            "Line item cancelled",
            order_id=str(order.id),
            item_id=str(item.id),
            restocked=item.quantity,
            order_cancelled=order_cancelled,
        )
        return ItemStatusResult(
            str(order.id),
            str(item.id),
            LineItemStatus.CANCELLED.value,
            order_cancelled=order_cancelled,
            restocked=item.quantity,
        )
