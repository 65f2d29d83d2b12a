"""Order placement: command and handler.

Placing an order binds the cart to a new order in one unit of work. The
confirmation email is not sent here; ``OrderPlaced`` carries everything the
notifications handler needs and is dispatched after commit.
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.inventory.product import Product
from storefront.order.order import Order
from storefront.shared.identity import Requester

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class PlaceOrder:
    cart_id = Identifier(required=True)
    total = Float(required=True)
    user_id = Identifier(required=True)
    role = String(max_length=20)


def _resolve_lines(cart) -> list[dict]:
    product_repo = current_domain.repository_for(Product)
    lines = []
    for item in cart.items:
        try:
            product = product_repo.get(item.product_id)
        except ObjectNotFoundError:
            product = None
        lines.append(
            {
                "item_id": str(item.id),
                "product_id": str(item.product_id),
                "name": product.name if product else None,
                "brand": product.brand if product else None,
                "sku": product.sku if product else None,
                "quantity": item.quantity,
                "unit_price": item.unit_price,
            }
        )
    return lines


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        requester = Requester.of(command.user_id, command.role)

        cart_repo = current_domain.repository_for(Cart)
        try:
            cart = cart_repo.get(command.cart_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Cannot find cart with the id: {command.cart_id}.") from None
        if cart.user_id and not requester.owns(cart.user_id):
            raise ObjectNotFoundError(f"Cannot find cart with the id: {command.cart_id}.")

        order_repo = current_domain.repository_for(Order)
        if cart.order_id or order_repo.bound_to_cart(cart.id):
            raise ValidationError({"cart_id": ["This cart has already been ordered"]})
        if not cart.items:
            raise ValidationError({"cart_id": ["An order cannot be placed from an empty cart"]})

        order = Order.place(
            user_id=requester.user_id,
            cart_id=str(cart.id),
            total=command.total,
            items=json.dumps(_resolve_lines(cart)),
        )
        cart.bind_to_order(order.id, user_id=requester.user_id)

        order_repo.add(order)
        cart_repo.add(cart)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            cart_id=str(cart.id),
            user_id=requester.user_id,
            total=order.total,
            line_items=len(cart.items),
        )
        return str(order.id)
