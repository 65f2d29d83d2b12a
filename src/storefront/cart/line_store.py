"""Cart line store: status reads and writes over a cart's line items."""

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart, LineItem, parse_status

logger = structlog.get_logger(__name__)


class CartLineStore:
    @property
    def repository(self):
        return current_domain.repository_for(Cart)

    def get_cart(self, cart_id):
        try:
            return self.repository.get(cart_id)
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Cannot find cart with the id: {cart_id}.") from None

    def find_line_item(self, item_id, cart_id=None):
        """Return the line item ``item_id``, from one cart or from whichever cart holds it."""
        if cart_id is None:
            lines = current_domain.repository_for(LineItem)._dao.query.filter(id=item_id).all()
            if not lines.items:
                raise ObjectNotFoundError(f"Cannot find item with the id: {item_id}.")
            cart_id = lines.first.cart_id

        item = self.get_cart(cart_id).find_item(item_id)
        if item is None:
            raise ObjectNotFoundError(f"Cannot find item with the id: {item_id}.")
        return item

    def set_status(self, cart, item_id, status):
        """Persist a status change on exactly one line of ``cart``.

        Returns the line's previous status.
        """
        previous = cart.update_item_status(item_id, status)
        self.repository.add(cart)
        logger.info(
            "Line item status changed",
            cart_id=str(cart.id),
            item_id=str(item_id),
            previous_status=previous.value,
            new_status=parse_status(status).value,
        )
        return previous

    def list_by_status(self, cart_id, status):
        """Line items of the cart in ``status``, read back from the repository."""
        return self.get_cart(cart_id).items_in(status)

    def delete_cart(self, cart):
        """Remove the cart and its line items."""
        items = list(cart.items)
        for item in items:
            cart.remove_items(item)
        if items:
            self.repository.add(cart)
        self.repository._dao.delete(cart)
        logger.info("Cart deleted", cart_id=str(cart.id), line_items=len(items))
