"""Read side for orders: single order, paged listings and id search.

Views are assembled from the order, its bound cart and the catalogue, with
tax totals recomputed from the live line statuses on every read.
"""

import math
import uuid

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.inventory.product import Product
from storefront.order.access import load_order_for, order_not_found
from storefront.order.order import Order, derive_state
from storefront.tax.calculator import calculate_tax
from storefront.utils.config import setting

logger = structlog.get_logger(__name__)


def _is_identifier(value) -> bool:
    try:
        uuid.UUID(str(value))
    except ValueError:
        return False
    return True


class OrderQueryService:
    def get(self, order_id, requester) -> dict:
        order = load_order_for(requester, order_id)
        cart = self._cart_for(order)
        if cart is None:
            raise order_not_found(order_id)
        return self._view(order, cart)

    def list(self, requester, owner_id=None, page=1, page_size=None) -> dict:
        """Orders newest first, one page at a time.

        Without ``owner_id`` every order is listed, which only an admin may do.
        """
        page_size = page_size if page_size is not None else setting("default_page_size")
        if not isinstance(page, int) or page < 1:
            raise ValidationError({"page": ["Page must be a positive integer"]})
        if not isinstance(page_size, int) or page_size < 1:
            raise ValidationError({"limit": ["Page size must be a positive integer"]})

        if owner_id is None and not requester.is_admin:
            raise ValidationError({"requester": ["Only an administrator can list all orders"]})
        if owner_id is not None and not requester.can_access(owner_id):
            raise ValidationError({"requester": ["You can only list your own orders"]})

        results = current_domain.repository_for(Order).newest_first(page, page_size, user_id=owner_id)

        orders = []
        for order in results.items:
            cart = self._cart_for(order)
            if cart is None:
                logger.warning("Order has no cart, omitting from listing", order_id=str(order.id))
                continue
            orders.append(self._view(order, cart))

        return {
            "orders": orders,
            "total_pages": math.ceil(results.total / page_size) if results.total else 0,
            "current_page": page,
            "count": results.total,
        }

    def search(self, value, requester) -> dict:
        """Look an order up by id; a malformed id simply matches nothing."""
        if not value or not _is_identifier(value):
            return {"orders": []}
        try:
            return {"orders": [self.get(value, requester)]}
        except ObjectNotFoundError:
            return {"orders": []}

    # -------------------------------------------------------------------
    # Assembly
    # -------------------------------------------------------------------
    def _cart_for(self, order):
        try:
            return current_domain.repository_for(Cart).get(order.cart_id)
        except ObjectNotFoundError:
            return None

    def _product(self, product_id):
        try:
            return current_domain.repository_for(Product).get(product_id)
        except ObjectNotFoundError:
            return None

    def _view(self, order, cart) -> dict:
        summary = calculate_tax(cart.items)

        products = []
        for item, figures in zip(cart.items, summary.lines, strict=True):
            product = self._product(item.product_id)
            products.append(
                {
                    "id": str(item.id),
                    "product_id": str(item.product_id),
                    "name": product.name if product else None,
                    "sku": product.sku if product else None,
                    "brand": product.brand if product else None,
                    "quantity": item.quantity,
                    "unit_price": item.unit_price,
                    "taxable": bool(item.taxable),
                    "status": item.status,
                    "total_price": figures.total_price,
                    "total_tax": figures.total_tax,
                    "price_with_tax": figures.price_with_tax,
                }
            )

        return {
            "id": str(order.id),
            "user_id": str(order.user_id),
            "cart_id": str(order.cart_id),
            "created_at": order.created_at,
            "placed_total": order.total,
            "total": summary.subtotal,
            "total_tax": summary.tax_amount,
            "total_with_tax": summary.total_with_tax,
            "state": derive_state(cart.items).value,
            "products": products,
        }
