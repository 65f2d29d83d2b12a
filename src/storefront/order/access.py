"""Loading orders on behalf of a requester.

An order the requester may not see is reported exactly like one that does
not exist, so ownership can't be probed by id.
"""

from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from storefront.order.order import Order


def order_not_found(order_id) -> ObjectNotFoundError:
    return ObjectNotFoundError(f"Cannot find order with the id: {order_id}.")


def load_order_for(requester, order_id, allow_merchant=False) -> Order:
    try:
        order = current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise order_not_found(order_id) from None

    if requester.can_access(order.user_id) or (allow_merchant and requester.is_merchant):
        return order
    raise order_not_found(order_id)
