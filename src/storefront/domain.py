"""Storefront bounded context: Orders, Carts and Inventory.

Owns the consistency rules that tie the three together: placing an order
binds a cart, cancelling lines restocks products, and cancelling the last
line removes the order. Everything lives in one domain so a single command
handler can change orders, carts and products inside one unit of work.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
