"""Inventory ledger: credits product stock back after cancellations.

The ledger never decrements; taking stock out happens in the checkout flow.
Callers pass at most one credit per cancelled line: the line's status
transition to Cancelled is what entitles it to a credit, so the ledger itself
does not deduplicate.

On SQL providers each credit is one ``UPDATE ... SET quantity = quantity + n``
statement, so concurrent restocks of the same product from unrelated orders
all land. The in-memory provider has no shared writers and credits through
the aggregate.
"""

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain
from protean.utils.query import Q

from storefront.inventory.product import Product
from storefront.utils.db import SQL_PROVIDERS

logger = structlog.get_logger(__name__)


def _merge(entries):
    deltas: dict[str, int] = {}
    for product_id, quantity in entries:
        if not product_id:
            raise ValidationError({"product_id": ["Product reference is required"]})
        if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
            raise ValidationError({"quantity": [f"Invalid restock quantity {quantity!r} for product {product_id}"]})
        key = str(product_id)
        deltas[key] = deltas.get(key, 0) + quantity
    return deltas


def adds_in_store(repo) -> bool:
    """True when the repository's provider can add to a column in one statement."""
    return repo._provider.conn_info["provider"] in SQL_PROVIDERS


class InventoryLedger:
    """Applies positive quantity deltas to products."""

    def __init__(self, reason="order_cancelled"):
        self.reason = reason

    def restock(self, product_id, quantity, order_id=None) -> dict[str, int]:
        return self.restock_many([(product_id, quantity)], order_id=order_id)

    def restock_many(self, entries, order_id=None) -> dict[str, int]:
        """Credit a batch of ``(product_id, quantity)`` pairs as one unit.

        Every product is loaded before the first write, so an unknown product
        aborts the batch without crediting anything. Pairs for the same product
        are merged into a single write. Returns the merged deltas.
        """
        deltas = _merge(entries)
        if not deltas:
            return deltas

        repo = current_domain.repository_for(Product)
        products = {product_id: repo.get(product_id) for product_id in deltas}
        in_store = adds_in_store(repo)

        for product_id, quantity in deltas.items():
            if in_store:
                product = self._add_in_store(repo, product_id, quantity, order_id)
            else:
                product = products[product_id]
                product.restock(quantity, reason=self.reason, order_id=order_id)
            repo.add(product)

        logger.info(
            "Restocked products",
            order_id=str(order_id) if order_id else None,
            products=len(deltas),
            units=sum(deltas.values()),
            in_store=in_store,
        )
        return deltas

    def _add_in_store(self, repo, product_id, quantity, order_id):
        # Inside a unit of work the UPDATE holds the row until commit, so the
        # re-read below sees this credit and no later one.
        model = repo._dao.database_model_cls
        repo._dao._update_all(Q(id=product_id), quantity=model.quantity + quantity)

        product = repo.get(product_id)
        product.restocked_in_store(quantity, reason=self.reason, order_id=order_id)
        return product
