"""Product aggregate (CQRS): catalogue entry and its available stock count.

Only the pieces of the catalogue the order engine needs live here: price and
taxable flag (snapshotted onto cart lines), name and brand (joined into order
views and confirmations), and the available quantity credited back on
cancellation.
"""

from datetime import UTC, datetime

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Integer, String, Text

from storefront.domain import storefront
from storefront.inventory.events import ProductAdded, ProductRestocked


def _check_restock_quantity(quantity):
    if not isinstance(quantity, int) or isinstance(quantity, bool) or quantity <= 0:
        raise ValidationError({"quantity": ["Restock quantity must be a positive integer"]})


@storefront.aggregate
class Product:
    sku = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    description = Text()
    brand = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    taxable = Boolean(default=False)
    quantity = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def create(
        cls,
        sku,
        name,
        price,
        quantity=0,
        taxable=False,
        description=None,
        brand=None,
        is_active=True,
    ):
        now = datetime.now(UTC)
        product = cls(
            sku=sku,
            name=name,
            description=description,
            brand=brand,
            price=price,
            taxable=taxable,
            quantity=quantity,
            is_active=is_active,
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                sku=sku,
                name=name,
                price=price,
                quantity=quantity,
                taxable=taxable,
                added_at=now,
            )
        )
        return product

    def restock(self, quantity, reason, order_id=None):
        """Credit ``quantity`` units back to the available count."""
        _check_restock_quantity(quantity)
        previous = self.quantity or 0
        self._record_restock(quantity, previous, previous + quantity, reason, order_id)

    def restocked_in_store(self, quantity, reason, order_id=None):
        """Record a credit the database has already added to this product.

        The product must have been loaded after the storage-level add, so its
        quantity already includes ``quantity``.
        """
        _check_restock_quantity(quantity)
        current = self.quantity or 0
        self._record_restock(quantity, current - quantity, current, reason, order_id)

    def _record_restock(self, quantity, previous, new, reason, order_id):
        now = datetime.now(UTC)
        self.quantity = new
        self.updated_at = now

        self.raise_(
            ProductRestocked(
                product_id=str(self.id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=new,
                reason=reason,
                order_id=str(order_id) if order_id else None,
                restocked_at=now,
            )
        )
