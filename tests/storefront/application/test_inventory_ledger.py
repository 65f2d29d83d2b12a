"""Tests for crediting stock back through the inventory ledger."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.inventory.ledger import InventoryLedger, adds_in_store
from storefront.inventory.product import Product


class TestRestock:
    def test_restock_single_product(self, add_product, stock_of):
        product_id = add_product(quantity=4)
        InventoryLedger().restock(product_id, 3)
        assert stock_of(product_id) == 7

    def test_restock_returns_applied_delta(self, add_product):
        product_id = add_product(quantity=4)
        assert InventoryLedger().restock(product_id, 2) == {product_id: 2}

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity_rejected(self, add_product, stock_of, quantity):
        product_id = add_product(quantity=4)
        with pytest.raises(ValidationError):
            InventoryLedger().restock(product_id, quantity)
        assert stock_of(product_id) == 4

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError):
            InventoryLedger().restock("no-such-product", 1)


class TestRestockMany:
    def test_batch_credits_every_product(self, add_product, stock_of):
        shirt = add_product(quantity=1)
        mug = add_product(quantity=0)

        InventoryLedger().restock_many([(shirt, 2), (mug, 5)])

        assert stock_of(shirt) == 3
        assert stock_of(mug) == 5

    def test_entries_for_the_same_product_are_merged(self, add_product, stock_of):
        shirt = add_product(quantity=1)
        deltas = InventoryLedger().restock_many([(shirt, 2), (shirt, 3)])
        assert deltas == {shirt: 5}
        assert stock_of(shirt) == 6

    def test_unknown_product_aborts_whole_batch(self, add_product, stock_of):
        shirt = add_product(quantity=1)
        with pytest.raises(ObjectNotFoundError):
            InventoryLedger().restock_many([(shirt, 2), ("no-such-product", 1)])
        assert stock_of(shirt) == 1

    def test_invalid_entry_aborts_whole_batch(self, add_product, stock_of):
        shirt = add_product(quantity=1)
        with pytest.raises(ValidationError):
            InventoryLedger().restock_many([(shirt, 2), (shirt, 0)])
        assert stock_of(shirt) == 1

    def test_empty_batch(self):
        assert InventoryLedger().restock_many([]) == {}


@pytest.fixture()
def product_repo():
    return current_domain.repository_for(Product)


class TestStorageLevelAdd:
    def test_memory_provider_credits_through_the_aggregate(self, product_repo, add_product, stock_of):
        if adds_in_store(product_repo):
            pytest.skip("runs against the in-memory provider")
        product_id = add_product(quantity=4)

        InventoryLedger().restock(product_id, 3)

        assert stock_of(product_id) == 7

    def test_sql_provider_adds_on_top_of_a_concurrent_write(self, product_repo, add_product, stock_of):
        if not adds_in_store(product_repo):
            pytest.skip("needs a SQL provider, run with --env production")
        product_id = add_product(quantity=4)
        stale = product_repo.get(product_id)

        other = product_repo.get(product_id)
        other.restock(2, reason="manual")
        product_repo.add(other)

        InventoryLedger().restock(product_id, 3)

        assert stale.quantity == 4
        assert stock_of(product_id) == 9
