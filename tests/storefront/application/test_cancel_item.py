"""Application tests for cancelling individual line items."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from storefront.cart.cart import Cart
from storefront.inventory.product import Product
from storefront.order.item_status import UpdateItemStatus
from storefront.order.order import Order


def _cancel_item(order, item_id, user_id="cust-001", role=None, cart_id=None):
    return current_domain.process(
        UpdateItemStatus(
            order_id=order["order_id"],
            item_id=item_id,
            cart_id=cart_id,
            user_id=user_id,
            role=role,
        ),
        asynchronous=False,
    )


def _order_exists(order_id):
    try:
        current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        return False
    return True


class TestCancelItem:
    def test_status_defaults_to_cancelled(self, placed_order):
        result = _cancel_item(placed_order, placed_order["shirt_item"])
        assert result.status == "Cancelled"

    def test_cancelling_one_line_restocks_it_and_keeps_order(self, placed_order, stock_of):
        result = _cancel_item(placed_order, placed_order["shirt_item"])

        assert result.order_cancelled is False
        assert result.restocked == 2
        assert stock_of(placed_order["shirt"]) == 7
        assert stock_of(placed_order["mug"]) == 3

        cart = current_domain.repository_for(Cart).get(placed_order["cart_id"])
        assert cart.find_item(placed_order["shirt_item"]).status == "Cancelled"
        assert cart.find_item(placed_order["mug_item"]).status == "Not_processed"
        assert _order_exists(placed_order["order_id"])

    def test_cancelling_the_last_line_removes_order_and_cart(self, placed_order, stock_of):
        _cancel_item(placed_order, placed_order["shirt_item"])
        result = _cancel_item(placed_order, placed_order["mug_item"])

        assert result.order_cancelled is True
        assert stock_of(placed_order["shirt"]) == 7
        assert stock_of(placed_order["mug"]) == 4
        assert not _order_exists(placed_order["order_id"])
        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Cart).get(placed_order["cart_id"])

    def test_cancelling_twice_credits_once(self, placed_order, stock_of):
        _cancel_item(placed_order, placed_order["shirt_item"])
        result = _cancel_item(placed_order, placed_order["shirt_item"])

        assert result.conflict is True
        assert result.restocked == 0
        assert stock_of(placed_order["shirt"]) == 7

    def test_delivered_line_cannot_be_cancelled(self, placed_order, stock_of):
        current_domain.process(
            UpdateItemStatus(
                order_id=placed_order["order_id"],
                item_id=placed_order["shirt_item"],
                status="Delivered",
                user_id="merch-1",
                role="Merchant",
            ),
            asynchronous=False,
        )

        result = _cancel_item(placed_order, placed_order["shirt_item"])

        assert result.conflict is True
        assert stock_of(placed_order["shirt"]) == 5

    def test_delivered_line_keeps_order_alive(self, placed_order):
        current_domain.process(
            UpdateItemStatus(
                order_id=placed_order["order_id"],
                item_id=placed_order["shirt_item"],
                status="Delivered",
                user_id="admin-1",
                role="Admin",
            ),
            asynchronous=False,
        )

        result = _cancel_item(placed_order, placed_order["mug_item"])

        assert result.order_cancelled is False
        assert _order_exists(placed_order["order_id"])

    def test_merchant_may_cancel_a_line(self, placed_order, stock_of):
        _cancel_item(placed_order, placed_order["mug_item"], user_id="merch-1", role="Merchant")
        assert stock_of(placed_order["mug"]) == 4

    def test_admin_may_cancel_a_line(self, placed_order, stock_of):
        _cancel_item(placed_order, placed_order["mug_item"], user_id="admin-1", role="Admin")
        assert stock_of(placed_order["mug"]) == 4

    def test_other_customer_gets_not_found(self, placed_order, stock_of):
        with pytest.raises(ObjectNotFoundError):
            _cancel_item(placed_order, placed_order["mug_item"], user_id="cust-002")
        assert stock_of(placed_order["mug"]) == 3

    def test_item_from_another_cart_is_not_found(self, placed_order, add_product, make_cart, stock_of):
        product_id = add_product(quantity=1)
        _, (foreign_item,) = make_cart("cust-001", (product_id, 1))

        with pytest.raises(ObjectNotFoundError):
            _cancel_item(placed_order, foreign_item)
        assert stock_of(product_id) == 1

    def test_mismatched_cart_id_is_not_found(self, placed_order):
        with pytest.raises(ObjectNotFoundError):
            _cancel_item(placed_order, placed_order["mug_item"], cart_id="another-cart")

    def test_matching_cart_id_is_accepted(self, placed_order):
        result = _cancel_item(placed_order, placed_order["mug_item"], cart_id=placed_order["cart_id"])
        assert result.status == "Cancelled"


def _delete_product(product_id):
    repo = current_domain.repository_for(Product)
    repo._dao.delete(repo.get(product_id))


class TestFailedItemCancellation:
    def test_failed_restock_leaves_line_open(self, placed_order):
        _delete_product(placed_order["mug"])

        with pytest.raises(ObjectNotFoundError):
            _cancel_item(placed_order, placed_order["mug_item"])

        cart = current_domain.repository_for(Cart).get(placed_order["cart_id"])
        assert cart.find_item(placed_order["mug_item"]).status == "Not_processed"
        assert _order_exists(placed_order["order_id"])

    def test_failed_restock_of_last_line_keeps_order_and_cart(self, placed_order, stock_of):
        _cancel_item(placed_order, placed_order["shirt_item"])
        _delete_product(placed_order["mug"])

        with pytest.raises(ObjectNotFoundError):
            _cancel_item(placed_order, placed_order["mug_item"])

        cart = current_domain.repository_for(Cart).get(placed_order["cart_id"])
        assert cart.find_item(placed_order["mug_item"]).status == "Not_processed"
        assert cart.find_item(placed_order["shirt_item"]).status == "Cancelled"
        assert _order_exists(placed_order["order_id"])
        assert stock_of(placed_order["shirt"]) == 7


class TestInventoryConservation:
    def test_each_cancelled_unit_is_credited_exactly_once(self, add_product, make_cart, place_order, stock_of):
        shirt = add_product(quantity=10)
        mug = add_product(quantity=10)
        cart_id, (shirt_item, mug_item) = make_cart("cust-001", (shirt, 3), (mug, 4))
        order = {"order_id": place_order(cart_id, "cust-001")}

        _cancel_item(order, shirt_item)
        _cancel_item(order, shirt_item)
        _cancel_item(order, mug_item)

        assert stock_of(shirt) == 13
        assert stock_of(mug) == 14
        assert not _order_exists(order["order_id"])
