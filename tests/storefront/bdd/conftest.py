"""Shared BDD fixtures and step definitions for orders."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError
from pytest_bdd import given, parsers, then

from storefront.inventory.management import AddProduct
from storefront.inventory.product import Product
from storefront.order.item_status import UpdateItemStatus
from storefront.order.order import Order


@pytest.fixture()
def products():
    return {}


@pytest.fixture()
def outcome():
    """Holds the exception raised by the last When step, if any."""
    return {}


def _add(products, name, price, stock, taxable=True):
    products[name] = current_domain.process(
        AddProduct(sku=f"SKU-{name.upper()}", name=name, price=price, quantity=stock, taxable=taxable),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, name, price, stock):
    _add(products, name, price, stock)


@given(parsers.cfparse('a taxable product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, name, price, stock):
    _add(products, name, price, stock, taxable=True)


@given(parsers.cfparse('an exempt product "{name}" priced {price:f} with {stock:d} in stock'))
def _(products, name, price, stock):
    _add(products, name, price, stock, taxable=False)


@given(
    parsers.cfparse('customer "{user_id}" has placed an order for {first_qty:d} "{first}" and {second_qty:d} "{second}"'),
    target_fixture="order",
)
def _(products, make_cart, place_order, user_id, first_qty, first, second_qty, second):
    cart_id, item_ids = make_cart(user_id, (products[first], first_qty), (products[second], second_qty))
    order_id = place_order(cart_id, user_id)
    return {"order_id": order_id, "cart_id": cart_id, "items": {first: item_ids[0], second: item_ids[1]}}


@given(parsers.cfparse('the "{name}" line has been marked "{status}"'))
def _(order, name, status):
    current_domain.process(
        UpdateItemStatus(
            order_id=order["order_id"],
            item_id=order["items"][name],
            status=status,
            user_id="merch-1",
            role="Merchant",
        ),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the stock of "{name}" is {quantity:d}'))
def _(products, name, quantity):
    assert current_domain.repository_for(Product).get(products[name]).quantity == quantity


@then("the order still exists")
def _(order):
    assert current_domain.repository_for(Order).get(order["order_id"])


@then("the order is cancelled")
def _(order):
    with pytest.raises(ObjectNotFoundError):
        current_domain.repository_for(Order).get(order["order_id"])


@then("the request is rejected as not found")
def _(outcome):
    assert isinstance(outcome.get("error"), ObjectNotFoundError)
