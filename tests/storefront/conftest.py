import pytest
from protean import current_domain
from protean.integrations.pytest import DomainFixture

from storefront.cart.management import AddToCart, CreateCart
from storefront.inventory.management import AddProduct
from storefront.inventory.product import Product
from storefront.notifications.channel import reset_channels
from storefront.order.placement import PlaceOrder


@pytest.fixture(scope="session")
def storefront_bed():
    from storefront.domain import storefront

    bed = DomainFixture(storefront)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(scope="session", autouse=True)
def setup_db(storefront_bed):
    from storefront.domain import storefront
    from storefront.utils.db import drop_db, setup_db

    setup_db(storefront)

    yield

    drop_db(storefront)


@pytest.fixture(autouse=True)
def _ctx(storefront_bed):
    with storefront_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()
        for _, broker in current_domain.brokers.items():
            broker._data_reset()
        current_domain.event_store.store._data_reset()
        reset_channels()


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def add_product():
    """Add a catalogue product and return its id."""
    counter = {"n": 0}

    def _add(name="Widget", price=10.0, quantity=10, taxable=True, brand="Acme", is_active=True, sku=None):
        counter["n"] += 1
        return current_domain.process(
            AddProduct(
                sku=sku or f"SKU-{counter['n']:03d}",
                name=name,
                brand=brand,
                price=price,
                quantity=quantity,
                taxable=taxable,
                is_active=is_active,
            ),
            asynchronous=False,
        )

    return _add


@pytest.fixture()
def make_cart():
    """Create a cart holding ``(product_id, quantity)`` lines.

    Returns ``(cart_id, [item_id, ...])``.
    """

    def _make(user_id, *lines):
        cart_id = current_domain.process(CreateCart(user_id=user_id), asynchronous=False)
        item_ids = [
            current_domain.process(
                AddToCart(cart_id=cart_id, product_id=product_id, quantity=quantity),
                asynchronous=False,
            )
            for product_id, quantity in lines
        ]
        return cart_id, item_ids

    return _make


@pytest.fixture()
def place_order():
    def _place(cart_id, user_id, total=0.0, role=None):
        return current_domain.process(
            PlaceOrder(cart_id=cart_id, total=total, user_id=user_id, role=role),
            asynchronous=False,
        )

    return _place


@pytest.fixture()
def stock_of():
    def _stock(product_id):
        return current_domain.repository_for(Product).get(product_id).quantity

    return _stock


@pytest.fixture()
def placed_order(add_product, make_cart, place_order):
    """An order for ``cust-001`` with two open lines.

    Returns a dict with the order, cart, line item and product ids.
    """
    shirt = add_product(name="Shirt", price=10.0, quantity=5, taxable=True)
    mug = add_product(name="Mug", price=5.0, quantity=3, taxable=False)
    cart_id, (shirt_item, mug_item) = make_cart("cust-001", (shirt, 2), (mug, 1))
    order_id = place_order(cart_id, "cust-001", total=25.0)
    return {
        "order_id": order_id,
        "cart_id": cart_id,
        "shirt": shirt,
        "mug": mug,
        "shirt_item": shirt_item,
        "mug_item": mug_item,
    }
