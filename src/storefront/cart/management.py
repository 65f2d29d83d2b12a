"""Cart management: commands and handler.

Handles cart creation and adding catalogue products to a cart.
"""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.inventory.product import Product


@storefront.command(part_of="Cart")
class CreateCart:
    """Create a new cart for a registered user or guest."""

    user_id = Identifier()  # Optional for guest carts


@storefront.command(part_of="Cart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        cart = Cart.create(user_id=command.user_id)
        current_domain.repository_for(Cart).add(cart)
        return str(cart.id)

    @handle(AddToCart)
    def add_to_cart(self, command):
        product = current_domain.repository_for(Product).get(command.product_id)
        if not product.is_active:
            raise ValidationError({"product_id": ["This product is no longer available."]})

        repo = current_domain.repository_for(Cart)
        cart = repo.get(command.cart_id)
        item_id = cart.add_item(
            product_id=product.id,
            quantity=command.quantity,
            unit_price=product.price,
            taxable=bool(product.taxable),
        )
        repo.add(cart)
        return item_id
