"""Catalogue management: add a product with its opening stock."""

from protean import handle
from protean.exceptions import ValidationError
from protean.fields import Boolean, Float, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.inventory.product import Product


@storefront.command(part_of="Product")
class AddProduct:
    sku = String(required=True, max_length=50)
    name = String(required=True, max_length=255)
    description = Text()
    brand = String(max_length=255)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=0)
    taxable = Boolean(default=False)
    is_active = Boolean(default=True)


@storefront.command_handler(part_of=Product)
class ManageProductHandler:
    @handle(AddProduct)
    def add_product(self, command):
        repo = current_domain.repository_for(Product)
        existing = repo._dao.query.filter(sku=command.sku).all().items
        if existing:
            raise ValidationError({"sku": ["This sku is already in use."]})

        product = Product.create(
            sku=command.sku,
            name=command.name,
            description=command.description,
            brand=command.brand,
            price=command.price,
            quantity=command.quantity,
            taxable=bool(command.taxable),
            is_active=command.is_active if command.is_active is not None else True,
        )
        repo.add(product)
        return str(product.id)
