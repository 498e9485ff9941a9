"""Catalogue administration: commands and handler.

Only reachable through the admin routes; the capability check happens at the
HTTP edge before any of these commands are built.
"""

from protean import handle
from protean.fields import Float, Identifier, Integer, String, Text
from protean.utils.globals import current_domain

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Product")
class CreateProduct:
    title = String(required=True, max_length=255)
    description = Text(required=True)
    price = Float(required=True, min_value=0.01)
    available_quantity = Integer(required=True, min_value=0)
    category = String(required=True, max_length=100)
    tags = Text()  # comma-separated
    image_url = String(max_length=500)


@storefront.command(part_of="Product")
class UpdateProduct:
    product_id = Identifier(required=True)
    title = String(max_length=255)
    description = Text()
    price = Float(min_value=0.01)
    available_quantity = Integer(min_value=0)
    category = String(max_length=100)
    tags = Text()
    image_url = String(max_length=500)


@storefront.command(part_of="Product")
class RemoveProduct:
    product_id = Identifier(required=True)


@storefront.command_handler(part_of=Product)
class ManageProductsHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        product = Product.create(
            title=command.title,
            description=command.description,
            price=command.price,
            category=command.category,
            available_quantity=command.available_quantity,
            tags=command.tags,
            image_url=command.image_url,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("product_created", product_id=str(product.id), title=product.title)
        return str(product.id)

    @handle(UpdateProduct)
    def update_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.update_details(
            title=command.title,
            description=command.description,
            price=command.price,
            category=command.category,
            available_quantity=command.available_quantity,
            tags=command.tags,
            image_url=command.image_url,
        )
        repo.add(product)
        return str(product.id)

    @handle(RemoveProduct)
    def remove_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        repo._dao.delete(product)
        logger.info("product_removed", product_id=str(command.product_id))
