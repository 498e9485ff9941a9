"""Cart line management: commands and handler.

Stock checks run against a fresh read of the product at add time; quantity
updates are bounded by the line's snapshot. A rejected mutation raises inside
the unit of work, so nothing is persisted.
"""

from protean import handle
from protean.fields import Identifier, Integer
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.domain import storefront


@storefront.command(part_of="Cart")
class AddToCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    buyer_id = Identifier()


@storefront.command(part_of="Cart")
class UpdateCartQuantity:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    new_quantity = Integer(required=True)  # zero or less removes the line
    buyer_id = Identifier()


@storefront.command(part_of="Cart")
class RemoveFromCart:
    cart_id = Identifier(required=True)
    product_id = Identifier(required=True)
    buyer_id = Identifier()


@storefront.command_handler(part_of=Cart)
class ManageCartItemsHandler:
    @handle(AddToCart)
    def add_to_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_buyer(command.cart_id, command.buyer_id)
        product = current_domain.repository_for(Product).get(command.product_id)

        line_quantity = cart.add_item(product, command.quantity)
        repo.add(cart)

        # A merged line always ends at or above the requested amount, so only
        # a clamped new line can come out smaller.
        return {
            "requested": command.quantity,
            "line_quantity": line_quantity,
            "clamped": line_quantity < command.quantity,
        }

    @handle(UpdateCartQuantity)
    def update_cart_quantity(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_buyer(command.cart_id, command.buyer_id)
        cart.update_quantity(command.product_id, command.new_quantity)
        repo.add(cart)

    @handle(RemoveFromCart)
    def remove_from_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_buyer(command.cart_id, command.buyer_id)
        cart.remove_item(command.product_id)
        repo.add(cart)
