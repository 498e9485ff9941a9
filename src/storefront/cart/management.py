"""Cart lifecycle: create, clear, restore from snapshot, clear on sign-out."""

from protean import handle
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@storefront.command(part_of="Cart")
class CreateCart:
    buyer_id = Identifier()


@storefront.command(part_of="Cart")
class ClearCart:
    cart_id = Identifier(required=True)
    buyer_id = Identifier()


@storefront.command(part_of="Cart")
class RestoreCart:
    buyer_id = Identifier()
    snapshot = Text(required=True)  # JSON list of {productId, quantity, product}


@storefront.command(part_of="Cart")
class ClearBuyerCarts:
    buyer_id = Identifier(required=True)


@storefront.command_handler(part_of=Cart)
class ManageCartHandler:
    @handle(CreateCart)
    def create_cart(self, command):
        repo = current_domain.repository_for(Cart)

        # A signed-in buyer keeps a single working cart
        if command.buyer_id:
            existing = repo.find_by_buyer(command.buyer_id)
            if existing:
                return str(existing[0].id)

        cart = Cart.create(buyer_id=command.buyer_id)
        repo.add(cart)
        return str(cart.id)

    @handle(ClearCart)
    def clear_cart(self, command):
        repo = current_domain.repository_for(Cart)
        cart = repo.get_for_buyer(command.cart_id, command.buyer_id)
        cart.clear()
        repo.add(cart)

    @handle(RestoreCart)
    def restore_cart(self, command):
        repo = current_domain.repository_for(Cart)
        restored = Cart.from_snapshot(command.buyer_id, command.snapshot)

        if command.buyer_id:
            for stale in repo.find_by_buyer(command.buyer_id):
                repo._dao.delete(stale)

        repo.add(restored)
        return str(restored.id)

    @handle(ClearBuyerCarts)
    def clear_buyer_carts(self, command):
        repo = current_domain.repository_for(Cart)
        carts = repo.find_by_buyer(command.buyer_id)
        for cart in carts:
            if not cart.is_empty():
                cart.clear()
                repo.add(cart)

        logger.info("buyer_carts_cleared", buyer_id=str(command.buyer_id), carts=len(carts))
        return len(carts)
