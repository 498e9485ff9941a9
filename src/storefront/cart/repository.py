"""Repository for the Cart aggregate."""

from storefront.cart.cart import Cart
from storefront.domain import storefront
from storefront.errors import Unauthorized


@storefront.repository(part_of=Cart)
class CartRepository:
    def find_by_buyer(self, buyer_id) -> list[Cart]:
        """All carts owned by a buyer, most recently touched first."""
        return self._dao.query.filter(buyer_id=str(buyer_id)).order_by("-updated_at").all().items

    def get_for_buyer(self, cart_id, buyer_id=None) -> Cart:
        """Load a cart, refusing access to a cart owned by someone else.

        Guest carts (no owner) are reachable by anyone holding their id.
        """
        cart = self.get(cart_id)
        if not cart.belongs_to(buyer_id):
            raise Unauthorized("This cart belongs to another buyer")
        return cart
