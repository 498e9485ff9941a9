"""Repository for the Order aggregate."""

from storefront.domain import storefront
from storefront.orders.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def find_by_session(self, checkout_session_id: str) -> Order | None:
        """The order created for a payment session, if the session was already completed."""
        orders = self._dao.query.filter(checkout_session_id=checkout_session_id).all().items
        return orders[0] if orders else None

    def find_by_buyer(self, buyer_id) -> list[Order]:
        """A buyer's orders, newest first."""
        return self._dao.query.filter(buyer_id=str(buyer_id)).order_by("-created_at").limit(None).all().items

    def list_all(self) -> list[Order]:
        return self._dao.query.order_by("-created_at").limit(None).all().items
