"""Product repository: catalogue reads and the guarded stock decrement."""

import threading
from dataclasses import dataclass

from protean import UnitOfWork

from storefront.catalogue.product import Product
from storefront.domain import storefront
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Serializes read-check-write on the stock ledger. The decrement commits
# before the lock is released, so no two withdrawals can see the same
# starting quantity.
_stock_lock = threading.Lock()


@dataclass(frozen=True)
class StockWithdrawal:
    """Outcome of a stock decrement."""

    product_id: str
    requested: int
    previous: int
    remaining: int
    shortfall: int

    @property
    def fulfilled(self) -> bool:
        return self.shortfall == 0


@storefront.repository(part_of=Product)
class ProductRepository:
    def list_products(self) -> list[Product]:
        """All products, oldest first."""
        return self._dao.query.order_by("created_at").limit(None).all().items

    def find_by_category(self, category: str) -> list[Product]:
        return self._dao.query.filter(category=category).order_by("created_at").limit(None).all().items

    def count(self) -> int:
        return self._dao.query.all().total

    def decrement_stock(self, product_id: str, quantity: int) -> StockWithdrawal:
        """Withdraw ``quantity`` units from a product, floored at zero.

        The read, the sufficiency check and the write run as one critical
        section in their own unit of work, committed before the lock is
        released. A request larger than the remaining stock takes what is
        left and reports the difference as ``shortfall``.
        """
        with _stock_lock:
            with UnitOfWork():
                product = self.get(product_id)
                previous = product.available_quantity
                shortfall = product.withdraw_stock(quantity)
                self.add(product)

        withdrawal = StockWithdrawal(
            product_id=str(product_id),
            requested=quantity,
            previous=previous,
            remaining=product.available_quantity,
            shortfall=shortfall,
        )
        logger.debug(
            "stock_decremented",
            product_id=withdrawal.product_id,
            requested=quantity,
            previous=previous,
            remaining=withdrawal.remaining,
        )
        return withdrawal
