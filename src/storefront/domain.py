"""Storefront bounded context: catalogue, cart, checkout and orders.

Products double as the stock ledger, carts are stock-guarded aggregates, and
checkout is a two-phase flow: a hosted payment session is opened first and
the order is only written once the payment gateway reports completion.
"""

from protean.domain import Domain

from storefront.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

# Domain Composition Root
storefront = Domain(name="storefront")
