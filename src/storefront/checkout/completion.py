"""Checkout phase two: turn a completed payment session into an order.

Invoked by the payment gateway's webhook, out of band from the request that
opened the session, possibly on another instance and possibly more than
once. The steps are:

1. Verify the signature over the raw body. Nothing is trusted before this.
2. Decode the order intent from the session metadata.
3. Skip sessions that already produced an order (keyed on the session id).
4. Write the order as ``paid``, committed on its own.
5. Decrement stock for each line. A failing line is logged and skipped; the
   order is never rolled back for an inventory problem.
6. Clear the cart the checkout came from.

This runs as a plain application service rather than a command handler so
that each write commits immediately instead of at the end of one enclosing
unit of work; the stock decrement relies on committing inside its lock.
"""

import threading
from dataclasses import dataclass
from enum import Enum

from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.catalogue.product import Product
from storefront.checkout.metadata import decode_intent
from storefront.errors import SignatureVerificationFailed
from storefront.orders.order import Order
from storefront.payments.gateway import get_gateway
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

# Guards the check-then-insert on the session id within this process. The
# unique constraint on Order.checkout_session_id covers the rest.
_completion_lock = threading.Lock()

_ADDRESS_FIELDS = ("name", "email", "phone", "line1", "line2", "city", "state", "postal_code", "country")


class CompletionStatus(Enum):
    IGNORED = "ignored"
    DUPLICATE = "duplicate"
    CREATED = "created"


@dataclass(frozen=True)
class CompletionOutcome:
    status: CompletionStatus
    order_id: str | None = None
    session_id: str | None = None
    event_type: str | None = None
    stock_failures: tuple[str, ...] = ()


def _line_titles(product_ids):
    """Best-effort product titles for the order lines."""
    repo = current_domain.repository_for(Product)
    titles = {}
    for product_id in product_ids:
        try:
            titles[product_id] = repo.get(product_id).title
        except ObjectNotFoundError:
            titles[product_id] = None
    return titles


def _shipping_address(event, intent):
    """The gateway-collected address, filled in from the checkout form where it is silent."""
    collected = {k: v for k, v in (event.shipping_address or {}).items() if v}
    merged = {**(intent.contact or {}), **collected}
    return {k: v for k, v in merged.items() if k in _ADDRESS_FIELDS} or None


def _insert_order(event, intent):
    """Create the order unless one already exists for the session. Returns (order, created)."""
    repo = current_domain.repository_for(Order)

    with _completion_lock:
        existing = repo.find_by_session(event.session_id)
        if existing is not None:
            return existing, False

        titles = _line_titles([line.product_id for line in intent.lines])
        shipping_address = _shipping_address(event, intent)

        order = Order.place_paid(
            buyer_id=intent.buyer_id,
            checkout_session_id=event.session_id,
            lines=[{**line.as_dict(), "title": titles.get(line.product_id)} for line in intent.lines],
            subtotal=intent.totals.subtotal,
            shipping=intent.totals.shipping,
            tax=intent.totals.tax,
            total=intent.totals.total,
            payment_reference=event.payment_reference,
            shipping_address=shipping_address,
        )

        try:
            repo.add(order)
        except ValidationError:
            # Another writer claimed the session id first
            existing = repo.find_by_session(event.session_id)
            if existing is None:
                raise
            return existing, False

        return order, True


def _withdraw_stock(order_id, intent):
    """Decrement stock per line. Returns the product ids whose decrement failed."""
    products = current_domain.repository_for(Product)
    failures = []
    for line in intent.lines:
        try:
            withdrawal = products.decrement_stock(line.product_id, line.quantity)
        except Exception as exc:
            failures.append(line.product_id)
            logger.error(
                "stock_decrement_failed",
                order_id=order_id,
                product_id=line.product_id,
                quantity=line.quantity,
                error=str(exc),
            )
            continue

        if not withdrawal.fulfilled:
            logger.warning(
                "stock_oversold",
                order_id=order_id,
                product_id=line.product_id,
                requested=line.quantity,
                available=withdrawal.previous,
                shortfall=withdrawal.shortfall,
            )
    return failures


def _clear_cart(cart_id, buyer_id):
    repo = current_domain.repository_for(Cart)
    try:
        cart = repo.get(cart_id)
    except ObjectNotFoundError:
        return
    if not cart.belongs_to(buyer_id) or cart.is_empty():
        return
    cart.clear()
    repo.add(cart)


def complete_checkout(payload: bytes, signature: str) -> CompletionOutcome:
    """Handle a payment completion callback.

    Raises ``SignatureVerificationFailed`` for a forged or tampered body and
    ``ValidationError`` for a completed session whose metadata is unusable.
    """
    gateway = get_gateway()
    if not gateway.verify_webhook_signature(payload, signature):
        logger.warning("webhook_signature_rejected", signature_present=bool(signature))
        raise SignatureVerificationFailed()

    event = gateway.parse_webhook_event(payload)
    if not event.is_checkout_completed:
        logger.info("webhook_event_ignored", event_type=event.event_type, event_id=event.event_id)
        return CompletionOutcome(status=CompletionStatus.IGNORED, event_type=event.event_type)

    if not event.session_id:
        raise ValidationError({"payload": ["Completed session carries no session id"]})

    intent = decode_intent(event.metadata)
    order, created = _insert_order(event, intent)
    order_id = str(order.id)

    if not created:
        logger.info("checkout_duplicate_ignored", session_id=event.session_id, order_id=order_id)
        return CompletionOutcome(
            status=CompletionStatus.DUPLICATE,
            order_id=order_id,
            session_id=event.session_id,
            event_type=event.event_type,
        )

    failures = _withdraw_stock(order_id, intent)

    try:
        _clear_cart(intent.cart_id, intent.buyer_id)
    except Exception as exc:
        logger.warning("checkout_cart_clear_failed", cart_id=intent.cart_id, error=str(exc))

    logger.info(
        "checkout_completed",
        session_id=event.session_id,
        order_id=order_id,
        buyer_id=intent.buyer_id,
        total=str(intent.totals.total),
        stock_failures=len(failures),
    )
    return CompletionOutcome(
        status=CompletionStatus.CREATED,
        order_id=order_id,
        session_id=event.session_id,
        event_type=event.event_type,
        stock_failures=tuple(failures),
    )
