"""Checkout phase one: open a hosted payment session for a cart.

Nothing the client holds is trusted here. Every line is re-read from the
catalogue, stock is re-checked, and totals are recomputed from catalogue
prices. No order is written and no stock moves until the gateway reports the
payment as completed (see ``storefront.checkout.completion``).
"""

import json
from dataclasses import dataclass

from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Float, Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.cart.cart import Cart
from storefront.cart.totals import Totals, compute_totals, default_pricing, to_money
from storefront.catalogue.product import Product
from storefront.checkout.contact import validate_contact
from storefront.checkout.metadata import CheckoutIntent, IntentLine, encode_intent
from storefront.config import settings
from storefront.domain import storefront
from storefront.errors import InsufficientStock, Unauthenticated
from storefront.payments.gateway import LineItem, get_gateway
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    redirect_url: str
    totals: Totals


@storefront.command(part_of="Cart")
class StartCheckout:
    cart_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    success_url = String(max_length=1000)
    cancel_url = String(max_length=1000)
    client_total = Float()  # advisory only
    contact = Text()  # JSON: optional checkout form details


def _authoritative_lines(cart):
    """Re-read each line's product and check the requested quantity against live stock."""
    products = current_domain.repository_for(Product)
    priced = []
    for line in cart.ordered_lines():
        try:
            product = products.get(line.product_id)
        except ObjectNotFoundError:
            raise ValidationError(
                {"cart": [f"'{line.title or line.product_id}' is no longer available"]}
            ) from None

        if line.quantity > product.available_quantity:
            raise InsufficientStock(
                str(product.id), line.quantity, product.available_quantity, title=product.title
            )
        priced.append((product, line.quantity))
    return priced


def _gateway_line_items(priced, totals):
    items = [
        LineItem(
            name=product.title,
            description=product.description,
            image_url=product.image_url,
            unit_amount=to_money(product.price),
            quantity=quantity,
        )
        for product, quantity in priced
    ]
    # Shipping and tax ride along as their own lines so the charged amount
    # equals the computed total.
    if totals.shipping > 0:
        items.append(LineItem(name="Shipping", unit_amount=totals.shipping, quantity=1))
    if totals.tax > 0:
        items.append(LineItem(name="Sales tax", unit_amount=totals.tax, quantity=1))
    return items


@storefront.command_handler(part_of=Cart)
class StartCheckoutHandler:
    @handle(StartCheckout)
    def start_checkout(self, command):
        cart = current_domain.repository_for(Cart).get_for_buyer(command.cart_id, command.buyer_id)
        if cart.is_empty():
            raise ValidationError({"cart": ["Cannot check out an empty cart"]})
        contact = validate_contact(json.loads(command.contact)) if command.contact else None

        priced = _authoritative_lines(cart)
        subtotal = sum((to_money(product.price) * quantity for product, quantity in priced), to_money(0))
        totals = compute_totals(subtotal, default_pricing())

        if command.client_total is not None and to_money(command.client_total) != totals.total:
            logger.warning(
                "checkout_client_total_mismatch",
                cart_id=str(cart.id),
                client_total=str(to_money(command.client_total)),
                computed_total=str(totals.total),
            )

        intent = CheckoutIntent(
            buyer_id=str(command.buyer_id),
            cart_id=str(cart.id),
            lines=tuple(
                IntentLine(product_id=str(product.id), quantity=quantity, unit_price=to_money(product.price))
                for product, quantity in priced
            ),
            totals=totals,
            contact=contact,
        )

        result = get_gateway().create_session(
            line_items=_gateway_line_items(priced, totals),
            metadata=encode_intent(intent),
            success_url=command.success_url or settings.success_url,
            cancel_url=command.cancel_url or settings.cancel_url,
        )

        logger.info(
            "checkout_session_created",
            cart_id=str(cart.id),
            buyer_id=str(command.buyer_id),
            session_id=result.session_id,
            total=str(totals.total),
        )
        return CheckoutSession(session_id=result.session_id, redirect_url=result.redirect_url, totals=totals)


def start_checkout(
    cart_id, buyer, success_url=None, cancel_url=None, client_total=None, contact=None
) -> CheckoutSession:
    """Open a payment session for ``buyer``'s cart and return where to send them.

    ``contact`` is the optional checkout form; when given it must be complete.
    """
    if buyer is None:
        raise Unauthenticated("Sign in to check out")

    command = StartCheckout(
        cart_id=cart_id,
        buyer_id=buyer.id,
        success_url=success_url,
        cancel_url=cancel_url,
        client_total=client_total,
        contact=json.dumps(contact) if contact is not None else None,
    )
    return current_domain.process(command, asynchronous=False)
