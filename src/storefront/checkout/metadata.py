"""Checkout intent and its encoding into payment-session metadata.

No order exists between opening a payment session and the gateway reporting
completion, so the session metadata is the only channel that carries the
order intent across. Gateways cap metadata values (Stripe allows 500
characters per value), so the line list is split across numbered keys.
Checkout form details, when the buyer entered them, take one key per field.
"""

import json
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation

from protean.exceptions import ValidationError

from storefront.cart.totals import Totals, to_money
from storefront.checkout.contact import CONTACT_FIELDS

MAX_VALUE_LENGTH = 500
ITEMS_PREFIX = "items_"
CONTACT_PREFIX = "ship_"


@dataclass(frozen=True)
class IntentLine:
    product_id: str
    quantity: int
    unit_price: Decimal

    def as_dict(self) -> dict:
        return {"product_id": self.product_id, "quantity": self.quantity, "unit_price": str(self.unit_price)}


@dataclass(frozen=True)
class CheckoutIntent:
    """What the buyer is paying for, priced from the catalogue at session time."""

    buyer_id: str
    cart_id: str
    lines: tuple[IntentLine, ...]
    totals: Totals
    contact: dict | None = None


def encode_intent(intent: CheckoutIntent) -> dict[str, str]:
    """Flatten an intent into string-valued metadata."""
    compact = json.dumps(
        [[line.product_id, line.quantity, str(line.unit_price)] for line in intent.lines],
        separators=(",", ":"),
    )
    chunks = [compact[i : i + MAX_VALUE_LENGTH] for i in range(0, len(compact), MAX_VALUE_LENGTH)]

    metadata = {
        "buyer_id": intent.buyer_id,
        "cart_id": intent.cart_id,
        "subtotal": str(intent.totals.subtotal),
        "shipping": str(intent.totals.shipping),
        "tax": str(intent.totals.tax),
        "total": str(intent.totals.total),
        "items_chunks": str(len(chunks)),
    }
    for index, chunk in enumerate(chunks):
        metadata[f"{ITEMS_PREFIX}{index}"] = chunk
    for key, value in (intent.contact or {}).items():
        metadata[f"{CONTACT_PREFIX}{key}"] = value
    return metadata


def _invalid(reason: str) -> ValidationError:
    return ValidationError({"metadata": [reason]})


def decode_intent(metadata: dict) -> CheckoutIntent:
    """Rebuild the intent from session metadata. Raises ValidationError when it is malformed."""
    required = ("buyer_id", "cart_id", "subtotal", "shipping", "tax", "total", "items_chunks")
    missing = [key for key in required if not metadata.get(key)]
    if missing:
        raise _invalid(f"Session metadata is missing {', '.join(missing)}")

    try:
        chunk_count = int(metadata["items_chunks"])
        compact = "".join(metadata[f"{ITEMS_PREFIX}{index}"] for index in range(chunk_count))
        raw_lines = json.loads(compact)
    except (KeyError, ValueError, TypeError):
        raise _invalid("Session metadata carries an unreadable item list") from None

    if not isinstance(raw_lines, list) or not raw_lines:
        raise _invalid("Session metadata carries no items")

    try:
        lines = tuple(
            IntentLine(product_id=str(product_id), quantity=int(quantity), unit_price=to_money(unit_price))
            for product_id, quantity, unit_price in raw_lines
        )
        totals = Totals(
            subtotal=to_money(metadata["subtotal"]),
            shipping=to_money(metadata["shipping"]),
            tax=to_money(metadata["tax"]),
            total=to_money(metadata["total"]),
        )
    except (ValueError, TypeError, InvalidOperation):
        raise _invalid("Session metadata carries malformed amounts") from None

    if any(line.quantity < 1 for line in lines):
        raise _invalid("Item quantities must be at least 1")

    return CheckoutIntent(
        buyer_id=str(metadata["buyer_id"]),
        cart_id=str(metadata["cart_id"]),
        lines=lines,
        totals=totals,
        contact=_decode_contact(metadata),
    )


def _decode_contact(metadata: dict) -> dict | None:
    values = {key: metadata.get(f"{CONTACT_PREFIX}{key}") for key in CONTACT_FIELDS}
    contact = {key: value for key, value in values.items() if value}
    return contact or None
