"""Payment gateway port (abstract interface).

Defines the contract that all payment gateway adapters must implement.
This enables swapping between FakeGateway (dev/test) and StripeGateway
(production) without changing the checkout pipeline.

Webhook envelopes follow Stripe's event shape for every adapter, so
``parse_webhook_event`` is shared here.
"""

import json
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from decimal import ROUND_HALF_UP, Decimal

from protean.exceptions import ValidationError

CHECKOUT_COMPLETED = "checkout.session.completed"

# Oldest webhook signature accepted, matching Stripe's default tolerance
SIGNATURE_TOLERANCE_SECONDS = 300


@dataclass(frozen=True)
class LineItem:
    """One priced line of a hosted payment session."""

    name: str
    unit_amount: Decimal
    quantity: int
    description: str | None = None
    image_url: str | None = None

    def unit_amount_cents(self) -> int:
        return int((self.unit_amount * 100).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


@dataclass(frozen=True)
class SessionResult:
    """A created payment session and where to send the buyer."""

    session_id: str
    redirect_url: str


@dataclass(frozen=True)
class WebhookEvent:
    """The parts of a gateway callback the checkout pipeline needs."""

    event_type: str
    session_id: str | None = None
    metadata: dict = field(default_factory=dict)
    payment_reference: str | None = None
    shipping_address: dict | None = None
    event_id: str | None = None

    @property
    def is_checkout_completed(self) -> bool:
        return self.event_type == CHECKOUT_COMPLETED


def _shipping_from_session(session: dict) -> dict | None:
    details = session.get("shipping_details") or session.get("shipping") or {}
    address = details.get("address") if isinstance(details, dict) else None
    if not address:
        return None
    return {
        "name": details.get("name"),
        "line1": address.get("line1") or "",
        "line2": address.get("line2"),
        "city": address.get("city") or "",
        "state": address.get("state") or "",
        "postal_code": address.get("postal_code") or "",
        "country": address.get("country") or "",
    }


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_session(
        self,
        line_items: list[LineItem],
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> SessionResult:
        """Open a hosted payment session. Raises UpstreamServiceError on failure."""
        ...

    @abstractmethod
    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        """Verify that a webhook payload is authentically from the gateway."""
        ...

    def parse_webhook_event(self, payload: bytes) -> WebhookEvent:
        """Decode a (verified) webhook body into a WebhookEvent."""
        try:
            envelope = json.loads(payload)
        except (TypeError, ValueError):
            raise ValidationError({"payload": ["Webhook payload is not valid JSON"]}) from None

        if not isinstance(envelope, dict) or "type" not in envelope:
            raise ValidationError({"payload": ["Webhook payload has no event type"]})

        session = (envelope.get("data") or {}).get("object") or {}
        return WebhookEvent(
            event_type=envelope["type"],
            event_id=envelope.get("id"),
            session_id=session.get("id"),
            metadata=dict(session.get("metadata") or {}),
            payment_reference=session.get("payment_intent"),
            shipping_address=_shipping_from_session(session),
        )
