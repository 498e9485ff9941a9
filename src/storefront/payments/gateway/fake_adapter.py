"""Configurable fake payment gateway for development and testing.

This adapter simulates a hosted checkout without any external calls.
It can be configured at runtime to succeed or fail, making it useful for:
- Manual API testing via /payments/gateway/configure
- Automated tests with predictable outcomes
- Development without real gateway credentials

Webhook signatures use the same scheme as Stripe (``t=<ts>,v1=<hmac>`` where
the HMAC-SHA256 is taken over ``"<ts>.<payload>"``), so the completion
endpoint exercises a real signature check in tests. Signatures older than
the tolerance are refused, as Stripe does, so a captured body cannot be
replayed later.
"""

import hashlib
import hmac
import json
import time
from uuid import uuid4

from storefront.errors import UpstreamServiceError
from storefront.payments.gateway.port import (
    CHECKOUT_COMPLETED,
    SIGNATURE_TOLERANCE_SECONDS,
    LineItem,
    PaymentGateway,
    SessionResult,
)


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(
        self,
        webhook_secret: str = "whsec_local_development",
        tolerance: int = SIGNATURE_TOLERANCE_SECONDS,
    ) -> None:
        self.webhook_secret = webhook_secret
        self.tolerance = tolerance
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment provider unavailable"
        self.calls: list[dict] = []
        self.sessions: dict[str, dict] = {}

    def configure(self, should_succeed: bool, failure_reason: str = "Payment provider unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_session(
        self,
        line_items: list[LineItem],
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> SessionResult:
        call = {
            "method": "create_session",
            "line_items": list(line_items),
            "metadata": dict(metadata),
            "success_url": success_url,
            "cancel_url": cancel_url,
        }
        self.calls.append(call)

        if not self.should_succeed:
            raise UpstreamServiceError("payment gateway", self.failure_reason)

        session_id = f"cs_fake_{uuid4().hex[:16]}"
        self.sessions[session_id] = call
        return SessionResult(
            session_id=session_id,
            redirect_url=f"https://checkout.fake-gateway.test/pay/{session_id}",
        )

    # -------------------------------------------------------------------
    # Webhook signing
    # -------------------------------------------------------------------
    def _digest(self, payload: bytes, timestamp: str) -> str:
        signed = timestamp.encode("utf-8") + b"." + payload
        return hmac.new(self.webhook_secret.encode("utf-8"), signed, hashlib.sha256).hexdigest()

    def sign(self, payload: bytes, timestamp: int | None = None) -> str:
        """Produce the signature header value for ``payload``."""
        ts = str(timestamp if timestamp is not None else int(time.time()))
        return f"t={ts},v1={self._digest(payload, ts)}"

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        if not signature:
            return False

        parts = dict(part.split("=", 1) for part in signature.split(",") if "=" in part)
        timestamp, received = parts.get("t"), parts.get("v1")
        if not timestamp or not received:
            return False
        try:
            signed_at = int(timestamp)
        except ValueError:
            return False
        if signed_at < time.time() - self.tolerance:
            return False
        return hmac.compare_digest(self._digest(payload, timestamp), received)

    # -------------------------------------------------------------------
    # Test helpers
    # -------------------------------------------------------------------
    def completion_payload(
        self,
        session_id: str,
        payment_reference: str | None = None,
        shipping_address: dict | None = None,
        event_type: str = CHECKOUT_COMPLETED,
        metadata: dict | None = None,
    ) -> bytes:
        """Build the webhook body the gateway would send for ``session_id``."""
        if metadata is None:
            metadata = self.sessions.get(session_id, {}).get("metadata", {})

        session = {
            "id": session_id,
            "object": "checkout.session",
            "metadata": metadata,
            "payment_intent": payment_reference or f"pi_fake_{uuid4().hex[:16]}",
            "payment_status": "paid",
        }
        if shipping_address:
            session["shipping_details"] = {
                "name": shipping_address.get("name"),
                "address": {k: v for k, v in shipping_address.items() if k != "name"},
            }

        envelope = {
            "id": f"evt_fake_{uuid4().hex[:16]}",
            "type": event_type,
            "data": {"object": session},
        }
        return json.dumps(envelope).encode("utf-8")

    def signed_completion(self, session_id: str, **kwargs) -> tuple[bytes, str]:
        payload = self.completion_payload(session_id, **kwargs)
        return payload, self.sign(payload)
