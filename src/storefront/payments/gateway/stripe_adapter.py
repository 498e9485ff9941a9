"""Stripe payment gateway adapter.

Uses the stripe-python SDK to open hosted Checkout Sessions and to verify
webhook signatures with the endpoint's signing secret.
"""

import stripe

from storefront.errors import UpstreamServiceError
from storefront.payments.gateway.port import SIGNATURE_TOLERANCE_SECONDS, LineItem, PaymentGateway, SessionResult
from storefront.utils.logging import get_logger

logger = get_logger(__name__)


class StripeGateway(PaymentGateway):
    """Production Stripe gateway adapter."""

    def __init__(
        self,
        api_key: str,
        webhook_secret: str,
        currency: str = "usd",
        allowed_countries: list[str] | None = None,
    ) -> None:
        self.api_key = api_key
        self.webhook_secret = webhook_secret
        self.currency = currency
        self.allowed_countries = allowed_countries or ["US", "CA", "GB"]

    def _stripe_line_item(self, item: LineItem) -> dict:
        product_data = {"name": item.name}
        if item.description:
            product_data["description"] = item.description
        if item.image_url:
            product_data["images"] = [item.image_url]
        return {
            "price_data": {
                "currency": self.currency,
                "product_data": product_data,
                "unit_amount": item.unit_amount_cents(),
            },
            "quantity": item.quantity,
        }

    def create_session(
        self,
        line_items: list[LineItem],
        metadata: dict[str, str],
        success_url: str,
        cancel_url: str,
    ) -> SessionResult:
        try:
            session = stripe.checkout.Session.create(
                api_key=self.api_key,
                mode="payment",
                payment_method_types=["card"],
                line_items=[self._stripe_line_item(item) for item in line_items],
                metadata=metadata,
                success_url=success_url,
                cancel_url=cancel_url,
                shipping_address_collection={"allowed_countries": self.allowed_countries},
            )
        except stripe.StripeError as exc:
            logger.error("stripe_session_failed", error=str(exc))
            raise UpstreamServiceError("stripe", str(exc)) from exc

        return SessionResult(session_id=session.id, redirect_url=session.url)

    def verify_webhook_signature(self, payload: bytes, signature: str) -> bool:
        if not signature or not self.webhook_secret:
            return False
        try:
            stripe.Webhook.construct_event(
                payload, signature, self.webhook_secret, tolerance=SIGNATURE_TOLERANCE_SECONDS
            )
        except (ValueError, stripe.SignatureVerificationError):
            return False
        return True
