"""Payment gateway factory.

Provides get_gateway() / set_gateway() to swap implementations:
- FakeGateway for development and testing
- StripeGateway for production

The default adapter is chosen by ``STOREFRONT_PAYMENT_GATEWAY``.
"""

from storefront.config import settings
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.gateway.port import LineItem, PaymentGateway, SessionResult, WebhookEvent
from storefront.payments.gateway.stripe_adapter import StripeGateway

_current_gateway: PaymentGateway | None = None


def _default_gateway() -> PaymentGateway:
    if settings.payment_gateway == "stripe":
        return StripeGateway(
            api_key=settings.stripe_secret_key,
            webhook_secret=settings.stripe_webhook_secret,
            currency=settings.currency,
            allowed_countries=settings.allowed_country_list(),
        )
    return FakeGateway(webhook_secret=settings.webhook_secret)


def get_gateway() -> PaymentGateway:
    """Return the current payment gateway, creating the configured default on first use."""
    global _current_gateway
    if _current_gateway is None:
        _current_gateway = _default_gateway()
    return _current_gateway


def set_gateway(gateway: PaymentGateway) -> None:
    """Override the active payment gateway (useful for tests)."""
    global _current_gateway
    _current_gateway = gateway


def reset_gateway() -> None:
    """Reset to default gateway."""
    global _current_gateway
    _current_gateway = None


__all__ = [
    "FakeGateway",
    "LineItem",
    "PaymentGateway",
    "SessionResult",
    "StripeGateway",
    "WebhookEvent",
    "get_gateway",
    "reset_gateway",
    "set_gateway",
]
