"""FastAPI routes for the payment gateway: webhook intake and fake-gateway controls."""

from fastapi import APIRouter, Header, HTTPException, Request

from storefront.checkout.completion import complete_checkout
from storefront.config import settings
from storefront.payments.api.schemas import ConfigureGatewayRequest, GatewayConfigResponse, WebhookReceipt
from storefront.payments.gateway import get_gateway
from storefront.payments.gateway.fake_adapter import FakeGateway

payment_router = APIRouter(prefix="/payments", tags=["payments"])


@payment_router.post("/webhook", response_model=WebhookReceipt)
async def process_webhook(
    request: Request,
    stripe_signature: str = Header(default="", alias="Stripe-Signature"),
) -> WebhookReceipt:
    """Receive a payment gateway callback.

    The signature is computed over the exact bytes sent, so the raw body is
    read before any JSON parsing. Redeliveries of a completed session are
    acknowledged without creating a second order.
    """
    payload = await request.body()
    outcome = complete_checkout(payload, stripe_signature)
    return WebhookReceipt(status=outcome.status.value, order_id=outcome.order_id)


@payment_router.post("/gateway/configure", response_model=GatewayConfigResponse)
async def configure_gateway(body: ConfigureGatewayRequest) -> GatewayConfigResponse:
    """Configure the FakeGateway behavior (non-production only).

    This endpoint is only available outside the production environment.
    It allows toggling success/failure behavior for manual API testing.
    """
    if settings.environment == "production":
        raise HTTPException(status_code=403, detail="Gateway configuration not available in production")

    gateway = get_gateway()
    if not isinstance(gateway, FakeGateway):
        raise HTTPException(status_code=400, detail="Gateway configuration only available for FakeGateway")

    gateway.configure(
        should_succeed=body.should_succeed,
        failure_reason=body.failure_reason,
    )
    return GatewayConfigResponse(
        gateway=type(gateway).__name__,
        should_succeed=gateway.should_succeed,
        failure_reason=gateway.failure_reason,
    )
