"""Pydantic request/response schemas for the Payments API."""

from pydantic import BaseModel


class WebhookReceipt(BaseModel):
    received: bool = True
    status: str
    order_id: str | None = None


class ConfigureGatewayRequest(BaseModel):
    should_succeed: bool = True
    failure_reason: str = "Payment provider unavailable"


class GatewayConfigResponse(BaseModel):
    gateway: str
    should_succeed: bool
    failure_reason: str
