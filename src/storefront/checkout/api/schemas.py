"""Pydantic request/response schemas for the Checkout API."""

from pydantic import BaseModel


class ContactDetails(BaseModel):
    """Checkout form fields. Completeness is checked by the checkout handler."""

    name: str | None = None
    email: str | None = None
    phone: str | None = None
    line1: str | None = None
    line2: str | None = None
    city: str | None = None
    state: str | None = None
    postal_code: str | None = None
    country: str | None = None


class StartCheckoutRequest(BaseModel):
    cart_id: str
    success_url: str | None = None
    cancel_url: str | None = None
    client_total: float | None = None
    contact: ContactDetails | None = None

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "cart_id": "cart-001",
                    "client_total": 70.78,
                    "contact": {
                        "name": "Jane Doe",
                        "email": "jane@example.com",
                        "phone": "+1 512 555 0100",
                        "line1": "1 Main St",
                        "city": "Austin",
                        "state": "TX",
                        "postal_code": "73301",
                        "country": "US",
                    },
                }
            ]
        }
    }


class TotalsResponse(BaseModel):
    subtotal: str
    shipping: str
    tax: str
    total: str


class CheckoutSessionResponse(BaseModel):
    session_id: str
    url: str
    totals: TotalsResponse
