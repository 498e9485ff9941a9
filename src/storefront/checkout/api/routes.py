"""FastAPI endpoint opening a hosted payment session for a cart."""

from fastapi import APIRouter, Depends

from storefront.api.dependencies import get_optional_principal
from storefront.checkout.api.schemas import CheckoutSessionResponse, StartCheckoutRequest, TotalsResponse
from storefront.checkout.session import start_checkout
from storefront.identity import Principal

checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/sessions", status_code=201, response_model=CheckoutSessionResponse)
async def create_checkout_session(
    body: StartCheckoutRequest,
    principal: Principal | None = Depends(get_optional_principal),
) -> CheckoutSessionResponse:
    """Validate the cart against the catalogue and return the gateway redirect URL."""
    session = start_checkout(
        body.cart_id,
        principal,
        success_url=body.success_url,
        cancel_url=body.cancel_url,
        client_total=body.client_total,
        contact=body.contact.model_dump() if body.contact else None,
    )
    return CheckoutSessionResponse(
        session_id=session.session_id,
        url=session.redirect_url,
        totals=TotalsResponse(**session.totals.as_dict()),
    )
