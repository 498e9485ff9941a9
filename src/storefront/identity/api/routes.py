"""FastAPI endpoints for sign-up, sign-in and sign-out."""

from fastapi import APIRouter, Depends
from protean.utils.globals import current_domain

from storefront.api.dependencies import bearer_token, get_current_principal
from storefront.cart.management import ClearBuyerCarts
from storefront.identity import AuthSession, Principal, get_auth_provider
from storefront.identity.api.schemas import (
    PrincipalResponse,
    SessionResponse,
    SignInRequest,
    SignOutResponse,
    SignUpRequest,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

auth_router = APIRouter(prefix="/auth", tags=["auth"])


def _session_response(session: AuthSession) -> SessionResponse:
    return SessionResponse(token=session.token, user=PrincipalResponse(**session.principal.to_dict()))


@auth_router.post("/sign-up", status_code=201, response_model=SessionResponse)
async def sign_up(body: SignUpRequest) -> SessionResponse:
    session = get_auth_provider().sign_up(body.email, body.password, name=body.name)
    logger.info("user_signed_up", user_id=session.principal.id)
    return _session_response(session)


@auth_router.post("/sign-in", response_model=SessionResponse)
async def sign_in(body: SignInRequest) -> SessionResponse:
    session = get_auth_provider().sign_in(body.email, body.password)
    logger.info("user_signed_in", user_id=session.principal.id, is_admin=session.principal.is_admin)
    return _session_response(session)


@auth_router.post("/sign-out", response_model=SignOutResponse)
async def sign_out(token: str | None = Depends(bearer_token)) -> SignOutResponse:
    """End the session and empty the buyer's carts."""
    principal = get_auth_provider().sign_out(token) if token else None
    if principal is None:
        return SignOutResponse(signed_out=False)

    cleared = current_domain.process(ClearBuyerCarts(buyer_id=principal.id), asynchronous=False)
    logger.info("user_signed_out", user_id=principal.id)
    return SignOutResponse(signed_out=True, carts_cleared=cleared)


@auth_router.get("/me", response_model=PrincipalResponse)
async def me(principal: Principal = Depends(get_current_principal)) -> PrincipalResponse:
    return PrincipalResponse(**principal.to_dict())
