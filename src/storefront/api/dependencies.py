"""FastAPI dependencies resolving the caller from a bearer token."""

from fastapi import Depends, Header

from storefront.errors import Unauthenticated, Unauthorized
from storefront.identity import Principal, get_auth_provider


def bearer_token(authorization: str | None = Header(default=None)) -> str | None:
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def get_optional_principal(token: str | None = Depends(bearer_token)) -> Principal | None:
    """The signed-in principal, or None for guests."""
    if token is None:
        return None
    return get_auth_provider().current_user(token)


def get_current_principal(principal: Principal | None = Depends(get_optional_principal)) -> Principal:
    if principal is None:
        raise Unauthenticated()
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if not principal.is_admin:
        raise Unauthorized("Admin access required")
    return principal
