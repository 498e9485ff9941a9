"""Auth API package."""

from storefront.identity.api.routes import auth_router

__all__ = ["auth_router"]
