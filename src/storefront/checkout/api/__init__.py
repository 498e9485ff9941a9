"""Checkout API package."""

from storefront.checkout.api.routes import checkout_router

__all__ = ["checkout_router"]
