"""Storefront FastAPI application factory.

Every request runs inside the storefront domain context, so route handlers
can reach repositories and dispatch commands through ``current_domain``.
The domain must be initialized before the app serves traffic; see
``src/app.py``.
"""

from uuid import uuid4

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from storefront.api.errors import register_error_handlers
from storefront.cart.api import cart_router
from storefront.catalogue.api import admin_product_router, product_router
from storefront.checkout.api import checkout_router
from storefront.config import settings
from storefront.domain import storefront
from storefront.identity.api import auth_router
from storefront.orders.api import admin_order_router, order_router
from storefront.payments.api import payment_router
from storefront.payments.gateway import get_gateway
from storefront.utils.logging import bind_request_context, clear_request_context


def create_app() -> FastAPI:
    app = FastAPI(
        title="Storefront API",
        description="Catalogue, stock-guarded cart and two-phase checkout",
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def domain_context_middleware(request: Request, call_next):
        """Push the storefront domain context and tag log lines with a request id."""
        bind_request_context(request_id=request.headers.get("X-Request-ID") or uuid4().hex, path=request.url.path)
        try:
            with storefront.domain_context():
                response = await call_next(request)
        finally:
            clear_request_context()
        return response

    register_error_handlers(app)

    app.include_router(auth_router)
    app.include_router(product_router)
    app.include_router(admin_product_router)
    app.include_router(cart_router)
    app.include_router(checkout_router)
    app.include_router(payment_router)
    app.include_router(order_router)
    app.include_router(admin_order_router)

    @app.get("/health")
    async def health():
        return JSONResponse(
            content={
                "status": "ok",
                "domain": storefront.name,
                "payment_gateway": type(get_gateway()).__name__,
            }
        )

    return app
