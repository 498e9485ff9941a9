"""Map storefront errors to HTTP responses.

Protean's own exceptions (ValidationError, ObjectNotFoundError, ...) are
mapped by ``protean.integrations.fastapi.register_exception_handlers``; the
handlers here cover ``storefront.errors`` and use the same ``{"error": ...}``
body shape.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.integrations.fastapi import register_exception_handlers

from storefront.errors import (
    InsufficientStock,
    SignatureVerificationFailed,
    StorefrontError,
    Unauthenticated,
    Unauthorized,
    UpstreamServiceError,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    InsufficientStock: 409,
    Unauthenticated: 401,
    Unauthorized: 403,
    UpstreamServiceError: 502,
    SignatureVerificationFailed: 400,
}


def _body(exc: StorefrontError) -> dict:
    body = {"error": str(exc), "error_type": type(exc).__name__}
    if isinstance(exc, InsufficientStock):
        body.update(exc.to_dict())
    elif isinstance(exc, UpstreamServiceError):
        body.update({"service": exc.service, "retryable": True})
    return body


def register_error_handlers(app: FastAPI) -> None:
    register_exception_handlers(app)

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        status_code = ERROR_STATUS_CODES.get(type(exc), 500)
        if status_code >= 500:
            logger.error("request_failed", path=request.url.path, error_type=type(exc).__name__, error=str(exc))

        headers = {"WWW-Authenticate": "Bearer"} if isinstance(exc, Unauthenticated) else None
        return JSONResponse(status_code=status_code, content=_body(exc), headers=headers)
