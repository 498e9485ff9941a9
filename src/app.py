"""Storefront ASGI entry point.

Usage:
    uvicorn app:app --app-dir src --host 0.0.0.0 --port 8000 --reload
"""

# ---------------------------------------------------------------------------
# Domain initialization
# ---------------------------------------------------------------------------
# The domain is initialized at module level so uvicorn workers share it.
# PROTEAN_ENV selects the domain.toml overlay to apply.
from storefront.api.app import create_app
from storefront.domain import storefront

storefront.init()

app = create_app()
