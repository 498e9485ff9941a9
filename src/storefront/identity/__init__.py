"""Auth provider factory.

Provides get_auth_provider() / set_auth_provider() to swap implementations.
The default is an InMemoryAuthProvider seeded with the configured admin
emails.
"""

from storefront.config import settings
from storefront.identity.memory_adapter import InMemoryAuthProvider
from storefront.identity.port import AuthProvider, AuthSession, Principal

_current_provider: AuthProvider | None = None


def get_auth_provider() -> AuthProvider:
    """Return the current auth provider, creating the default on first use."""
    global _current_provider
    if _current_provider is None:
        _current_provider = InMemoryAuthProvider(admin_emails=settings.admin_email_set())
    return _current_provider


def set_auth_provider(provider: AuthProvider) -> None:
    """Override the active auth provider (useful for tests)."""
    global _current_provider
    _current_provider = provider


def reset_auth_provider() -> None:
    global _current_provider
    _current_provider = None


__all__ = [
    "AuthProvider",
    "AuthSession",
    "InMemoryAuthProvider",
    "Principal",
    "get_auth_provider",
    "reset_auth_provider",
    "set_auth_provider",
]
