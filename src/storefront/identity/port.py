"""Auth provider port (abstract interface).

Authentication is owned by an external provider. The storefront only needs
to know who the caller is and whether they hold the admin capability, so the
contract is limited to session management and principal lookup.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class Principal:
    """The signed-in user as seen by the storefront."""

    id: str
    email: str
    name: str | None = None
    is_admin: bool = False

    def to_dict(self) -> dict:
        return {"id": self.id, "email": self.email, "name": self.name, "is_admin": self.is_admin}


@dataclass(frozen=True)
class AuthSession:
    """An issued bearer token together with the principal it identifies."""

    token: str
    principal: Principal


class AuthProvider(ABC):
    """Abstract auth provider interface."""

    @abstractmethod
    def sign_up(self, email: str, password: str, name: str | None = None) -> AuthSession:
        """Register a new account and open a session for it."""
        ...

    @abstractmethod
    def sign_in(self, email: str, password: str) -> AuthSession:
        """Open a session for an existing account."""
        ...

    @abstractmethod
    def sign_out(self, token: str) -> Principal | None:
        """Invalidate a session. Returns the principal that owned it, if any."""
        ...

    @abstractmethod
    def current_user(self, token: str) -> Principal | None:
        """Resolve a bearer token to its principal, or None if it is unknown."""
        ...
