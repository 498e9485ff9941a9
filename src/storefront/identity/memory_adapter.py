"""In-process auth provider for development and testing.

Keeps accounts and sessions in dictionaries. Passwords are stored as salted
PBKDF2-SHA256 hashes and sessions are opaque random tokens. The admin
capability is granted to the emails the provider is configured with.
"""

import hashlib
import hmac
import secrets
import threading
from uuid import uuid4

from protean.exceptions import ValidationError

from storefront.errors import Unauthenticated
from storefront.identity.port import AuthProvider, AuthSession, Principal

_PBKDF2_ITERATIONS = 120_000
_MIN_PASSWORD_LENGTH = 6


def _hash_password(password: str, salt: bytes) -> bytes:
    return hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, _PBKDF2_ITERATIONS)


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class InMemoryAuthProvider(AuthProvider):
    """Dictionary-backed auth provider."""

    def __init__(self, admin_emails=None) -> None:
        self.admin_emails: set[str] = {_normalize_email(e) for e in (admin_emails or []) if e}
        self._accounts: dict[str, dict] = {}
        self._sessions: dict[str, str] = {}
        self._lock = threading.Lock()

    def _principal(self, account: dict) -> Principal:
        return Principal(
            id=account["id"],
            email=account["email"],
            name=account["name"],
            is_admin=account["email"] in self.admin_emails,
        )

    def _open_session(self, account: dict) -> AuthSession:
        token = secrets.token_urlsafe(32)
        self._sessions[token] = account["email"]
        return AuthSession(token=token, principal=self._principal(account))

    def sign_up(self, email: str, password: str, name: str | None = None) -> AuthSession:
        email = _normalize_email(email)
        if not email or "@" not in email:
            raise ValidationError({"email": ["A valid email address is required"]})
        if not password or len(password) < _MIN_PASSWORD_LENGTH:
            raise ValidationError({"password": [f"Password must be at least {_MIN_PASSWORD_LENGTH} characters"]})

        with self._lock:
            if email in self._accounts:
                raise ValidationError({"email": ["An account with this email already exists"]})

            salt = secrets.token_bytes(16)
            account = {
                "id": str(uuid4()),
                "email": email,
                "name": name,
                "salt": salt,
                "password_hash": _hash_password(password, salt),
            }
            self._accounts[email] = account
            return self._open_session(account)

    def sign_in(self, email: str, password: str) -> AuthSession:
        email = _normalize_email(email)
        with self._lock:
            account = self._accounts.get(email)
            if account is None or not hmac.compare_digest(
                account["password_hash"], _hash_password(password or "", account["salt"])
            ):
                raise Unauthenticated("Invalid email or password")
            return self._open_session(account)

    def sign_out(self, token: str) -> Principal | None:
        with self._lock:
            email = self._sessions.pop(token, None)
            if email is None:
                return None
            return self._principal(self._accounts[email])

    def current_user(self, token: str) -> Principal | None:
        if not token:
            return None
        with self._lock:
            email = self._sessions.get(token)
            if email is None:
                return None
            return self._principal(self._accounts[email])
