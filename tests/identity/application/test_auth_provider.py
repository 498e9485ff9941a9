"""Tests for the in-memory auth provider."""

import pytest
from protean.exceptions import ValidationError
from storefront.errors import Unauthenticated
from storefront.identity import InMemoryAuthProvider, get_auth_provider, reset_auth_provider, set_auth_provider


@pytest.fixture()
def provider():
    return InMemoryAuthProvider(admin_emails={"admin@example.com"})


class TestSignUp:
    def test_sign_up_opens_session(self, provider):
        session = provider.sign_up("Jane@Example.com", "secret1", name="Jane")

        assert session.token
        assert session.principal.email == "jane@example.com"
        assert session.principal.name == "Jane"
        assert session.principal.is_admin is False
        assert provider.current_user(session.token) == session.principal

    def test_duplicate_email_rejected(self, provider):
        provider.sign_up("jane@example.com", "secret1")
        with pytest.raises(ValidationError):
            provider.sign_up("JANE@example.com", "another1")

    def test_invalid_email_rejected(self, provider):
        with pytest.raises(ValidationError):
            provider.sign_up("not-an-email", "secret1")

    def test_short_password_rejected(self, provider):
        with pytest.raises(ValidationError):
            provider.sign_up("jane@example.com", "123")

    def test_admin_capability_comes_from_configured_emails(self, provider):
        session = provider.sign_up("admin@example.com", "secret1")
        assert session.principal.is_admin is True


class TestSignIn:
    def test_sign_in(self, provider):
        registered = provider.sign_up("jane@example.com", "secret1")
        session = provider.sign_in("jane@example.com", "secret1")

        assert session.principal.id == registered.principal.id
        assert session.token != registered.token

    def test_wrong_password(self, provider):
        provider.sign_up("jane@example.com", "secret1")
        with pytest.raises(Unauthenticated):
            provider.sign_in("jane@example.com", "wrong-password")

    def test_unknown_account(self, provider):
        with pytest.raises(Unauthenticated):
            provider.sign_in("ghost@example.com", "secret1")


class TestSignOut:
    def test_sign_out_invalidates_token(self, provider):
        session = provider.sign_up("jane@example.com", "secret1")

        principal = provider.sign_out(session.token)

        assert principal.email == "jane@example.com"
        assert provider.current_user(session.token) is None

    def test_sign_out_unknown_token(self, provider):
        assert provider.sign_out("nope") is None

    def test_current_user_without_token(self, provider):
        assert provider.current_user("") is None


class TestProviderFactory:
    def test_set_and_get(self, provider):
        set_auth_provider(provider)
        assert get_auth_provider() is provider

    def test_reset_builds_default(self):
        reset_auth_provider()
        assert isinstance(get_auth_provider(), InMemoryAuthProvider)
