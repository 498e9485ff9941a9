import os
from pathlib import Path

import pytest

ADMIN_EMAIL = "admin@example.com"


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Pytest hook to run before collecting tests.

    Fetch and activate the domain by pushing the associated domain_context. The activated domain can then be referred to elsewhere as `current_domain`
    """
    os.environ["PROTEAN_ENV"] = session.config.option.env

    # Load the packages the way src/app.py does before init() traverses the
    # source tree, so package __init__ modules are imported ahead of their
    # submodules.
    import storefront.api.app  # noqa: F401
    from storefront.domain import storefront

    storefront.init()
    storefront.domain_context().push()


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)


@pytest.fixture(autouse=True)
def gateway():
    """A fresh fake payment gateway per test."""
    from storefront.payments.gateway import reset_gateway, set_gateway
    from storefront.payments.gateway.fake_adapter import FakeGateway

    fake = FakeGateway(webhook_secret="whsec_test")
    set_gateway(fake)

    yield fake

    reset_gateway()


@pytest.fixture(autouse=True)
def auth_provider():
    """A fresh in-memory auth provider per test, with one admin address."""
    from storefront.identity import InMemoryAuthProvider, reset_auth_provider, set_auth_provider

    provider = InMemoryAuthProvider(admin_emails={ADMIN_EMAIL})
    set_auth_provider(provider)

    yield provider

    reset_auth_provider()


@pytest.fixture(autouse=True)
def run_around_tests():
    """Fixture to automatically cleanup infrastructure after every test"""
    yield

    from protean import current_domain

    # Clear all databases
    for _, provider in current_domain.providers.items():
        provider._data_reset()

    # Drain event stores
    current_domain.event_store.store._data_reset()


# ---------------------------------------------------------------------------
# Shared builders
# ---------------------------------------------------------------------------
@pytest.fixture()
def make_product():
    """Persist a product and return it."""
    from protean.utils.globals import current_domain
    from storefront.catalogue.product import Product

    def _make(**overrides):
        defaults = {
            "title": "Premium Whey Protein",
            "description": "27g of protein per serving",
            "price": 49.99,
            "category": "Protein",
            "available_quantity": 10,
            "tags": ["whey", "protein"],
        }
        defaults.update(overrides)
        product = Product.create(**defaults)
        current_domain.repository_for(Product).add(product)
        return current_domain.repository_for(Product).get(product.id)

    return _make
