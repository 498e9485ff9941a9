"""Fixtures for HTTP tests against the assembled storefront app."""

import pytest
from fastapi.testclient import TestClient
from storefront.api.app import create_app

ADMIN_EMAIL = "admin@example.com"


@pytest.fixture()
def client():
    return TestClient(create_app())


def _sign_up(client, email, password="secret-pass"):
    response = client.post("/auth/sign-up", json={"email": email, "password": password})
    assert response.status_code == 201
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture()
def admin_headers(client):
    return _sign_up(client, ADMIN_EMAIL)


@pytest.fixture()
def buyer_headers(client):
    return _sign_up(client, "buyer@example.com")


@pytest.fixture()
def seeded(client, admin_headers):
    """Seed the reference catalogue and return products keyed by title."""
    response = client.post("/admin/products/seed", headers=admin_headers)
    assert response.status_code == 200
    return {p["title"]: p for p in client.get("/products").json()}
