"""End-to-end HTTP tests: browse, fill a cart, check out and complete payment."""

from protean.utils.globals import current_domain
from storefront.catalogue.product import Product
from storefront.orders.order import Order


def _product_stock(product_id):
    return current_domain.repository_for(Product).get(product_id).available_quantity


def _new_cart(client, headers=None):
    response = client.post("/carts", headers=headers or {})
    assert response.status_code == 201
    return response.json()["cart_id"]


class TestHealth:
    def test_health(self, client, gateway):
        response = client.get("/health")
        assert response.status_code == 200
        assert response.json() == {"status": "ok", "domain": "storefront", "payment_gateway": "FakeGateway"}


class TestAuthEndpoints:
    def test_me(self, client, buyer_headers):
        response = client.get("/auth/me", headers=buyer_headers)
        assert response.status_code == 200
        assert response.json()["email"] == "buyer@example.com"
        assert response.json()["is_admin"] is False

    def test_me_requires_token(self, client):
        response = client.get("/auth/me")
        assert response.status_code == 401
        assert response.headers["WWW-Authenticate"] == "Bearer"

    def test_sign_in(self, client, buyer_headers):
        response = client.post("/auth/sign-in", json={"email": "buyer@example.com", "password": "secret-pass"})
        assert response.status_code == 200
        assert response.json()["user"]["email"] == "buyer@example.com"

    def test_sign_in_wrong_password(self, client, buyer_headers):
        response = client.post("/auth/sign-in", json={"email": "buyer@example.com", "password": "nope-nope"})
        assert response.status_code == 401

    def test_duplicate_sign_up(self, client, buyer_headers):
        response = client.post("/auth/sign-up", json={"email": "buyer@example.com", "password": "secret-pass"})
        assert response.status_code == 400


class TestCatalogueEndpoints:
    def test_list_and_filter(self, client, seeded):
        assert len(seeded) == 10

        response = client.get("/products", params={"category": "Accessories", "q": "shaker"})
        assert response.status_code == 200
        assert [p["title"] for p in response.json()] == ["Gym Shaker Bottle"]

    def test_categories(self, client, seeded):
        categories = client.get("/products/categories").json()
        assert categories[0] == "All"
        assert "Accessories" in categories

    def test_get_product(self, client, seeded):
        product = seeded["Omega-3 Fish Oil"]
        response = client.get(f"/products/{product['id']}")
        assert response.status_code == 200
        assert response.json()["in_stock"] is False

    def test_unknown_product(self, client):
        assert client.get("/products/does-not-exist").status_code == 404


class TestAdminCapability:
    def test_anonymous_cannot_create_products(self, client):
        response = client.post("/admin/products/seed")
        assert response.status_code == 401

    def test_buyer_cannot_create_products(self, client, buyer_headers):
        response = client.post("/admin/products/seed", headers=buyer_headers)
        assert response.status_code == 403
        assert response.json()["error_type"] == "Unauthorized"

    def test_admin_product_lifecycle(self, client, admin_headers):
        response = client.post(
            "/admin/products",
            headers=admin_headers,
            json={
                "title": "Electrolyte Tabs",
                "description": "Hydration support",
                "price": 12.0,
                "available_quantity": 4,
                "category": "Hydration",
                "tags": ["electrolytes"],
            },
        )
        assert response.status_code == 201
        product_id = response.json()["product_id"]

        response = client.put(f"/admin/products/{product_id}", headers=admin_headers, json={"price": 10.5})
        assert response.status_code == 200
        assert client.get(f"/products/{product_id}").json()["price"] == 10.5

        response = client.delete(f"/admin/products/{product_id}", headers=admin_headers)
        assert response.status_code == 200
        assert client.get(f"/products/{product_id}").status_code == 404


class TestCartEndpoints:
    def test_add_and_totals(self, client, seeded):
        cart_id = _new_cart(client)
        whey = seeded["Premium Whey Protein Isolate"]

        response = client.post(f"/carts/{cart_id}/items", json={"product_id": whey["id"], "quantity": 2})

        assert response.status_code == 200
        body = response.json()
        assert body["item_count"] == 2
        assert body["subtotal"] == "119.98"
        assert body["shipping"] == "0.00"
        assert body["tax"] == "9.60"
        assert body["total"] == "129.58"
        assert body["notice"] is None

    def test_clamped_add_returns_notice(self, client, admin_headers):
        product_id = client.post(
            "/admin/products",
            headers=admin_headers,
            json={"title": "Rare Tub", "description": "Limited", "price": 5.0, "available_quantity": 2, "category": "X"},
        ).json()["product_id"]
        cart_id = _new_cart(client)

        response = client.post(f"/carts/{cart_id}/items", json={"product_id": product_id, "quantity": 5})

        assert response.status_code == 200
        assert response.json()["lines"][0]["quantity"] == 2
        assert "Only 2 of 5" in response.json()["notice"]

    def test_out_of_stock_is_a_conflict(self, client, seeded):
        cart_id = _new_cart(client)
        gloves = seeded["Weightlifting Gloves"]

        response = client.post(f"/carts/{cart_id}/items", json={"product_id": gloves["id"], "quantity": 1})

        assert response.status_code == 409
        assert response.json()["error_type"] == "InsufficientStock"
        assert response.json()["available"] == 0

    def test_update_remove_and_clear(self, client, seeded):
        cart_id = _new_cart(client)
        shaker = seeded["Gym Shaker Bottle"]
        creatine = seeded["Creatine Monohydrate"]
        client.post(f"/carts/{cart_id}/items", json={"product_id": shaker["id"], "quantity": 1})
        client.post(f"/carts/{cart_id}/items", json={"product_id": creatine["id"], "quantity": 1})

        response = client.put(f"/carts/{cart_id}/items/{shaker['id']}", json={"quantity": 4})
        assert response.json()["item_count"] == 5

        response = client.delete(f"/carts/{cart_id}/items/{creatine['id']}")
        assert [line["title"] for line in response.json()["lines"]] == ["Gym Shaker Bottle"]

        response = client.delete(f"/carts/{cart_id}/items")
        assert response.json()["lines"] == []
        assert response.json()["total"] == "0.00"

    def test_snapshot_and_restore(self, client, seeded, buyer_headers):
        cart_id = _new_cart(client)
        shaker = seeded["Gym Shaker Bottle"]
        client.post(f"/carts/{cart_id}/items", json={"product_id": shaker["id"], "quantity": 3})

        snapshot = client.get(f"/carts/{cart_id}/snapshot").json()
        assert snapshot[0]["productId"] == shaker["id"]

        response = client.post("/carts/restore", json={"snapshot": snapshot}, headers=buyer_headers)
        assert response.status_code == 201
        assert response.json()["buyer_id"] is not None
        assert response.json()["item_count"] == 3

    def test_buyer_cart_is_private(self, client, buyer_headers):
        cart_id = _new_cart(client, buyer_headers)
        assert client.get(f"/carts/{cart_id}").status_code == 403
        assert client.get(f"/carts/{cart_id}", headers=buyer_headers).status_code == 200


class TestCheckoutFlow:
    def _fill_cart(self, client, seeded, headers):
        cart_id = _new_cart(client, headers)
        shaker = seeded["Gym Shaker Bottle"]
        client.post(f"/carts/{cart_id}/items", json={"product_id": shaker["id"], "quantity": 2}, headers=headers)
        return cart_id, shaker

    def test_checkout_requires_sign_in(self, client, seeded):
        cart_id = _new_cart(client)
        response = client.post("/checkout/sessions", json={"cart_id": cart_id})
        assert response.status_code == 401

    def test_full_checkout(self, client, seeded, buyer_headers, admin_headers, gateway):
        cart_id, shaker = self._fill_cart(client, seeded, buyer_headers)

        response = client.post("/checkout/sessions", json={"cart_id": cart_id}, headers=buyer_headers)
        assert response.status_code == 201
        session = response.json()
        assert session["url"].endswith(session["session_id"])
        # 2 x 9.99 + 5.99 shipping + 1.60 tax
        assert session["totals"]["total"] == "27.57"
        assert _product_stock(shaker["id"]) == 120

        payload, signature = gateway.signed_completion(session["session_id"])
        response = client.post("/payments/webhook", content=payload, headers={"Stripe-Signature": signature})
        assert response.status_code == 200
        assert response.json()["status"] == "created"
        order_id = response.json()["order_id"]

        # Redelivery of the same event
        response = client.post("/payments/webhook", content=payload, headers={"Stripe-Signature": signature})
        assert response.status_code == 200
        assert response.json() == {"received": True, "status": "duplicate", "order_id": order_id}

        assert _product_stock(shaker["id"]) == 118
        assert len(current_domain.repository_for(Order).list_all()) == 1
        assert client.get(f"/carts/{cart_id}", headers=buyer_headers).json()["lines"] == []

        orders = client.get("/orders", headers=buyer_headers).json()
        assert [o["id"] for o in orders] == [order_id]
        assert orders[0]["status"] == "paid"
        assert orders[0]["total"] == 27.57

        response = client.put(
            f"/admin/orders/{order_id}/status",
            headers=admin_headers,
            json={"status": "processing"},
        )
        assert response.json() == {"order_id": order_id, "status": "processing"}
        assert client.get(f"/orders/{order_id}", headers=buyer_headers).json()["status"] == "processing"

    def test_forged_webhook_is_rejected(self, client, seeded, buyer_headers, gateway):
        cart_id, _ = self._fill_cart(client, seeded, buyer_headers)
        session = client.post("/checkout/sessions", json={"cart_id": cart_id}, headers=buyer_headers).json()
        payload, _ = gateway.signed_completion(session["session_id"])

        response = client.post("/payments/webhook", content=payload, headers={"Stripe-Signature": "t=1,v1=forged"})

        assert response.status_code == 400
        assert response.json()["error_type"] == "SignatureVerificationFailed"
        assert current_domain.repository_for(Order).list_all() == []

    def test_gateway_outage_is_a_bad_gateway(self, client, seeded, buyer_headers):
        cart_id, _ = self._fill_cart(client, seeded, buyer_headers)
        client.post("/payments/gateway/configure", json={"should_succeed": False, "failure_reason": "down"})

        response = client.post("/checkout/sessions", json={"cart_id": cart_id}, headers=buyer_headers)

        assert response.status_code == 502
        assert response.json()["retryable"] is True

    def test_incomplete_checkout_form_is_rejected(self, client, seeded, buyer_headers, gateway):
        cart_id, _ = self._fill_cart(client, seeded, buyer_headers)

        response = client.post(
            "/checkout/sessions",
            json={"cart_id": cart_id, "contact": {"name": "Jane Doe", "email": "jane@example.com"}},
            headers=buyer_headers,
        )

        assert response.status_code == 400
        assert gateway.calls == []

    def test_checkout_form_reaches_the_order(self, client, seeded, buyer_headers, gateway):
        cart_id, _ = self._fill_cart(client, seeded, buyer_headers)
        contact = {
            "name": "Jane Doe",
            "email": "jane@example.com",
            "phone": "+1 512 555 0100",
            "line1": "1 Main St",
            "city": "Austin",
            "state": "TX",
            "postal_code": "73301",
            "country": "US",
        }
        session = client.post(
            "/checkout/sessions", json={"cart_id": cart_id, "contact": contact}, headers=buyer_headers
        ).json()

        payload, signature = gateway.signed_completion(session["session_id"])
        order_id = client.post(
            "/payments/webhook", content=payload, headers={"Stripe-Signature": signature}
        ).json()["order_id"]

        address = client.get(f"/orders/{order_id}", headers=buyer_headers).json()["shipping_address"]
        assert address["name"] == "Jane Doe"
        assert address["phone"] == "+1 512 555 0100"
        assert address["city"] == "Austin"

    def test_ignored_event_is_acknowledged(self, client, gateway):
        payload, signature = gateway.signed_completion("cs_x", event_type="payment_intent.created", metadata={})

        response = client.post("/payments/webhook", content=payload, headers={"Stripe-Signature": signature})

        assert response.status_code == 200
        assert response.json()["status"] == "ignored"


class TestOrderAccess:
    def test_orders_require_sign_in(self, client):
        assert client.get("/orders").status_code == 401

    def test_admin_order_list_requires_admin(self, client, buyer_headers):
        assert client.get("/admin/orders", headers=buyer_headers).status_code == 403

    def test_admin_sees_all_orders(self, client, admin_headers):
        assert client.get("/admin/orders", headers=admin_headers).json() == []


class TestSignOut:
    def test_sign_out_clears_cart(self, client, seeded, buyer_headers):
        cart_id = _new_cart(client, buyer_headers)
        shaker = seeded["Gym Shaker Bottle"]
        client.post(f"/carts/{cart_id}/items", json={"product_id": shaker["id"], "quantity": 1}, headers=buyer_headers)

        response = client.post("/auth/sign-out", headers=buyer_headers)

        assert response.json() == {"signed_out": True, "carts_cleared": 1}
        assert client.get("/auth/me", headers=buyer_headers).status_code == 401
        assert client.get(f"/carts/{cart_id}").status_code == 403
