"""Tests for gateway port/adapter integration."""

import json
import time
from decimal import Decimal

import pytest
from protean.exceptions import ValidationError
from storefront.errors import UpstreamServiceError
from storefront.payments.gateway import get_gateway, reset_gateway, set_gateway
from storefront.payments.gateway.fake_adapter import FakeGateway
from storefront.payments.gateway.port import CHECKOUT_COMPLETED, SIGNATURE_TOLERANCE_SECONDS, LineItem, SessionResult
from storefront.payments.gateway.stripe_adapter import StripeGateway


def _line_items():
    return [LineItem(name="Creatine", unit_amount=Decimal("29.99"), quantity=2)]


class TestLineItem:
    def test_amount_in_cents(self):
        assert LineItem(name="x", unit_amount=Decimal("29.99"), quantity=1).unit_amount_cents() == 2999
        assert LineItem(name="x", unit_amount=Decimal("0.005"), quantity=1).unit_amount_cents() == 1


class TestFakeGateway:
    def test_default_session_succeeds(self):
        gateway = FakeGateway()
        result = gateway.create_session(_line_items(), {"cart_id": "c1"}, "https://ok", "https://cancel")

        assert isinstance(result, SessionResult)
        assert result.session_id.startswith("cs_fake_")
        assert gateway.sessions[result.session_id]["metadata"] == {"cart_id": "c1"}

    def test_configured_session_fails(self):
        gateway = FakeGateway()
        gateway.configure(should_succeed=False, failure_reason="Gateway timeout")

        with pytest.raises(UpstreamServiceError) as exc:
            gateway.create_session(_line_items(), {}, "https://ok", "https://cancel")

        assert exc.value.service == "payment gateway"
        assert len(gateway.calls) == 1

    def test_signature_round_trip(self):
        gateway = FakeGateway(webhook_secret="whsec_a")
        payload = b'{"type": "checkout.session.completed"}'

        assert gateway.verify_webhook_signature(payload, gateway.sign(payload)) is True

    def test_signature_from_another_secret_rejected(self):
        payload = b"{}"
        signature = FakeGateway(webhook_secret="whsec_a").sign(payload)

        assert FakeGateway(webhook_secret="whsec_b").verify_webhook_signature(payload, signature) is False

    def test_stale_signature_rejected(self):
        gateway = FakeGateway(webhook_secret="whsec_a")
        payload = b'{"type": "checkout.session.completed"}'
        signature = gateway.sign(payload, timestamp=int(time.time()) - SIGNATURE_TOLERANCE_SECONDS - 60)

        assert gateway.verify_webhook_signature(payload, signature) is False

    def test_signature_within_tolerance_accepted(self):
        gateway = FakeGateway(webhook_secret="whsec_a")
        payload = b"{}"
        signature = gateway.sign(payload, timestamp=int(time.time()) - 60)

        assert gateway.verify_webhook_signature(payload, signature) is True

    @pytest.mark.parametrize("signature", ["", "garbage", "t=123", "v1=abc", "t=soon,v1=abc"])
    def test_malformed_signature_rejected(self, signature):
        assert FakeGateway().verify_webhook_signature(b"{}", signature) is False

    def test_completion_payload_uses_session_metadata(self):
        gateway = FakeGateway()
        result = gateway.create_session(_line_items(), {"cart_id": "c1"}, "https://ok", "https://cancel")

        envelope = json.loads(gateway.completion_payload(result.session_id, payment_reference="pi_9"))

        assert envelope["type"] == CHECKOUT_COMPLETED
        assert envelope["data"]["object"]["id"] == result.session_id
        assert envelope["data"]["object"]["metadata"] == {"cart_id": "c1"}
        assert envelope["data"]["object"]["payment_intent"] == "pi_9"


class TestParseWebhookEvent:
    def test_parse_completed_session(self):
        gateway = FakeGateway()
        payload = gateway.completion_payload(
            "cs_1",
            metadata={"buyer_id": "b1"},
            shipping_address={"name": "Jane", "line1": "1 Main St", "city": "Austin", "country": "US"},
        )

        event = gateway.parse_webhook_event(payload)

        assert event.is_checkout_completed is True
        assert event.session_id == "cs_1"
        assert event.metadata == {"buyer_id": "b1"}
        assert event.shipping_address["name"] == "Jane"
        assert event.shipping_address["city"] == "Austin"

    def test_other_event_type(self):
        gateway = FakeGateway()
        event = gateway.parse_webhook_event(gateway.completion_payload("cs_1", event_type="charge.refunded"))
        assert event.is_checkout_completed is False

    def test_invalid_json(self):
        with pytest.raises(ValidationError):
            FakeGateway().parse_webhook_event(b"not json")

    def test_missing_type(self):
        with pytest.raises(ValidationError):
            FakeGateway().parse_webhook_event(b'{"data": {}}')


class TestGatewayFactory:
    def test_set_and_get_gateway(self):
        custom = FakeGateway()
        set_gateway(custom)
        assert get_gateway() is custom

    def test_reset_falls_back_to_configured_default(self):
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)


class TestStripeGateway:
    def test_session_parameters(self, monkeypatch):
        import stripe

        captured = {}

        def fake_create(**kwargs):
            captured.update(kwargs)
            return type("Session", (), {"id": "cs_live_1", "url": "https://checkout.stripe.test/cs_live_1"})()

        monkeypatch.setattr(stripe.checkout.Session, "create", fake_create)
        gateway = StripeGateway(api_key="sk_test", webhook_secret="whsec", allowed_countries=["US", "CA"])

        result = gateway.create_session(_line_items(), {"cart_id": "c1"}, "https://ok", "https://cancel")

        assert result.session_id == "cs_live_1"
        assert captured["mode"] == "payment"
        assert captured["metadata"] == {"cart_id": "c1"}
        assert captured["line_items"][0]["price_data"]["unit_amount"] == 2999
        assert captured["line_items"][0]["quantity"] == 2
        assert captured["shipping_address_collection"] == {"allowed_countries": ["US", "CA"]}

    def test_stripe_error_becomes_upstream_error(self, monkeypatch):
        import stripe

        def failing_create(**kwargs):
            raise stripe.StripeError("card network down")

        monkeypatch.setattr(stripe.checkout.Session, "create", failing_create)
        gateway = StripeGateway(api_key="sk_test", webhook_secret="whsec")

        with pytest.raises(UpstreamServiceError):
            gateway.create_session(_line_items(), {}, "https://ok", "https://cancel")

    def test_bad_signature_rejected(self):
        gateway = StripeGateway(api_key="sk_test", webhook_secret="whsec")
        assert gateway.verify_webhook_signature(b"{}", "t=1,v1=abc") is False
