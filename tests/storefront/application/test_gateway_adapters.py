"""Tests for the payment gateway factory and its adapters."""

import json

import httpx
import pytest

from storefront.config import Settings, set_settings
from storefront.exceptions import GatewayConfigurationError, GatewayError
from storefront.payment.gateway import get_gateway, reset_gateway
from storefront.payment.gateway.fake_adapter import FakeGateway
from storefront.payment.gateway.mercadopago_adapter import MercadoPagoGateway
from storefront.payment.gateway.port import PreferenceItem, PreferenceRequest


def _preference_request(reference="ord-001"):
    return PreferenceRequest(
        items=(PreferenceItem(id="P1", title="Hoodie", quantity=2, unit_price=50000.0, currency_id="COP"),),
        external_reference=reference,
        back_urls={
            "success": "https://shop.example.com/cart/success",
            "failure": "https://shop.example.com/cart/failure",
            "pending": "https://shop.example.com/cart/pending",
        },
        notification_url="https://shop.example.com/webhooks/mercadopago",
    )


def _gateway_with(handler, access_token="TEST-token"):
    client = httpx.Client(transport=httpx.MockTransport(handler))
    return MercadoPagoGateway(access_token=access_token, client=client)


class TestGatewayFactory:
    def test_fake_selected_by_settings(self):
        reset_gateway()
        assert isinstance(get_gateway(), FakeGateway)

    def test_mercadopago_selected_by_settings(self):
        set_settings(Settings(access_token="APP_USR-prod", gateway="mercadopago"))
        reset_gateway()

        gateway = get_gateway()
        assert isinstance(gateway, MercadoPagoGateway)
        assert gateway.access_token == "APP_USR-prod"

    def test_gateway_cached(self):
        reset_gateway()
        assert get_gateway() is get_gateway()


class TestFakeGateway:
    def test_preference_recorded(self):
        fake = FakeGateway()
        result = fake.create_preference(_preference_request(), idempotency_key="ord-001")

        assert result.preference_id.startswith("fake_pref_")
        assert result.redirect_url == f"https://checkout.fake/{result.preference_id}"
        assert fake.calls[0]["idempotency_key"] == "ord-001"

    def test_configured_failure(self):
        fake = FakeGateway()
        fake.configure(should_succeed=False, failure_reason="down")

        with pytest.raises(GatewayError) as exc:
            fake.create_preference(_preference_request(), idempotency_key="ord-001")
        assert str(exc.value) == "down"

    def test_unregistered_payment_uses_default_status(self):
        payment = FakeGateway().get_payment("pay-001")
        assert payment.is_approved
        assert payment.external_reference is None


class TestMercadoPagoPreference:
    def test_sends_preference_with_auth_and_idempotency(self):
        seen = {}

        def handler(request):
            seen["method"] = request.method
            seen["url"] = str(request.url)
            seen["headers"] = request.headers
            seen["body"] = json.loads(request.content)
            return httpx.Response(
                201,
                json={
                    "id": "123-abc",
                    "init_point": "https://www.mercadopago.com.co/checkout/v1/redirect?pref_id=123-abc",
                },
            )

        result = _gateway_with(handler).create_preference(_preference_request(), idempotency_key="ord-001")

        assert result.preference_id == "123-abc"
        assert result.redirect_url.endswith("pref_id=123-abc")
        assert seen["method"] == "POST"
        assert seen["url"] == "https://api.mercadopago.com/checkout/preferences"
        assert seen["headers"]["Authorization"] == "Bearer TEST-token"
        assert seen["headers"]["X-Idempotency-Key"] == "ord-001"
        assert seen["body"]["external_reference"] == "ord-001"
        assert seen["body"]["auto_return"] == "approved"
        assert seen["body"]["items"][0]["unit_price"] == 50000.0

    def test_sandbox_init_point_fallback(self):
        def handler(request):
            return httpx.Response(201, json={"id": "123-abc", "sandbox_init_point": "https://sandbox.example/123-abc"})

        result = _gateway_with(handler).create_preference(_preference_request(), idempotency_key="ord-001")
        assert result.redirect_url == "https://sandbox.example/123-abc"

    def test_incomplete_response(self):
        def handler(request):
            return httpx.Response(201, json={"id": "123-abc"})

        with pytest.raises(GatewayError):
            _gateway_with(handler).create_preference(_preference_request(), idempotency_key="ord-001")

    def test_provider_rejection(self):
        def handler(request):
            return httpx.Response(400, json={"message": "invalid items"})

        with pytest.raises(GatewayError) as exc:
            _gateway_with(handler).create_preference(_preference_request(), idempotency_key="ord-001")
        assert exc.value.details == {"provider_status": 400}

    def test_network_failure(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(GatewayError):
            _gateway_with(handler).create_preference(_preference_request(), idempotency_key="ord-001")

    def test_missing_token_never_calls_provider(self):
        calls = []

        def handler(request):
            calls.append(request)
            return httpx.Response(201, json={})

        with pytest.raises(GatewayConfigurationError):
            _gateway_with(handler, access_token="").create_preference(_preference_request(), idempotency_key="ord-001")
        assert calls == []


class TestMercadoPagoPayment:
    def test_maps_payment_fields(self):
        def handler(request):
            assert request.url.path == "/v1/payments/987654"
            assert "X-Idempotency-Key" not in request.headers
            return httpx.Response(
                200,
                json={
                    "id": 987654,
                    "status": "approved",
                    "external_reference": "ord-001",
                    "payment_method_id": "visa",
                    "payer": {"email": "buyer@example.com"},
                    "date_approved": "2026-01-01T10:00:00.000-05:00",
                },
            )

        payment = _gateway_with(handler).get_payment("987654")

        assert payment.payment_id == "987654"
        assert payment.is_approved
        assert payment.external_reference == "ord-001"
        assert payment.payment_method == "visa"
        assert payment.to_metadata()["payer"] == {"email": "buyer@example.com"}

    def test_unknown_payment(self):
        def handler(request):
            return httpx.Response(404, json={"message": "Payment not found"})

        with pytest.raises(GatewayError) as exc:
            _gateway_with(handler).get_payment("missing")
        assert exc.value.status_code == 502
