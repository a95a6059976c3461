"""Mercado Pago Checkout Pro adapter.

Talks to the REST API directly:
- POST /checkout/preferences creates the hosted checkout for an order
- GET /v1/payments/{id} reads a payment when a notification arrives

Credentials come from settings (MP_ENV selects the production or test access
token). Calls are made once; failures surface as GatewayError and are never
retried here.
"""

import httpx
import structlog

from storefront.exceptions import GatewayConfigurationError, GatewayError
from storefront.payment.gateway.port import (
    PaymentGateway,
    PaymentInfo,
    PreferenceRequest,
    PreferenceResult,
)

logger = structlog.get_logger(__name__)

API_BASE_URL = "https://api.mercadopago.com"
DEFAULT_TIMEOUT = 10.0


class MercadoPagoGateway(PaymentGateway):
    """Production gateway backed by the Mercado Pago REST API."""

    def __init__(
        self,
        access_token: str,
        base_url: str = API_BASE_URL,
        client: httpx.Client | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.access_token = access_token
        self.base_url = base_url.rstrip("/")
        self.client = client or httpx.Client(timeout=timeout)

    def _headers(self, idempotency_key: str | None = None) -> dict:
        if not self.access_token:
            raise GatewayConfigurationError()

        headers = {
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }
        if idempotency_key:
            headers["X-Idempotency-Key"] = idempotency_key
        return headers

    def _request(self, method: str, path: str, **kwargs) -> dict:
        url = f"{self.base_url}{path}"
        try:
            response = self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error(
                "mercadopago_request_rejected",
                method=method,
                path=path,
                status_code=exc.response.status_code,
                body=exc.response.text[:500],
            )
            raise GatewayError(provider_status=exc.response.status_code) from exc
        except httpx.HTTPError as exc:
            logger.error("mercadopago_request_failed", method=method, path=path, error=str(exc))
            raise GatewayError() from exc

        return response.json()

    def create_preference(self, request: PreferenceRequest, idempotency_key: str) -> PreferenceResult:
        headers = self._headers(idempotency_key)
        data = self._request("POST", "/checkout/preferences", json=request.to_dict(), headers=headers)

        redirect_url = data.get("init_point") or data.get("sandbox_init_point")
        if not data.get("id") or not redirect_url:
            logger.error("mercadopago_preference_incomplete", external_reference=request.external_reference)
            raise GatewayError("Payment provider returned an incomplete preference")

        return PreferenceResult(preference_id=str(data["id"]), redirect_url=redirect_url)

    def get_payment(self, payment_id: str) -> PaymentInfo:
        headers = self._headers()
        data = self._request("GET", f"/v1/payments/{payment_id}", headers=headers)

        return PaymentInfo(
            payment_id=str(data.get("id", payment_id)),
            status=data.get("status", "unknown"),
            external_reference=data.get("external_reference"),
            payment_method=data.get("payment_method_id"),
            payer=data.get("payer"),
            date_approved=data.get("date_approved"),
            raw=data,
        )
