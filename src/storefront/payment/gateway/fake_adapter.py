"""Configurable fake payment gateway for development and testing.

Simulates the provider without external calls:
- Preferences get a fake id and a local redirect URL
- Payments are reported with a configurable status and external reference
- Failures can be switched on to exercise error handling

Every call is recorded in ``calls`` for assertions.
"""

from uuid import uuid4

from storefront.exceptions import GatewayError
from storefront.payment.gateway.port import (
    PaymentGateway,
    PaymentInfo,
    PreferenceRequest,
    PreferenceResult,
)


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Payment provider unavailable"
        self.payment_status: str = "approved"
        self.payments: dict[str, dict] = {}
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Payment provider unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def register_payment(self, payment_id: str, external_reference: str | None, status: str = "approved") -> None:
        """Make ``get_payment`` report this payment."""
        self.payments[str(payment_id)] = {
            "status": status,
            "external_reference": external_reference,
        }

    def create_preference(self, request: PreferenceRequest, idempotency_key: str) -> PreferenceResult:
        self.calls.append(
            {
                "method": "create_preference",
                "request": request,
                "idempotency_key": idempotency_key,
            }
        )

        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

        preference_id = f"fake_pref_{uuid4().hex[:12]}"
        return PreferenceResult(
            preference_id=preference_id,
            redirect_url=f"https://checkout.fake/{preference_id}",
        )

    def get_payment(self, payment_id: str) -> PaymentInfo:
        self.calls.append({"method": "get_payment", "payment_id": payment_id})

        if not self.should_succeed:
            raise GatewayError(self.failure_reason)

        payment = self.payments.get(str(payment_id), {"status": self.payment_status, "external_reference": None})
        return PaymentInfo(
            payment_id=str(payment_id),
            status=payment["status"],
            external_reference=payment["external_reference"],
            payment_method="fake_card",
            payer={"email": "buyer@example.com"},
            date_approved="2026-01-01T00:00:00.000-05:00" if payment["status"] == "approved" else None,
            raw={"id": payment_id, **payment},
        )
