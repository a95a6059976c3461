"""Payment gateway port (abstract interface).

Defines the contract payment provider adapters implement, so checkout and
reconciliation run unchanged against FakeGateway (dev/test) or the Mercado
Pago Checkout Pro API (production).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass(frozen=True)
class PreferenceItem:
    """One line sent to the provider checkout."""

    id: str
    title: str
    quantity: int
    unit_price: float
    currency_id: str

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "quantity": self.quantity,
            "unit_price": self.unit_price,
            "currency_id": self.currency_id,
        }


@dataclass(frozen=True)
class PreferenceRequest:
    """A checkout session request tied to an internal order."""

    items: tuple[PreferenceItem, ...]
    external_reference: str
    back_urls: dict[str, str]
    notification_url: str
    auto_return: str = "approved"

    def to_dict(self) -> dict:
        return {
            "items": [item.to_dict() for item in self.items],
            "external_reference": self.external_reference,
            "back_urls": dict(self.back_urls),
            "notification_url": self.notification_url,
            "auto_return": self.auto_return,
        }


@dataclass(frozen=True)
class PreferenceResult:
    """Result of creating a checkout preference."""

    preference_id: str
    redirect_url: str


@dataclass(frozen=True)
class PaymentInfo:
    """A payment as reported by the provider."""

    payment_id: str
    status: str
    external_reference: str | None = None
    payment_method: str | None = None
    payer: dict | None = None
    date_approved: str | None = None
    raw: dict = field(default_factory=dict)

    @property
    def is_approved(self) -> bool:
        return self.status == "approved"

    def to_metadata(self) -> dict:
        """Payment details stored on the confirmed order."""
        return {
            "payment_id": self.payment_id,
            "status": self.status,
            "payment_method": self.payment_method,
            "payer": self.payer,
            "date_approved": self.date_approved,
            "raw": self.raw,
        }


class PaymentGateway(ABC):
    """Abstract payment gateway interface."""

    @abstractmethod
    def create_preference(self, request: PreferenceRequest, idempotency_key: str) -> PreferenceResult:
        """Create a checkout preference and return where to redirect the buyer."""
        ...

    @abstractmethod
    def get_payment(self, payment_id: str) -> PaymentInfo:
        """Fetch the current state of a payment."""
        ...
