"""Environment-driven settings for the storefront.

Provides get_settings() / reset_settings() so tests can change environment
variables and reload:
- Mercado Pago credentials with a test/production split (MP_ENV)
- Webhook signing secret
- Public base URL used for provider return and notification URLs
- Server-side shipping rate table
- Transactional email credentials, sender and language
"""

import json
import os
from dataclasses import dataclass, field

DEFAULT_BASE_URL = "http://localhost:8000"
DEFAULT_CURRENCY = "COP"

# Flat shipping rates per destination city, in the store currency
DEFAULT_SHIPPING_RATES = {
    "Bogotá": 10000.0,
    "Medellín": 12000.0,
    "Cali": 12000.0,
    "Barranquilla": 15000.0,
    "Cartagena": 15000.0,
    "Bucaramanga": 14000.0,
    "Pereira": 13000.0,
}
DEFAULT_SHIPPING_COST = 18000.0
DEFAULT_EMAIL_FROM = "Storefront <onboarding@resend.dev>"
DEFAULT_EMAIL_LANGUAGE = "es"


@dataclass(frozen=True)
class Settings:
    """Resolved storefront configuration."""

    environment: str = "test"
    access_token: str = ""
    webhook_secret: str | None = None
    base_url: str = DEFAULT_BASE_URL
    currency: str = DEFAULT_CURRENCY
    gateway: str = "mercadopago"
    shipping_rates: dict[str, float] = field(default_factory=lambda: dict(DEFAULT_SHIPPING_RATES))
    default_shipping_cost: float = DEFAULT_SHIPPING_COST
    email_api_key: str = ""
    email_from: str = DEFAULT_EMAIL_FROM
    email_language: str = DEFAULT_EMAIL_LANGUAGE

    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    def url_for(self, path: str) -> str:
        """Join a path onto the public base URL."""
        return f"{self.base_url}/{path.lstrip('/')}"


def _resolve_access_token(environment: str) -> str:
    if environment == "production":
        return os.environ.get("MP_ACCESS_TOKEN_PROD", "")
    return os.environ.get("MP_ACCESS_TOKEN_TEST") or os.environ.get("MERCADO_PAGO_ACCESS_TOKEN", "")


def _load_shipping_rates() -> dict[str, float]:
    raw = os.environ.get("SHIPPING_RATES")
    if not raw:
        return dict(DEFAULT_SHIPPING_RATES)

    rates = json.loads(raw)
    if not isinstance(rates, dict):
        raise ValueError("SHIPPING_RATES must be a JSON object mapping city to rate")
    return {str(city): float(rate) for city, rate in rates.items()}


def load_settings() -> Settings:
    """Build settings from the current environment."""
    environment = os.environ.get("MP_ENV", "test").lower()

    return Settings(
        environment=environment,
        access_token=_resolve_access_token(environment),
        webhook_secret=os.environ.get("MP_WEBHOOK_SECRET") or None,
        base_url=os.environ.get("STOREFRONT_BASE_URL", DEFAULT_BASE_URL).rstrip("/"),
        currency=os.environ.get("STOREFRONT_CURRENCY", DEFAULT_CURRENCY),
        gateway=os.environ.get("PAYMENT_GATEWAY", "mercadopago").lower(),
        shipping_rates=_load_shipping_rates(),
        default_shipping_cost=float(os.environ.get("DEFAULT_SHIPPING_COST", DEFAULT_SHIPPING_COST)),
        email_api_key=os.environ.get("RESEND_API_KEY", ""),
        email_from=os.environ.get("EMAIL_FROM", DEFAULT_EMAIL_FROM),
        email_language=os.environ.get("EMAIL_LANGUAGE", DEFAULT_EMAIL_LANGUAGE).lower(),
    )


_current_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the active settings, loading them from the environment once."""
    global _current_settings
    if _current_settings is None:
        _current_settings = load_settings()
    return _current_settings


def set_settings(settings: Settings) -> None:
    """Override the active settings (useful for tests)."""
    global _current_settings
    _current_settings = settings


def reset_settings() -> None:
    """Forget cached settings so the next access re-reads the environment."""
    global _current_settings
    _current_settings = None
