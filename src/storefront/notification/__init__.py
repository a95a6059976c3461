"""Email channel factory.

Provides get_email_channel() / set_email_channel() to swap implementations:
- ResendEmailAdapter when RESEND_API_KEY is configured
- FakeEmailAdapter otherwise, and in tests
"""

from storefront.config import get_settings
from storefront.notification.email_port import EmailPort
from storefront.notification.fake_email import FakeEmailAdapter
from storefront.notification.resend_adapter import ResendEmailAdapter

_current_channel: EmailPort | None = None


def _build_channel() -> EmailPort:
    settings = get_settings()
    if settings.email_api_key:
        return ResendEmailAdapter(api_key=settings.email_api_key, sender=settings.email_from)
    return FakeEmailAdapter()


def get_email_channel() -> EmailPort:
    global _current_channel
    if _current_channel is None:
        _current_channel = _build_channel()
    return _current_channel


def set_email_channel(channel: EmailPort) -> None:
    """Override the active email channel (useful for tests)."""
    global _current_channel
    _current_channel = channel


def reset_email_channel() -> None:
    global _current_channel
    _current_channel = None
