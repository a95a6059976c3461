import os

import pytest

from storefront.config import Settings, reset_settings, set_settings
from storefront.notification import reset_email_channel, set_email_channel
from storefront.notification.fake_email import FakeEmailAdapter
from storefront.payment.gateway import reset_gateway, set_gateway
from storefront.payment.gateway.fake_adapter import FakeGateway

TEST_BASE_URL = "https://shop.example.com"
TEST_WEBHOOK_SECRET = "whsec-test"
OWNER_ID = "owner-001"
CUSTOMER_ID = "customer-001"


@pytest.fixture(scope="session")
def _storefront_domain(request):
    """Initialize the storefront domain once per session."""
    os.environ["PROTEAN_ENV"] = request.config.option.env

    from storefront.domain import storefront

    storefront.init()
    return storefront


@pytest.fixture(scope="session", autouse=True)
def setup_db(_storefront_domain):
    from storefront.utils.db import drop_db, setup_db

    setup_db(_storefront_domain)

    yield

    drop_db(_storefront_domain)


@pytest.fixture(autouse=True)
def run_around_tests(_storefront_domain):
    """Push domain context before each test, cleanup after."""
    ctx = _storefront_domain.domain_context()
    ctx.push()

    yield

    from protean import current_domain

    for _, provider in current_domain.providers.items():
        provider._data_reset()

    current_domain.event_store.store._data_reset()
    ctx.pop()


@pytest.fixture(autouse=True)
def settings():
    """Deterministic settings: test credentials, no webhook secret."""
    test_settings = Settings(
        environment="test",
        access_token="TEST-token",
        webhook_secret=None,
        base_url=TEST_BASE_URL,
        gateway="fake",
    )
    set_settings(test_settings)
    yield test_settings
    reset_settings()


@pytest.fixture()
def signed_settings(settings):
    """Settings with a webhook signing secret configured."""
    signed = Settings(
        environment=settings.environment,
        access_token=settings.access_token,
        webhook_secret=TEST_WEBHOOK_SECRET,
        base_url=settings.base_url,
        gateway=settings.gateway,
    )
    set_settings(signed)
    return signed


@pytest.fixture(autouse=True)
def gateway():
    fake = FakeGateway()
    set_gateway(fake)
    yield fake
    reset_gateway()


@pytest.fixture(autouse=True)
def email():
    fake = FakeEmailAdapter()
    set_email_channel(fake)
    yield fake
    reset_email_channel()


@pytest.fixture()
def owner():
    from protean import current_domain

    from storefront.account.profile import Profile, Role

    profile = Profile.create(user_id=OWNER_ID, role=Role.OWNER.value)
    current_domain.repository_for(Profile).add(profile)
    return profile


@pytest.fixture()
def customer():
    from protean import current_domain

    from storefront.account.profile import Profile

    profile = Profile.create(user_id=CUSTOMER_ID)
    current_domain.repository_for(Profile).add(profile)
    return profile
