"""Root conftest — shared settings, storage and service fixtures.

Invariants:
    - Every test gets a fresh storage root under tmp_path
    - Payment gateway and notifier are in-memory fakes (tests/fakes.py); nothing
      leaves the process
    - Token time is a FakeClock the test can advance
"""

import os

import pytest

# Ensure tests don't accidentally use real API keys
os.environ.setdefault("PAYMENT_API_KEY", "sk_test_fake")
os.environ.setdefault("MAIL_API_KEY", "key-test-fake")

from storefront.config import Settings  # noqa: E402
from storefront.infrastructure.document_store import FileDocumentStore  # noqa: E402
from storefront.services.container import build_services  # noqa: E402

from tests.fakes import START_MS, FakeClock, FakeGateway, FakeNotifier  # noqa: E402


@pytest.fixture
def settings(tmp_path):
    return Settings(
        storage_root=str(tmp_path / "data"),
        hash_secret="test-secret",
        session_duration_seconds=3600,
        app_name="Pizzapp",
        app_url="https://pizzapp.test",
        support_url="https://pizzapp.test/support",
        log_format="text",
    )


@pytest.fixture
def store(settings):
    s = FileDocumentStore(settings.storage_root)
    s.ensure_collections()
    return s


@pytest.fixture
def clock():
    return FakeClock(START_MS)


@pytest.fixture
def gateway():
    return FakeGateway()


@pytest.fixture
def notifier():
    return FakeNotifier()


@pytest.fixture
def services(settings, store, gateway, notifier, clock):
    return build_services(
        settings, store=store, gateway=gateway, notifier=notifier, token_clock=clock,
    )


@pytest.fixture
async def user(services):
    """A registered user (public view)."""
    return await services.users.register(
        first_name="Ada",
        last_name="Lovelace",
        email="ada@example.com",
        password="s3cret",
        address="12 St James's Square",
    )


@pytest.fixture
async def session(services, user):
    """Session for the registered user."""
    token = await services.tokens.login("ada@example.com", "s3cret")
    return await services.tokens.validate(token["id"])


@pytest.fixture
async def pizza(services):
    return await services.products.create(title="Margherita", price=1250)


@pytest.fixture
async def soda(services):
    return await services.products.create(title="Soda", price=300)
