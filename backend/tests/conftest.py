"""Pytest configuration and fixtures for card setup bridge tests.

This module provides reusable fixtures for testing:
- Settings factories (development and strict profiles)
- A fake Stripe gateway that records calls instead of hitting the network
- TestClient factories wired to the fake gateway
- Stripe-compatible webhook signing
"""

import hashlib
import hmac
import time
from typing import Any, Callable, Generator

import pytest
from fastapi.testclient import TestClient

from bridge_api.main import create_app
from bridge_shared.config import Settings, get_settings
from bridge_shared.services.stripe_gateway import (
    GatewayError,
    SetupIntentResult,
    StripeGateway,
)
from bridge_shared.services.webhook_handler import WebhookHandler

# === Test Configuration ===

TEST_SECRET_KEY = "sk_test_abc123xyz"
TEST_PUBLISHABLE_KEY = "pk_test_abc123xyz"
TEST_WEBHOOK_SECRET = "whsec_test_secret_for_testing"
TEST_ALLOWED_ORIGIN = "https://shop.example.com"
TEST_CUSTOMER_ID = "cus_test_Q1ABC123"
TEST_SETUP_INTENT_ID = "seti_test_1ABC123"
TEST_CLIENT_SECRET = "seti_test_1ABC123_secret_XYZ"


# === Fake Gateway ===


class FakeGateway(StripeGateway):
    """StripeGateway with the remote calls replaced by recorders.

    Webhook verification is inherited unchanged, so signatures are checked
    with the real Stripe SDK.
    """

    def __init__(self) -> None:
        super().__init__(TEST_SECRET_KEY)
        self.customer_calls: list[dict[str, Any]] = []
        self.setup_intent_calls: list[dict[str, Any]] = []
        self.error: GatewayError | None = None

    async def create_customer(
        self,
        *,
        idempotency_key: str,
        email: str | None = None,
        name: str | None = None,
    ) -> str:
        self.customer_calls.append(
            {"idempotency_key": idempotency_key, "email": email, "name": name}
        )
        if self.error is not None:
            raise self.error
        return TEST_CUSTOMER_ID

    async def create_setup_intent(
        self,
        *,
        customer_id: str,
        idempotency_key: str,
    ) -> SetupIntentResult:
        self.setup_intent_calls.append(
            {"customer_id": customer_id, "idempotency_key": idempotency_key}
        )
        if self.error is not None:
            raise self.error
        return SetupIntentResult(id=TEST_SETUP_INTENT_ID, client_secret=TEST_CLIENT_SECRET)


# === Helper Functions ===


def sign_stripe_payload(payload: bytes, secret: str = TEST_WEBHOOK_SECRET) -> str:
    """Create a valid Stripe webhook signature.

    Stripe signatures use HMAC-SHA256 with format: t={timestamp},v1={signature}
    """
    timestamp = str(int(time.time()))
    signed_payload = f"{timestamp}.{payload.decode('utf-8')}"
    signature = hmac.new(
        secret.encode("utf-8"),
        signed_payload.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()
    return f"t={timestamp},v1={signature}"


# === State Reset ===


@pytest.fixture(autouse=True)
def reset_shared_state() -> Generator[None, None, None]:
    """Clear the cached Settings between tests."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


# === Settings Fixtures ===


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    """Factory for Settings that ignores any local .env file.

    Defaults to the development profile with every Stripe key configured and
    one allowed origin. Pass keyword overrides to change individual fields.
    """

    def _make(**overrides: Any) -> Settings:
        values: dict[str, Any] = {
            "environment": "development",
            "stripe_secret_key": TEST_SECRET_KEY,
            "stripe_publishable_key": TEST_PUBLISHABLE_KEY,
            "stripe_webhook_secret": TEST_WEBHOOK_SECRET,
            "allowed_origins": [TEST_ALLOWED_ORIGIN],
        }
        values.update(overrides)
        return Settings(_env_file=None, **values)

    return _make


@pytest.fixture
def settings(make_settings: Callable[..., Settings]) -> Settings:
    return make_settings()


@pytest.fixture
def strict_settings(make_settings: Callable[..., Settings]) -> Settings:
    return make_settings(environment="production")


# === App Fixtures ===


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def make_client(
    make_settings: Callable[..., Settings],
    fake_gateway: FakeGateway,
) -> Callable[..., TestClient]:
    """Factory for a TestClient around a freshly built app.

    Keyword arguments are Settings overrides, except ``webhook_handler``
    which replaces the app's WebhookHandler.
    """

    def _make(
        webhook_handler: WebhookHandler | None = None,
        **overrides: Any,
    ) -> TestClient:
        app = create_app(
            make_settings(**overrides),
            gateway=fake_gateway,
            webhook_handler=webhook_handler,
        )
        return TestClient(app)

    return _make


@pytest.fixture
def client(make_client: Callable[..., TestClient]) -> TestClient:
    """Client for the development profile."""
    return make_client()


@pytest.fixture
def strict_client(make_client: Callable[..., TestClient]) -> TestClient:
    """Client for the strict (production) profile."""
    return make_client(environment="production")


@pytest.fixture
def sign_payload() -> Callable[..., str]:
    """The Stripe signing helper, for tests outside this module."""
    return sign_stripe_payload
