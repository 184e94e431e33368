"""Stripe gateway for customers, setup intents and webhook verification.

Provides integration with Stripe using the v8+ StripeClient pattern. Remote
calls use the SDK's async methods over an HTTPX client so a slow Stripe call
only suspends the request that made it.
"""

import logging
from dataclasses import dataclass
from typing import Protocol

import stripe
from pydantic import ValidationError
from stripe import StripeClient

from bridge_shared.config import Settings
from bridge_shared.models.webhook_event import WebhookEvent
from bridge_shared.utils.logging import log_gateway_operation

logger = logging.getLogger(__name__)

SETUP_INTENT_PAYMENT_METHOD_TYPES = ["card"]
SETUP_INTENT_USAGE = "off_session"


class GatewayError(Exception):
    """Raised when a Stripe operation fails."""

    def __init__(self, message: str, stripe_error_code: str | None = None) -> None:
        """Initialize with message and optional Stripe error code.

        Args:
            message: Human-readable error message.
            stripe_error_code: Stripe-specific error code if available.
        """
        super().__init__(message)
        self.stripe_error_code = stripe_error_code


class WebhookVerificationError(GatewayError):
    """Raised when a webhook payload fails signature verification or parsing."""


@dataclass(frozen=True)
class SetupIntentResult:
    """The parts of a SetupIntent the frontend needs."""

    id: str
    client_secret: str


class PaymentGateway(Protocol):
    """Operations the bridge needs from the payment processor."""

    async def create_customer(
        self,
        *,
        idempotency_key: str,
        email: str | None = None,
        name: str | None = None,
    ) -> str: ...

    async def create_setup_intent(
        self,
        *,
        customer_id: str,
        idempotency_key: str,
    ) -> SetupIntentResult: ...

    def construct_webhook_event(
        self,
        payload: bytes,
        signature: str,
        webhook_secret: str,
    ) -> WebhookEvent: ...


class StripeGateway:
    """PaymentGateway backed by the Stripe API.

    Usage:
        gateway = StripeGateway(secret_key="sk_test_...")
        customer_id = await gateway.create_customer(
            idempotency_key="customer:test-key-0001",
        )
    """

    def __init__(
        self,
        secret_key: str,
        *,
        timeout_seconds: float = 30.0,
        max_network_retries: int = 2,
    ) -> None:
        self._secret_key = secret_key
        self._timeout_seconds = timeout_seconds
        self._max_network_retries = max_network_retries
        self._client: StripeClient | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "StripeGateway":
        return cls(
            settings.stripe_secret_key,
            timeout_seconds=settings.stripe_timeout_seconds,
            max_network_retries=settings.stripe_max_network_retries,
        )

    def _get_client(self) -> StripeClient:
        """Get or create the Stripe client (lazy initialization)."""
        if self._client is None:
            self._client = StripeClient(
                self._secret_key,
                max_network_retries=self._max_network_retries,
                http_client=stripe.HTTPXClient(timeout=self._timeout_seconds),
            )
            logger.info("Stripe client initialized")
        return self._client

    async def create_customer(
        self,
        *,
        idempotency_key: str,
        email: str | None = None,
        name: str | None = None,
    ) -> str:
        """Create a Stripe customer.

        Args:
            idempotency_key: Scoped key ("customer:...") forwarded to Stripe.
            email: Optional customer email.
            name: Optional customer name.

        Returns:
            The new customer ID (cus_xxx).

        Raises:
            GatewayError: If the Stripe call fails or times out.
        """
        client = self._get_client()

        params: dict = {}
        if email:
            params["email"] = email
        if name:
            params["name"] = name

        try:
            customer = await client.customers.create_async(
                params=params,
                options={"idempotency_key": idempotency_key},
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            log_gateway_operation(
                logger,
                "create_customer",
                idempotency_key=idempotency_key,
                error=str(e),
                stripe_error_code=error_code,
            )
            raise GatewayError(
                f"Failed to create customer: {e}",
                stripe_error_code=error_code,
            ) from e

        log_gateway_operation(
            logger,
            "create_customer",
            idempotency_key=idempotency_key,
            customer_id=customer.id,
        )
        return customer.id

    async def create_setup_intent(
        self,
        *,
        customer_id: str,
        idempotency_key: str,
    ) -> SetupIntentResult:
        """Create an off-session card SetupIntent for a customer.

        Args:
            customer_id: Stripe customer ID (cus_xxx).
            idempotency_key: Scoped key ("setup_intent:...") forwarded to Stripe.

        Returns:
            SetupIntentResult with the intent ID and client secret.

        Raises:
            GatewayError: If the Stripe call fails or times out.
        """
        client = self._get_client()

        try:
            setup_intent = await client.setup_intents.create_async(
                params={
                    "customer": customer_id,
                    "automatic_payment_methods": {"enabled": False},
                    "payment_method_types": SETUP_INTENT_PAYMENT_METHOD_TYPES,
                    "usage": SETUP_INTENT_USAGE,
                },
                options={"idempotency_key": idempotency_key},
            )
        except stripe.StripeError as e:
            error_code = getattr(e, "code", None)
            log_gateway_operation(
                logger,
                "create_setup_intent",
                idempotency_key=idempotency_key,
                customer_id=customer_id,
                error=str(e),
                stripe_error_code=error_code,
            )
            raise GatewayError(
                f"Failed to create SetupIntent: {e}",
                stripe_error_code=error_code,
            ) from e

        log_gateway_operation(
            logger,
            "create_setup_intent",
            idempotency_key=idempotency_key,
            customer_id=customer_id,
            setup_intent_id=setup_intent.id,
        )
        return SetupIntentResult(
            id=setup_intent.id,
            client_secret=setup_intent.client_secret or "",
        )

    def construct_webhook_event(
        self,
        payload: bytes,
        signature: str,
        webhook_secret: str,
    ) -> WebhookEvent:
        """Verify a webhook signature and parse the event.

        Args:
            payload: Raw request body bytes.
            signature: Stripe-Signature header value.
            webhook_secret: Endpoint signing secret (whsec_xxx).

        Returns:
            The verified, typed event.

        Raises:
            WebhookVerificationError: If the signature is invalid or the
                payload is not a Stripe event.
        """
        try:
            stripe.Webhook.construct_event(payload, signature, webhook_secret)
        except stripe.SignatureVerificationError as e:
            logger.warning("Invalid webhook signature: %s", str(e))
            raise WebhookVerificationError("Invalid webhook signature") from e
        except ValueError as e:
            logger.warning("Invalid webhook payload: %s", str(e))
            raise WebhookVerificationError("Invalid webhook payload") from e

        try:
            event = WebhookEvent.model_validate_json(payload)
        except ValidationError as e:
            logger.warning("Webhook payload is not a Stripe event: %s", e.error_count())
            raise WebhookVerificationError("Invalid webhook payload") from e

        logger.info("Webhook signature verified for event: %s", event.id)
        return event
