"""Backend services for the card setup bridge."""

from .idempotency import IdempotencyScope, resolve_idempotency_key
from .stripe_gateway import (
    GatewayError,
    PaymentGateway,
    SetupIntentResult,
    StripeGateway,
    WebhookVerificationError,
)
from .webhook_handler import DispatchResult, WebhookHandler

__all__ = [
    "IdempotencyScope",
    "resolve_idempotency_key",
    "GatewayError",
    "PaymentGateway",
    "SetupIntentResult",
    "StripeGateway",
    "WebhookVerificationError",
    "DispatchResult",
    "WebhookHandler",
]
