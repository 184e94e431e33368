"""Pydantic models for the card setup bridge."""

from .errors import ERROR_MESSAGES, BridgeError, ErrorCode, ErrorResponse
from .webhook_event import (
    PaymentMethodObject,
    SetupIntentObject,
    WebhookEvent,
    WebhookEventType,
)

__all__ = [
    "ERROR_MESSAGES",
    "BridgeError",
    "ErrorCode",
    "ErrorResponse",
    "PaymentMethodObject",
    "SetupIntentObject",
    "WebhookEvent",
    "WebhookEventType",
]
