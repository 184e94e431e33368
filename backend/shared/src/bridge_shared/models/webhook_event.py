"""Typed Stripe webhook events.

A delivery is parsed into WebhookEvent; ``kind`` resolves the raw ``type``
string to WebhookEventType, falling back to UNKNOWN for anything this service
does not handle so newer Stripe event types never fail parsing.
"""

from enum import Enum
from typing import Any, Union

from pydantic import BaseModel, ConfigDict, Field


class WebhookEventType(str, Enum):
    """Event kinds with dedicated handling."""

    SETUP_INTENT_SUCCEEDED = "setup_intent.succeeded"
    SETUP_INTENT_SETUP_FAILED = "setup_intent.setup_failed"
    PAYMENT_METHOD_ATTACHED = "payment_method.attached"
    UNKNOWN = "unknown"

    @classmethod
    def _missing_(cls, value: object) -> "WebhookEventType":
        return cls.UNKNOWN


class SetupIntentObject(BaseModel):
    """The ``data.object`` of setup_intent.* events."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., examples=["seti_1ABC123"])
    customer: str | None = None
    status: str | None = None
    payment_method: str | dict[str, Any] | None = None
    usage: str | None = None
    last_setup_error: dict[str, Any] | None = None


class PaymentMethodObject(BaseModel):
    """The ``data.object`` of payment_method.* events."""

    model_config = ConfigDict(extra="allow")

    id: str = Field(..., examples=["pm_1ABC123"])
    type: str | None = None
    customer: str | None = None


EventPayload = Union[SetupIntentObject, PaymentMethodObject, dict[str, Any]]

PAYLOAD_MODELS: dict[WebhookEventType, type[BaseModel]] = {
    WebhookEventType.SETUP_INTENT_SUCCEEDED: SetupIntentObject,
    WebhookEventType.SETUP_INTENT_SETUP_FAILED: SetupIntentObject,
    WebhookEventType.PAYMENT_METHOD_ATTACHED: PaymentMethodObject,
}


class WebhookEventData(BaseModel):
    model_config = ConfigDict(extra="allow")

    object: dict[str, Any] = Field(default_factory=dict)
    previous_attributes: dict[str, Any] | None = None


class WebhookEvent(BaseModel):
    """A single webhook delivery.

    Lifecycle: built once per inbound request, verified, dispatched and
    discarded. Never persisted.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = Field(default=None, examples=["evt_1ABC123DEF456"])
    type: str = Field(..., examples=["setup_intent.succeeded"])
    created: int | None = None
    livemode: bool | None = None
    data: WebhookEventData = Field(default_factory=WebhookEventData)

    @property
    def kind(self) -> WebhookEventType:
        return WebhookEventType(self.type)

    @property
    def payload(self) -> EventPayload:
        """Kind-specific typed ``data.object``; the raw dict for unknown kinds.

        Raises:
            pydantic.ValidationError: If the object does not fit the kind.
        """
        model = PAYLOAD_MODELS.get(self.kind)
        if model is None:
            return self.data.object
        return model.model_validate(self.data.object)  # type: ignore[return-value]
