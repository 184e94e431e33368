"""Webhook handler for dispatching verified Stripe events.

Provides the dispatch logic separate from HTTP routing concerns. This enables:
- Unit testing without HTTP overhead
- Registering extra per-kind handlers without touching the route

Handlers never call back into Stripe; a delivery may arrive out of order or be
redelivered, and the bridge keeps no state to reconcile either.
"""

import logging
from collections.abc import Callable
from enum import Enum
from typing import cast

from bridge_shared.models.webhook_event import (
    PaymentMethodObject,
    SetupIntentObject,
    WebhookEvent,
    WebhookEventType,
)
from bridge_shared.utils.logging import log_webhook_event

logger = logging.getLogger(__name__)

EventHandler = Callable[[WebhookEvent], None]


class DispatchResult(str, Enum):
    HANDLED = "handled"
    SKIPPED = "skipped"
    ERROR = "error"


def _on_setup_intent_succeeded(event: WebhookEvent) -> None:
    setup_intent = cast(SetupIntentObject, event.payload)
    log_webhook_event(
        logger,
        event.type,
        event.id,
        object_id=setup_intent.id,
        customer_id=setup_intent.customer,
        result="succeeded",
    )


def _on_setup_intent_setup_failed(event: WebhookEvent) -> None:
    setup_intent = cast(SetupIntentObject, event.payload)
    failure = (setup_intent.last_setup_error or {}).get("code")
    log_webhook_event(
        logger,
        event.type,
        event.id,
        object_id=setup_intent.id,
        customer_id=setup_intent.customer,
        result="setup_failed",
        failure_code=failure,
    )


def _on_payment_method_attached(event: WebhookEvent) -> None:
    payment_method = cast(PaymentMethodObject, event.payload)
    log_webhook_event(
        logger,
        event.type,
        event.id,
        object_id=payment_method.id,
        customer_id=payment_method.customer,
        result="attached",
    )


DEFAULT_HANDLERS: dict[WebhookEventType, EventHandler] = {
    WebhookEventType.SETUP_INTENT_SUCCEEDED: _on_setup_intent_succeeded,
    WebhookEventType.SETUP_INTENT_SETUP_FAILED: _on_setup_intent_setup_failed,
    WebhookEventType.PAYMENT_METHOD_ATTACHED: _on_payment_method_attached,
}


class WebhookHandler:
    """Dispatches verified webhook events to per-kind handlers.

    Each recognized kind runs its default logging handler followed by any
    handlers registered for it. Unknown kinds are acknowledged and skipped.
    A failing handler is logged and reported as ERROR; it neither stops the
    remaining handlers nor the delivery from being acknowledged.
    """

    def __init__(self) -> None:
        self._handlers: dict[WebhookEventType, list[EventHandler]] = {
            kind: [handler] for kind, handler in DEFAULT_HANDLERS.items()
        }

    def register(self, kind: WebhookEventType, handler: EventHandler) -> None:
        """Add an extension handler for an event kind.

        Args:
            kind: A recognized event kind (not UNKNOWN)
            handler: Callable receiving the verified event
        """
        if kind == WebhookEventType.UNKNOWN:
            raise ValueError("Handlers cannot be registered for unknown event kinds")
        self._handlers.setdefault(kind, []).append(handler)

    def dispatch(self, event: WebhookEvent) -> DispatchResult:
        """Run the handlers for an event.

        Args:
            event: Verified webhook event

        Returns:
            HANDLED, SKIPPED for unknown kinds, or ERROR if a handler raised
        """
        kind = event.kind
        log_webhook_event(logger, event.type, event.id, result="received")

        handlers = self._handlers.get(kind)
        if not handlers:
            log_webhook_event(logger, event.type, event.id, result="skipped")
            return DispatchResult.SKIPPED

        # Every handler runs even if an earlier one failed
        failed = False
        for handler in handlers:
            try:
                handler(event)
            except Exception as e:
                failed = True
                logger.exception(
                    "Webhook handler %s failed for event %s (%s)",
                    getattr(handler, "__name__", repr(handler)),
                    event.id,
                    event.type,
                )
                log_webhook_event(
                    logger, event.type, event.id, result="error", error=str(e)
                )

        return DispatchResult.ERROR if failed else DispatchResult.HANDLED
