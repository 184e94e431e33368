"""Webhook endpoints for Stripe event delivery.

Provides endpoints for:
- Stripe webhook events (setup_intent.succeeded, setup_intent.setup_failed,
  payment_method.attached)

This endpoint does NOT go through the origin guard or rate limiting; it
receives signed server-to-server payloads. The raw body is read unparsed so
the signature can be checked against the exact bytes Stripe signed.
"""

from fastapi import APIRouter, Depends, Request
from pydantic import ValidationError

from bridge_api.dependencies import (
    get_gateway,
    get_request_settings,
    get_webhook_body,
    get_webhook_handler,
)
from bridge_api.models.webhooks import WebhookAck
from bridge_shared.config import Settings
from bridge_shared.models.errors import BridgeError, ErrorCode
from bridge_shared.models.webhook_event import WebhookEvent
from bridge_shared.services.stripe_gateway import PaymentGateway, WebhookVerificationError
from bridge_shared.services.webhook_handler import WebhookHandler
from bridge_shared.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["webhooks"])

WEBHOOK_PATH = "/webhook"
SIGNATURE_HEADER = "Stripe-Signature"


def _parse_unverified(payload: bytes) -> WebhookEvent:
    """Parse a payload without authenticity checks (no secret configured)."""
    try:
        return WebhookEvent.model_validate_json(payload)
    except ValidationError as e:
        logger.warning("Unsigned webhook payload could not be parsed")
        raise BridgeError(ErrorCode.INVALID_WEBHOOK_PAYLOAD, detail=str(e)) from e


@router.post(
    WEBHOOK_PATH,
    summary="Receive Stripe webhook events",
    description="""
Endpoint for Stripe webhook events. Handles:
- setup_intent.succeeded
- setup_intent.setup_failed
- payment_method.attached

Other event types are acknowledged and ignored.

**No authentication required** - the Stripe-Signature header is verified with
the webhook signing secret when one is configured.
""",
    response_model=WebhookAck,
    responses={
        200: {"description": "Event received", "model": WebhookAck},
        400: {
            "description": "Invalid signature or payload (plain text)",
            "content": {"text/plain": {}},
        },
        413: {"description": "Payload over the webhook size limit"},
    },
)
async def receive_stripe_webhook(
    request: Request,
    payload: bytes = Depends(get_webhook_body),
    settings: Settings = Depends(get_request_settings),
    gateway: PaymentGateway = Depends(get_gateway),
    handler: WebhookHandler = Depends(get_webhook_handler),
) -> WebhookAck:
    """Verify, dispatch and acknowledge a webhook delivery."""
    webhook_secret = settings.stripe_webhook_secret

    if webhook_secret:
        signature = request.headers.get(SIGNATURE_HEADER)
        if not signature:
            logger.warning("Webhook request missing %s header", SIGNATURE_HEADER)
            raise BridgeError(ErrorCode.SIGNATURE_INVALID)
        try:
            event = gateway.construct_webhook_event(payload, signature, webhook_secret)
        except WebhookVerificationError as e:
            logger.warning("Webhook signature verification failed: %s", e)
            raise BridgeError(ErrorCode.SIGNATURE_INVALID, detail=str(e)) from e
    else:
        event = _parse_unverified(payload)

    # Dispatch failures are logged by the handler; the delivery is still
    # acknowledged so Stripe does not redeliver it forever.
    handler.dispatch(event)

    return WebhookAck(received=True)
