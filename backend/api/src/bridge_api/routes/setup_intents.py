"""SetupIntent endpoints.

Provides REST endpoints for:
- POST /create-setup-intent - Start saving a card for off-session use
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from bridge_api.dependencies import get_gateway, get_json_body, get_request_settings
from bridge_api.models.common import ErrorResponse, validate_body
from bridge_api.models.setup_intents import (
    CreateSetupIntentRequest,
    SetupIntentCreatedResponse,
)
from bridge_shared.config import Settings
from bridge_shared.models.errors import BridgeError, ErrorCode
from bridge_shared.services.idempotency import IdempotencyScope, resolve_idempotency_key
from bridge_shared.services.stripe_gateway import GatewayError, PaymentGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["setup-intents"])


@router.post(
    "/create-setup-intent",
    summary="Create a card SetupIntent for a customer",
    response_model=SetupIntentCreatedResponse,
    responses={
        400: {
            "description": "Missing customerId, missing idempotency key or gateway failure",
            "model": ErrorResponse,
        },
        403: {"description": "Origin not allowed", "model": ErrorResponse},
        413: {"description": "Request body too large", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
    },
)
async def create_setup_intent(
    request: Request,
    body: dict[str, Any] = Depends(get_json_body),
    settings: Settings = Depends(get_request_settings),
    gateway: PaymentGateway = Depends(get_gateway),
) -> SetupIntentCreatedResponse:
    """Create an off-session card SetupIntent.

    The customer must come from /create-customer. The returned client secret
    is used by Stripe.js on the frontend to collect and confirm the card.
    """
    payload = validate_body(CreateSetupIntentRequest, body)
    customer_id = (payload.customer_id or "").strip()
    if not customer_id:
        raise BridgeError(ErrorCode.MISSING_FIELD, message="Missing customerId.")

    idempotency_key = resolve_idempotency_key(
        request.headers,
        IdempotencyScope.SETUP_INTENT,
        body,
        strict=settings.is_strict,
    )

    try:
        setup_intent = await gateway.create_setup_intent(
            customer_id=customer_id,
            idempotency_key=idempotency_key,
        )
    except GatewayError as e:
        raise BridgeError(
            ErrorCode.GATEWAY_ERROR,
            message="Could not create SetupIntent.",
            detail=str(e),
        ) from e

    return SetupIntentCreatedResponse(
        client_secret=setup_intent.client_secret,
        setup_intent_id=setup_intent.id,
    )
