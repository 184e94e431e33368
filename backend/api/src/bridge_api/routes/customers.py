"""Customer endpoints.

Provides REST endpoints for:
- POST /create-customer - Create a Stripe customer

The request is made safe to retry with an idempotency key scoped to
"customer" (see bridge_shared.services.idempotency).
"""

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request

from bridge_api.dependencies import get_gateway, get_json_body, get_request_settings
from bridge_api.models.common import ErrorResponse, validate_body
from bridge_api.models.customers import CreateCustomerRequest, CustomerCreatedResponse
from bridge_shared.config import Settings
from bridge_shared.models.errors import BridgeError, ErrorCode
from bridge_shared.services.idempotency import IdempotencyScope, resolve_idempotency_key
from bridge_shared.services.stripe_gateway import GatewayError, PaymentGateway

logger = logging.getLogger(__name__)

router = APIRouter(tags=["customers"])


@router.post(
    "/create-customer",
    summary="Create a Stripe customer",
    response_model=CustomerCreatedResponse,
    responses={
        400: {"description": "Missing idempotency key or gateway failure", "model": ErrorResponse},
        403: {"description": "Origin not allowed", "model": ErrorResponse},
        413: {"description": "Request body too large", "model": ErrorResponse},
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
    },
)
async def create_customer(
    request: Request,
    body: dict[str, Any] = Depends(get_json_body),
    settings: Settings = Depends(get_request_settings),
    gateway: PaymentGateway = Depends(get_gateway),
) -> CustomerCreatedResponse:
    """Create a customer and return its ID.

    Send the same Idempotency-Key header when retrying; Stripe returns the
    original customer instead of creating a second one.
    """
    payload = validate_body(CreateCustomerRequest, body)
    idempotency_key = resolve_idempotency_key(
        request.headers,
        IdempotencyScope.CUSTOMER,
        body,
        strict=settings.is_strict,
    )

    try:
        customer_id = await gateway.create_customer(
            idempotency_key=idempotency_key,
            email=payload.email,
            name=payload.name,
        )
    except GatewayError as e:
        raise BridgeError(
            ErrorCode.GATEWAY_ERROR,
            message="Could not create customer.",
            detail=str(e),
        ) from e

    return CustomerCreatedResponse(customer_id=customer_id)
