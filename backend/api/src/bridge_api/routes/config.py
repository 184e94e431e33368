"""Frontend configuration endpoint.

Provides REST endpoints for:
- GET /config - Publishable key for Stripe.js initialization
"""

from fastapi import APIRouter, Depends

from bridge_api.dependencies import get_request_settings
from bridge_api.models.common import ErrorResponse
from bridge_api.models.config import PublicConfigResponse
from bridge_shared.config import Settings
from bridge_shared.models.errors import BridgeError, ErrorCode

router = APIRouter(tags=["config"])


@router.get(
    "/config",
    summary="Get the Stripe publishable key",
    response_model=PublicConfigResponse,
    responses={
        429: {"description": "Rate limit exceeded", "model": ErrorResponse},
        500: {"description": "Publishable key not configured", "model": ErrorResponse},
    },
)
async def get_config(
    settings: Settings = Depends(get_request_settings),
) -> PublicConfigResponse:
    # A missing key is a server fault here, not a client one
    if not settings.stripe_publishable_key:
        raise BridgeError(
            ErrorCode.CONFIGURATION_MISSING,
            message="Publishable key is not configured.",
        )
    return PublicConfigResponse(publishable_key=settings.stripe_publishable_key)
