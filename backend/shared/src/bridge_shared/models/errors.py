"""Standard error codes for the card setup bridge.

Every failure a client can observe is expressed as a BridgeError carrying one
of these codes. The HTTP layer maps codes to status codes in one place.
"""

from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict


class ErrorCode(str, Enum):
    """Machine-readable error codes returned in error bodies."""

    ORIGIN_REJECTED = "ERR_ORIGIN_REJECTED"
    MISSING_IDEMPOTENCY_KEY = "ERR_MISSING_IDEMPOTENCY_KEY"
    MISSING_FIELD = "ERR_MISSING_FIELD"
    INVALID_REQUEST = "ERR_INVALID_REQUEST"
    PAYLOAD_TOO_LARGE = "ERR_PAYLOAD_TOO_LARGE"
    RATE_LIMITED = "ERR_RATE_LIMITED"

    # Stripe
    GATEWAY_ERROR = "ERR_GATEWAY"
    SIGNATURE_INVALID = "ERR_SIGNATURE_INVALID"
    INVALID_WEBHOOK_PAYLOAD = "ERR_INVALID_WEBHOOK_PAYLOAD"

    # Server configuration
    CONFIGURATION_MISSING = "ERR_CONFIGURATION_MISSING"


# Default human-readable messages
ERROR_MESSAGES: dict[ErrorCode, str] = {
    ErrorCode.ORIGIN_REJECTED: "Origin not allowed.",
    ErrorCode.MISSING_IDEMPOTENCY_KEY: "Missing Idempotency-Key header.",
    ErrorCode.MISSING_FIELD: "Missing required field.",
    ErrorCode.INVALID_REQUEST: "Invalid request body.",
    ErrorCode.PAYLOAD_TOO_LARGE: "Request body too large.",
    ErrorCode.RATE_LIMITED: "Too many requests. Try again later.",
    ErrorCode.GATEWAY_ERROR: "Payment gateway request failed.",
    ErrorCode.SIGNATURE_INVALID: "Webhook signature verification failed.",
    ErrorCode.INVALID_WEBHOOK_PAYLOAD: "Webhook signature verification failed.",
    ErrorCode.CONFIGURATION_MISSING: "Server configuration is incomplete.",
}


class ErrorResponse(BaseModel):
    """Error body returned by every JSON endpoint.

    ``detail`` is only populated outside strict mode.
    """

    model_config = ConfigDict(strict=True)

    error: str
    code: ErrorCode
    detail: Optional[str] = None


class BridgeError(Exception):
    """Exception raised for any client-visible failure.

    Args:
        code: The error code.
        message: Overrides the default message for the code.
        detail: Internal detail (e.g. a Stripe error message). Only exposed
            to clients outside strict mode.
    """

    def __init__(
        self,
        code: ErrorCode,
        message: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.code = code
        self.message = message or ERROR_MESSAGES[code]
        self.detail = detail
        super().__init__(self.message)

    def to_response(self, *, expose_detail: bool = False) -> ErrorResponse:
        """Convert to the wire error body."""
        return ErrorResponse(
            error=self.message,
            code=self.code,
            detail=self.detail if expose_detail else None,
        )
