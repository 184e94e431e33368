"""FastAPI exception handlers for converting BridgeError to HTTP responses.

This module is the single place where error codes become HTTP responses.
Route handlers raise BridgeError; middleware that rejects a request before
routing (origin guard, rate limiter) calls ``error_response`` directly.

The ErrorCode-to-HTTP status mapping follows REST conventions:
- 400 Bad Request: Client input problems and gateway failures
- 403 Forbidden: Origin not on the allow-list
- 413 Payload Too Large: Body over the configured limit
- 429 Too Many Requests: Rate limiting
- 500 Internal Server Error: Server-side configuration faults

Usage:
    from bridge_api.exceptions import register_exception_handlers
    register_exception_handlers(app)
"""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_403_FORBIDDEN,
    HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    HTTP_429_TOO_MANY_REQUESTS,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from bridge_shared.models.errors import BridgeError, ErrorCode

logger = logging.getLogger(__name__)

ERROR_CODE_TO_HTTP_STATUS: dict[ErrorCode, int] = {
    ErrorCode.ORIGIN_REJECTED: HTTP_403_FORBIDDEN,
    ErrorCode.MISSING_IDEMPOTENCY_KEY: HTTP_400_BAD_REQUEST,
    ErrorCode.MISSING_FIELD: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_REQUEST: HTTP_400_BAD_REQUEST,
    ErrorCode.PAYLOAD_TOO_LARGE: HTTP_413_REQUEST_ENTITY_TOO_LARGE,
    ErrorCode.RATE_LIMITED: HTTP_429_TOO_MANY_REQUESTS,
    ErrorCode.GATEWAY_ERROR: HTTP_400_BAD_REQUEST,
    ErrorCode.SIGNATURE_INVALID: HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WEBHOOK_PAYLOAD: HTTP_400_BAD_REQUEST,
    ErrorCode.CONFIGURATION_MISSING: HTTP_500_INTERNAL_SERVER_ERROR,
}

# Webhook senders get a plain-text body, not JSON
PLAIN_TEXT_CODES = {ErrorCode.SIGNATURE_INVALID, ErrorCode.INVALID_WEBHOOK_PAYLOAD}


def get_http_status_for_error(code: ErrorCode) -> int:
    """Get HTTP status code for an ErrorCode, defaulting to 400."""
    return ERROR_CODE_TO_HTTP_STATUS.get(code, HTTP_400_BAD_REQUEST)


def error_response(exc: BridgeError, *, strict: bool) -> Response:
    """Build the HTTP response for a BridgeError.

    Args:
        exc: The error to translate
        strict: Whether strict mode is active; internal detail is withheld
            when True

    Returns:
        JSONResponse with an ErrorResponse body, or a plain-text response for
        webhook verification failures.
    """
    status_code = get_http_status_for_error(exc.code)

    if exc.code in PLAIN_TEXT_CODES:
        return PlainTextResponse(exc.message, status_code=status_code)

    body = exc.to_response(expose_detail=not strict)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json", exclude_none=True),
    )


def _is_strict(request: Request) -> bool:
    settings = getattr(request.app.state, "settings", None)
    return True if settings is None else settings.is_strict


async def bridge_error_handler(request: Request, exc: BridgeError) -> Response:
    """Handle BridgeError exceptions raised by route handlers."""
    if exc.detail:
        logger.warning("%s on %s: %s", exc.code.value, request.url.path, exc.detail)
    return error_response(exc, strict=_is_strict(request))


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions with a generic error response.

    The actual error is logged; clients never see internal details.
    """
    logger.exception("Unhandled exception: %s", exc)

    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "An unexpected error occurred", "code": "ERR_INTERNAL"},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register all exception handlers with the FastAPI app.

    Args:
        app: The FastAPI application instance.
    """
    app.add_exception_handler(BridgeError, bridge_error_handler)  # type: ignore[arg-type]
    app.add_exception_handler(Exception, generic_exception_handler)
