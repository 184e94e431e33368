"""FastAPI dependency providers.

The app factory stores the Settings, the payment gateway and the webhook
handler on ``app.state``; these providers hand them to routes. Nothing here
reads the environment, so tests build an app with their own instances:

    app = create_app(settings, gateway=FakeGateway())

Usage in routes:
    from bridge_api.dependencies import get_gateway

    @router.post("/create-customer")
    async def create_customer(
        gateway: PaymentGateway = Depends(get_gateway),
    ):
        ...
"""

import json
from typing import Any

from fastapi import Depends, Request

from bridge_shared.config import Settings
from bridge_shared.models.errors import BridgeError, ErrorCode
from bridge_shared.services.stripe_gateway import PaymentGateway
from bridge_shared.services.webhook_handler import WebhookHandler


def get_request_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_gateway(request: Request) -> PaymentGateway:
    return request.app.state.gateway


def get_webhook_handler(request: Request) -> WebhookHandler:
    return request.app.state.webhook_handler


async def read_limited_body(request: Request, max_bytes: int) -> bytes:
    """Read the raw body, refusing anything over ``max_bytes``.

    A declared Content-Length over the limit is refused before reading; a
    chunked body is read until it crosses the limit and no further.

    Raises:
        BridgeError: PAYLOAD_TOO_LARGE
    """
    declared_length = request.headers.get("content-length")
    if declared_length and declared_length.isdigit():
        if int(declared_length) > max_bytes:
            raise BridgeError(ErrorCode.PAYLOAD_TOO_LARGE)

    buffer = bytearray()
    async for chunk in request.stream():
        buffer.extend(chunk)
        if len(buffer) > max_bytes:
            raise BridgeError(ErrorCode.PAYLOAD_TOO_LARGE)
    return bytes(buffer)


async def get_webhook_body(
    request: Request,
    settings: Settings = Depends(get_request_settings),
) -> bytes:
    """Raw webhook body, unparsed so the signature can be checked."""
    return await read_limited_body(request, settings.webhook_max_body_bytes)


async def get_json_body(
    request: Request,
    settings: Settings = Depends(get_request_settings),
) -> dict[str, Any]:
    """Read and parse an optional JSON object body.

    An empty body (or a literal ``null``) is treated as ``{}``.

    Raises:
        BridgeError: PAYLOAD_TOO_LARGE over ``max_body_bytes``;
            INVALID_REQUEST for malformed JSON or a non-object body.
    """
    raw = await read_limited_body(request, settings.max_body_bytes)
    if not raw.strip():
        return {}

    try:
        body = json.loads(raw)
    except ValueError as e:
        raise BridgeError(ErrorCode.INVALID_REQUEST, detail=str(e)) from e

    if body is None:
        return {}
    if not isinstance(body, dict):
        raise BridgeError(
            ErrorCode.INVALID_REQUEST,
            message="Request body must be a JSON object.",
        )
    return body
