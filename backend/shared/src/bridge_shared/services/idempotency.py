"""Idempotency key derivation for mutating Stripe calls.

A key is scoped by operation ("customer:<token>", "setup_intent:<token>") and
passed to Stripe as the request's idempotency key, so a retried client request
produces at most one remote side effect.

The token comes from the caller's Idempotency-Key (or X-Idempotency-Key)
header. Outside strict mode, a request without a usable header gets a token
derived from a SHA-256 of the scope and the canonical JSON body, so identical
retries still map to the same key.
"""

import hashlib
import json
import re
from collections.abc import Mapping
from enum import Enum
from typing import Any

from bridge_shared.models.errors import BridgeError, ErrorCode

IDEMPOTENCY_HEADERS: tuple[str, ...] = ("Idempotency-Key", "X-Idempotency-Key")
IDEMPOTENCY_KEY_PATTERN = re.compile(r"[A-Za-z0-9:._-]{8,255}")


class IdempotencyScope(str, Enum):
    """Operation kinds that take an idempotency key."""

    CUSTOMER = "customer"
    SETUP_INTENT = "setup_intent"


def is_valid_idempotency_token(value: str | None) -> bool:
    """Check a caller-supplied token against the allowed alphabet and length."""
    return bool(value) and IDEMPOTENCY_KEY_PATTERN.fullmatch(value) is not None  # type: ignore[arg-type]


def _provided_token(headers: Mapping[str, str]) -> str | None:
    # First non-empty header wins, even if it turns out to be invalid
    for name in IDEMPOTENCY_HEADERS:
        value = headers.get(name)
        if value:
            return value
    return None


def canonical_json(body: Any) -> str:
    """Serialize a request body deterministically (sorted keys, compact)."""
    return json.dumps(body, sort_keys=True, separators=(",", ":"), ensure_ascii=False)


def derive_fallback_token(scope: IdempotencyScope | str, body: Any) -> str:
    """Hash the scope and body into a hex token.

    Args:
        scope: Operation scope prefix
        body: Parsed JSON request body (None is treated as {})

    Returns:
        Hex-encoded SHA-256 digest
    """
    prefix = IdempotencyScope(scope).value
    material = f"{prefix}:{canonical_json(body or {})}"
    return hashlib.sha256(material.encode("utf-8")).hexdigest()


def resolve_idempotency_key(
    headers: Mapping[str, str],
    scope: IdempotencyScope | str,
    body: Any = None,
    *,
    strict: bool,
) -> str:
    """Resolve the scoped idempotency key for a mutating request.

    Args:
        headers: Request headers (case-insensitive mapping for HTTP requests)
        scope: Operation scope prefix
        body: Parsed JSON request body, used for the fallback hash
        strict: Whether strict mode is active

    Returns:
        "<scope>:<token>"

    Raises:
        BridgeError: MISSING_IDEMPOTENCY_KEY if no valid header is present in
            strict mode.
    """
    prefix = IdempotencyScope(scope).value
    token = _provided_token(headers)

    if token is not None and is_valid_idempotency_token(token):
        return f"{prefix}:{token}"

    if strict:
        raise BridgeError(ErrorCode.MISSING_IDEMPOTENCY_KEY)

    return f"{prefix}:{derive_fallback_token(prefix, body)}"
