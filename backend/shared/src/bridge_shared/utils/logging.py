"""Structured logging with per-request correlation IDs.

Every log line is prefixed with the correlation ID of the request that
produced it, so a single checkout attempt can be followed across the
customer, SetupIntent and webhook calls it triggers. Structured helpers
render their context as ``key=value`` pairs and also attach it to the record
as ``record.context`` for handlers that ship logs elsewhere.

Usage:
    from bridge_shared.utils.logging import get_logger, log_gateway_operation

    logger = get_logger(__name__)
    log_gateway_operation(logger, "create_customer", idempotency_key=key)
"""

import logging
import re
import uuid
from contextvars import ContextVar
from typing import Any

_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
NO_CORRELATION_ID = "no-correlation-id"

# Caller-supplied IDs end up in every log line; anything else is replaced
CORRELATION_ID_PATTERN = re.compile(r"[A-Za-z0-9._:-]{1,128}")


def generate_correlation_id() -> str:
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Bind a correlation ID to the current context.

    Args:
        correlation_id: Incoming ID (e.g. from X-Correlation-ID). A new one
            is generated when it is missing or not log-safe.

    Returns:
        The correlation ID now in effect
    """
    if correlation_id and CORRELATION_ID_PATTERN.fullmatch(correlation_id):
        cid = correlation_id
    else:
        cid = generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    return _correlation_id.get()


def clear_correlation_id() -> None:
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Stamps ``correlation_id`` onto every record passing through."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or NO_CORRELATION_ID
        return True


class StructuredFormatter(logging.Formatter):
    """Prefixes the formatted line with ``[correlation-id]``."""

    def format(self, record: logging.LogRecord) -> str:
        cid = getattr(record, "correlation_id", None) or get_correlation_id() or NO_CORRELATION_ID
        record.correlation_id = cid
        return f"[{cid}] {super().format(record)}"


def configure_logging(level: str = "INFO") -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; the handler is only added the first time.

    Args:
        level: Log level name (e.g. "INFO", "DEBUG")
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    if any(isinstance(h.formatter, StructuredFormatter) for h in root.handlers):
        return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)


def get_logger(name: str) -> logging.Logger:
    """Get a logger that always carries the correlation ID filter."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())
    return logger


def _log_structured(
    logger: logging.Logger,
    level: int,
    headline: str,
    context: dict[str, Any],
) -> None:
    fields = {key: value for key, value in context.items() if value is not None}
    parts = [headline, *(f"{key}={value}" for key, value in fields.items())]
    logger.log(level, " | ".join(parts), extra={"context": fields})


def log_gateway_operation(
    logger: logging.Logger,
    operation: str,
    *,
    idempotency_key: str | None = None,
    customer_id: str | None = None,
    setup_intent_id: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a Stripe gateway call.

    Logged at ERROR when ``error`` is set, INFO otherwise.

    Args:
        logger: Logger instance
        operation: Gateway method name ("create_customer", "create_setup_intent")
        idempotency_key: Scoped key sent to Stripe
        customer_id: Customer the call created or targeted
        setup_intent_id: SetupIntent the call created
        error: Failure message
        **extra: Additional context fields
    """
    _log_structured(
        logger,
        logging.ERROR if error else logging.INFO,
        f"Gateway operation: {operation}",
        {
            "idempotency_key": idempotency_key,
            "customer_id": customer_id,
            "setup_intent_id": setup_intent_id,
            "error": error,
            **extra,
        },
    )


WEBHOOK_RESULT_LEVELS = {
    "error": logging.ERROR,
    "skipped": logging.WARNING,
}


def log_webhook_event(
    logger: logging.Logger,
    event_type: str,
    event_id: str | None,
    *,
    object_id: str | None = None,
    customer_id: str | None = None,
    result: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a webhook delivery step.

    The level follows ``result``: ERROR for "error", WARNING for "skipped",
    INFO for anything else (received, succeeded, attached, ...).

    Args:
        logger: Logger instance
        event_type: Raw Stripe event type
        event_id: Stripe event ID (absent for unsigned development payloads)
        object_id: ID of the event's data object (seti_..., pm_...)
        customer_id: Associated customer ID
        result: Processing step or outcome
        error: Failure message
        **extra: Additional context fields
    """
    _log_structured(
        logger,
        WEBHOOK_RESULT_LEVELS.get(result or "", logging.INFO),
        f"Webhook event: {event_type} ({event_id or 'no-id'})",
        {
            "result": result,
            "object": object_id,
            "customer": customer_id,
            "error": error,
            **extra,
        },
    )
