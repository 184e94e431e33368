"""Unit tests for webhook event parsing and dispatch.

Test categories:
- WebhookEvent kind resolution and typed payloads
- Dispatch of recognized, unknown and failing events
- Extension handler registration
"""

import logging
from unittest.mock import MagicMock

import pytest
from pydantic import ValidationError

from bridge_shared.models.webhook_event import (
    PaymentMethodObject,
    SetupIntentObject,
    WebhookEvent,
    WebhookEventType,
)
from bridge_shared.services.webhook_handler import DispatchResult, WebhookHandler

# === Test Configuration ===

TEST_CUSTOMER_ID = "cus_test_Q1ABC123"


def make_event(event_type: str, obj: dict | None = None, event_id: str = "evt_test_1") -> WebhookEvent:
    return WebhookEvent.model_validate(
        {
            "id": event_id,
            "type": event_type,
            "created": 1700000000,
            "livemode": False,
            "data": {"object": obj or {}},
        }
    )


SETUP_INTENT_OBJECT = {
    "id": "seti_test_1ABC",
    "object": "setup_intent",
    "customer": TEST_CUSTOMER_ID,
    "status": "succeeded",
    "payment_method": "pm_test_1ABC",
    "usage": "off_session",
}

PAYMENT_METHOD_OBJECT = {
    "id": "pm_test_1ABC",
    "object": "payment_method",
    "type": "card",
    "customer": TEST_CUSTOMER_ID,
}


class TestWebhookEventModel:
    @pytest.mark.parametrize(
        "event_type,expected",
        [
            ("setup_intent.succeeded", WebhookEventType.SETUP_INTENT_SUCCEEDED),
            ("setup_intent.setup_failed", WebhookEventType.SETUP_INTENT_SETUP_FAILED),
            ("payment_method.attached", WebhookEventType.PAYMENT_METHOD_ATTACHED),
            ("customer.created", WebhookEventType.UNKNOWN),
            ("checkout.session.completed", WebhookEventType.UNKNOWN),
        ],
    )
    def test_kind_resolution(self, event_type: str, expected: WebhookEventType):
        assert make_event(event_type).kind == expected

    def test_setup_intent_payload_is_typed(self):
        event = make_event("setup_intent.succeeded", SETUP_INTENT_OBJECT)

        payload = event.payload

        assert isinstance(payload, SetupIntentObject)
        assert payload.customer == TEST_CUSTOMER_ID
        assert payload.usage == "off_session"

    def test_payment_method_payload_is_typed(self):
        event = make_event("payment_method.attached", PAYMENT_METHOD_OBJECT)

        payload = event.payload

        assert isinstance(payload, PaymentMethodObject)
        assert payload.type == "card"

    def test_unknown_kind_payload_is_raw_dict(self):
        event = make_event("customer.created", {"id": "cus_1", "email": "a@b.c"})

        assert event.payload == {"id": "cus_1", "email": "a@b.c"}

    def test_type_is_required(self):
        with pytest.raises(ValidationError):
            WebhookEvent.model_validate({"id": "evt_1", "data": {"object": {}}})

    def test_minimal_unsigned_payload_parses(self):
        event = WebhookEvent.model_validate_json('{"type": "payment_method.attached"}')

        assert event.id is None
        assert event.data.object == {}


class TestDispatch:
    @pytest.mark.parametrize(
        "event_type,obj",
        [
            ("setup_intent.succeeded", SETUP_INTENT_OBJECT),
            (
                "setup_intent.setup_failed",
                {**SETUP_INTENT_OBJECT, "status": "requires_payment_method",
                 "last_setup_error": {"code": "card_declined"}},
            ),
            ("payment_method.attached", PAYMENT_METHOD_OBJECT),
        ],
    )
    def test_recognized_kinds_are_handled(self, event_type: str, obj: dict):
        handler = WebhookHandler()

        assert handler.dispatch(make_event(event_type, obj)) == DispatchResult.HANDLED

    def test_unknown_kind_is_skipped(self, caplog):
        handler = WebhookHandler()

        with caplog.at_level(logging.INFO):
            result = handler.dispatch(make_event("invoice.paid", {"id": "in_1"}))

        assert result == DispatchResult.SKIPPED
        assert "result=skipped" in caplog.text

    def test_handled_event_is_logged_with_customer(self, caplog):
        handler = WebhookHandler()

        with caplog.at_level(logging.INFO):
            handler.dispatch(make_event("setup_intent.succeeded", SETUP_INTENT_OBJECT))

        assert "setup_intent.succeeded" in caplog.text
        assert f"customer={TEST_CUSTOMER_ID}" in caplog.text

    def test_malformed_payload_is_reported_as_error(self, caplog):
        """A recognized kind whose object lacks an id fails its handler."""
        handler = WebhookHandler()

        with caplog.at_level(logging.INFO):
            result = handler.dispatch(make_event("setup_intent.succeeded", {}))

        assert result == DispatchResult.ERROR
        assert "result=error" in caplog.text


class TestRegister:
    def test_extension_handler_runs_after_default(self):
        handler = WebhookHandler()
        extension = MagicMock()
        event = make_event("payment_method.attached", PAYMENT_METHOD_OBJECT)

        handler.register(WebhookEventType.PAYMENT_METHOD_ATTACHED, extension)
        result = handler.dispatch(event)

        assert result == DispatchResult.HANDLED
        extension.assert_called_once_with(event)

    def test_extension_handler_only_runs_for_its_kind(self):
        handler = WebhookHandler()
        extension = MagicMock()

        handler.register(WebhookEventType.PAYMENT_METHOD_ATTACHED, extension)
        handler.dispatch(make_event("setup_intent.succeeded", SETUP_INTENT_OBJECT))

        extension.assert_not_called()

    def test_failing_extension_handler_does_not_raise(self):
        handler = WebhookHandler()
        handler.register(
            WebhookEventType.SETUP_INTENT_SUCCEEDED,
            MagicMock(side_effect=RuntimeError("downstream unavailable")),
        )

        result = handler.dispatch(make_event("setup_intent.succeeded", SETUP_INTENT_OBJECT))

        assert result == DispatchResult.ERROR

    def test_later_handlers_run_after_a_failure(self, caplog):
        handler = WebhookHandler()
        failing = MagicMock(side_effect=RuntimeError("downstream unavailable"))
        following = MagicMock()
        event = make_event("setup_intent.succeeded", SETUP_INTENT_OBJECT)

        handler.register(WebhookEventType.SETUP_INTENT_SUCCEEDED, failing)
        handler.register(WebhookEventType.SETUP_INTENT_SUCCEEDED, following)
        with caplog.at_level(logging.INFO):
            result = handler.dispatch(event)

        assert result == DispatchResult.ERROR
        failing.assert_called_once_with(event)
        following.assert_called_once_with(event)
        assert "downstream unavailable" in caplog.text

    def test_cannot_register_for_unknown_kind(self):
        handler = WebhookHandler()

        with pytest.raises(ValueError):
            handler.register(WebhookEventType.UNKNOWN, MagicMock())

    def test_handlers_are_per_instance(self):
        first = WebhookHandler()
        second = WebhookHandler()
        extension = MagicMock()

        first.register(WebhookEventType.PAYMENT_METHOD_ATTACHED, extension)
        second.dispatch(make_event("payment_method.attached", PAYMENT_METHOD_OBJECT))

        extension.assert_not_called()
