"""
Tests for Paystack webhook event parsing.
"""

import json

import pytest

from rest_api.services.payments import (
    ChargeFailedEvent,
    ChargeSuccessEvent,
    UnhandledEvent,
    WebhookPayloadError,
    parse_webhook_event,
)
from tests.conftest import webhook_body


class TestParseWebhookEvent:

    def test_charge_success(self):
        event = parse_webhook_event(json.loads(webhook_body("charge.success", "TLR_1", 5000)))

        assert isinstance(event, ChargeSuccessEvent)
        assert event.data.reference == "TLR_1"
        assert event.data.amount == 5000
        assert event.data.customer_email == "awa@talier.sn"
        assert event.data.metadata == {"order_type": "meal_plan"}

    def test_charge_failed(self):
        event = parse_webhook_event(json.loads(webhook_body("charge.failed", "TLR_1", 5000)))

        assert isinstance(event, ChargeFailedEvent)

    def test_other_events_are_unhandled(self):
        event = parse_webhook_event({"event": "transfer.success", "data": {"anything": 1}})

        assert isinstance(event, UnhandledEvent)
        assert event.event == "transfer.success"

    def test_non_object_metadata_dropped(self):
        event = parse_webhook_event(json.loads(webhook_body("charge.success", "TLR_1", 5000, metadata="")))

        assert event.data.metadata is None

    def test_missing_customer_allowed(self):
        event = parse_webhook_event(json.loads(webhook_body("charge.success", "TLR_1", 5000, customer=None)))

        assert event.data.customer_email is None

    @pytest.mark.parametrize(
        "payload",
        [
            [],
            "charge.success",
            {},
            {"event": ""},
            {"event": 42},
            {"event": "charge.success"},
            {"event": "charge.success", "data": {"amount": 5000}},
            {"event": "charge.success", "data": {"reference": "", "amount": 5000}},
            {"event": "charge.failed", "data": {"reference": "TLR_1", "amount": "beaucoup"}},
        ],
    )
    def test_malformed_payloads_rejected(self, payload):
        with pytest.raises(WebhookPayloadError):
            parse_webhook_event(payload)
