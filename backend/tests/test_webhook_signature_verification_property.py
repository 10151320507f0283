"""
Property-based tests for webhook signature verification.

Signatures are produced the way Stripe produces them (HMAC-SHA256 over
"{timestamp}.{payload}") and checked by StripePaymentGateway.verify_webhook.
"""
import json
import time
import pytest
from hypothesis import given, strategies as st, settings, HealthCheck

from services.payment_gateway import PaymentGatewayError, StripePaymentGateway, WebhookSignatureError
from conftest import WEBHOOK_SECRET, generate_stripe_signature

DEFAULT_SETTINGS = settings(
    max_examples=100,
    suppress_health_check=[HealthCheck.function_scoped_fixture],
    deadline=None,
)

event_types = st.sampled_from([
    "payment_intent.succeeded",
    "payment_intent.payment_failed",
    "payment_intent.canceled",
    "charge.refunded",
    "customer.updated",
])

metadata = st.dictionaries(
    st.text(min_size=1, max_size=20, alphabet=st.characters(whitelist_categories=("Ll", "Lu"))),
    st.one_of(st.text(max_size=50), st.integers(min_value=0, max_value=10000)),
    max_size=5,
)


@pytest.fixture
def gateway():
    return StripePaymentGateway(api_key="sk_test_fake", webhook_secret=WEBHOOK_SECRET)


def encode_event(event_type, event_id, data) -> bytes:
    return json.dumps({"id": event_id, "type": event_type, "data": {"object": data}}).encode("utf-8")


class TestWebhookSignatureVerificationProperty:

    @given(event_type=event_types, event_id=st.uuids(), data=metadata)
    @DEFAULT_SETTINGS
    def test_valid_signature_returns_parsed_event(self, gateway, event_type, event_id, data):
        payload = encode_event(event_type, f"evt_{event_id.hex}", data)

        event = gateway.verify_webhook(payload, generate_stripe_signature(payload))

        assert event["type"] == event_type
        assert event["data"]["object"] == data

    @given(event_type=event_types, event_id=st.uuids(), data=metadata, wrong_secret=st.text(min_size=1, max_size=30))
    @DEFAULT_SETTINGS
    def test_foreign_secret_never_verifies(self, gateway, event_type, event_id, data, wrong_secret):
        payload = encode_event(event_type, f"evt_{event_id.hex}", data)
        signature = generate_stripe_signature(payload, secret=WEBHOOK_SECRET + wrong_secret)

        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook(payload, signature)

    @given(data=metadata, extra=st.sampled_from([b" ", b"\n", b"{}"]))
    @DEFAULT_SETTINGS
    def test_any_byte_change_breaks_the_signature(self, gateway, data, extra):
        payload = encode_event("payment_intent.succeeded", "evt_1", data)
        signature = generate_stripe_signature(payload)

        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook(payload + extra, signature)

    def test_malformed_header(self, gateway):
        payload = encode_event("payment_intent.succeeded", "evt_1", {})

        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook(payload, "garbage")

    def test_expired_signature(self, gateway):
        payload = encode_event("payment_intent.succeeded", "evt_1", {})
        signature = generate_stripe_signature(payload, timestamp=int(time.time()) - 301 - 60)

        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook(payload, signature)

    def test_signed_non_json_body(self, gateway):
        payload = b"not json"

        with pytest.raises(WebhookSignatureError):
            gateway.verify_webhook(payload, generate_stripe_signature(payload))

    def test_missing_secret(self):
        gateway = StripePaymentGateway(api_key="sk_test_fake", webhook_secret="")
        payload = encode_event("payment_intent.succeeded", "evt_1", {})

        with pytest.raises(PaymentGatewayError):
            gateway.verify_webhook(payload, generate_stripe_signature(payload))

    def test_configured_follows_api_key(self):
        assert StripePaymentGateway(api_key="sk_test_fake", webhook_secret="x").configured is True
        assert StripePaymentGateway(api_key="", webhook_secret="x").configured is False
