"""Tests for Vortex webhook signature verification and event construction."""

import hashlib
import hmac
import json

import pytest

from vortex_invites import (
    VortexAnalyticsEvent,
    VortexSettings,
    VortexWebhookEvent,
    VortexWebhookSignatureError,
    VortexWebhooks,
    WebhookPayloadError,
    is_analytics_event,
    is_webhook_event,
)

SECRET = "whsec_test_secret_123"

WEBHOOK_EVENT = {
    "id": "evt_123",
    "type": "invitation.accepted",
    "timestamp": "2025-01-15T12:00:00.000Z",
    "accountId": "acc_123",
    "environmentId": "env_456",
    "sourceTable": "invitations",
    "operation": "update",
    "data": {"invitationId": "inv_789", "targetEmail": "user@example.com"},
}

ANALYTICS_EVENT = {
    "id": "evt_456",
    "name": "widget_loaded",
    "accountId": "acc_123",
    "organizationId": "org_123",
    "projectId": "proj_123",
    "environmentId": "env_456",
    "deploymentId": None,
    "widgetConfigurationId": "wc_123",
    "foreignUserId": "user_123",
    "sessionId": "sess_123",
    "payload": {"page": "/dashboard"},
    "platform": "web",
    "segmentation": None,
    "timestamp": "2025-01-15T12:00:00.000Z",
}

WEBHOOK_EVENT_PAYLOAD = json.dumps(WEBHOOK_EVENT)
ANALYTICS_EVENT_PAYLOAD = json.dumps(ANALYTICS_EVENT)


def _sign(payload: str, secret: str = SECRET) -> str:
    return hmac.new(secret.encode("utf-8"), payload.encode("utf-8"), hashlib.sha256).hexdigest()


@pytest.fixture
def webhooks() -> VortexWebhooks:
    return VortexWebhooks(secret=SECRET)


class TestVerifySignature:
    def test_constructor_requires_secret(self) -> None:
        with pytest.raises(ValueError, match="requires a secret"):
            VortexWebhooks(secret="")

    def test_valid(self, webhooks: VortexWebhooks) -> None:
        assert webhooks.verify_signature(WEBHOOK_EVENT_PAYLOAD, _sign(WEBHOOK_EVENT_PAYLOAD)) is True

    def test_bytes_payload(self, webhooks: VortexWebhooks) -> None:
        sig = _sign(WEBHOOK_EVENT_PAYLOAD)
        assert webhooks.verify_signature(WEBHOOK_EVENT_PAYLOAD.encode("utf-8"), sig) is True

    def test_compute_signature_is_lowercase_hex(self, webhooks: VortexWebhooks) -> None:
        sig = webhooks.compute_signature(WEBHOOK_EVENT_PAYLOAD)
        assert sig == _sign(WEBHOOK_EVENT_PAYLOAD)
        assert sig == sig.lower() and len(sig) == 64

    @pytest.mark.parametrize("signature", ["bad", "", None, "é" * 64])
    def test_rejects_bad_signatures(self, webhooks: VortexWebhooks, signature: str) -> None:
        assert webhooks.verify_signature(WEBHOOK_EVENT_PAYLOAD, signature) is False

    def test_single_flipped_character(self, webhooks: VortexWebhooks) -> None:
        sig = _sign(WEBHOOK_EVENT_PAYLOAD)
        flipped = sig[:10] + ("1" if sig[10] == "0" else "0") + sig[11:]
        assert webhooks.verify_signature(WEBHOOK_EVENT_PAYLOAD, flipped) is False

    def test_uppercase_signature_does_not_match(self, webhooks: VortexWebhooks) -> None:
        sig = _sign(WEBHOOK_EVENT_PAYLOAD)
        assert webhooks.verify_signature(WEBHOOK_EVENT_PAYLOAD, sig.upper()) is False

    def test_wrong_secret(self, webhooks: VortexWebhooks) -> None:
        sig = _sign(WEBHOOK_EVENT_PAYLOAD, "wrong_secret")
        assert webhooks.verify_signature(WEBHOOK_EVENT_PAYLOAD, sig) is False

    def test_from_settings(self) -> None:
        settings = VortexSettings(api_key="VRTX.a.b", webhook_secret=SECRET)
        wh = VortexWebhooks.from_settings(settings)
        assert wh.verify_signature(WEBHOOK_EVENT_PAYLOAD, _sign(WEBHOOK_EVENT_PAYLOAD)) is True

    def test_from_settings_without_secret(self) -> None:
        with pytest.raises(ValueError):
            VortexWebhooks.from_settings(VortexSettings(api_key="VRTX.a.b"))


class TestConstructEvent:
    def test_webhook_event(self, webhooks: VortexWebhooks) -> None:
        event = webhooks.construct_event(WEBHOOK_EVENT_PAYLOAD, _sign(WEBHOOK_EVENT_PAYLOAD))
        assert isinstance(event, VortexWebhookEvent)
        assert event.id == "evt_123"
        assert event.type == "invitation.accepted"
        assert event.account_id == "acc_123"
        assert event.data["targetEmail"] == "user@example.com"

    def test_analytics_event(self, webhooks: VortexWebhooks) -> None:
        event = webhooks.construct_event(ANALYTICS_EVENT_PAYLOAD, _sign(ANALYTICS_EVENT_PAYLOAD))
        assert isinstance(event, VortexAnalyticsEvent)
        assert event.name == "widget_loaded"
        assert event.deployment_id is None
        assert event.payload == {"page": "/dashboard"}

    def test_unknown_fields_are_ignored(self, webhooks: VortexWebhooks) -> None:
        body = json.dumps({**WEBHOOK_EVENT, "brandNewField": {"x": 1}})
        event = webhooks.construct_event(body, _sign(body))
        assert isinstance(event, VortexWebhookEvent)
        assert not hasattr(event, "brandNewField")

    def test_bad_signature(self, webhooks: VortexWebhooks) -> None:
        with pytest.raises(VortexWebhookSignatureError):
            webhooks.construct_event(WEBHOOK_EVENT_PAYLOAD, "bad_sig")

    def test_bad_signature_checked_before_parsing(self, webhooks: VortexWebhooks) -> None:
        with pytest.raises(VortexWebhookSignatureError):
            webhooks.construct_event("not json", "bad_sig")

    @pytest.mark.parametrize(
        "body",
        [
            "not json",
            "[1, 2, 3]",
            '"just a string"',
            json.dumps({"id": "evt_1", "name": "widget_loaded"}),
            json.dumps({"id": "evt_1", "type": "invitation.created"}),
        ],
    )
    def test_signed_but_unparsable(self, webhooks: VortexWebhooks, body: str) -> None:
        with pytest.raises(WebhookPayloadError):
            webhooks.construct_event(body, _sign(body))

    def test_signed_invalid_utf8(self, webhooks: VortexWebhooks) -> None:
        body = b"\xff\xfe{}"
        sig = hmac.new(SECRET.encode("utf-8"), body, hashlib.sha256).hexdigest()
        with pytest.raises(WebhookPayloadError):
            webhooks.construct_event(body, sig)


class TestTypeGuards:
    def test_is_webhook_event(self) -> None:
        assert is_webhook_event({"type": "invitation.accepted", "id": "1"}) is True
        assert is_webhook_event({"name": "widget_loaded", "id": "1"}) is False

    def test_is_analytics_event(self) -> None:
        assert is_analytics_event({"name": "widget_loaded", "id": "1"}) is True
        assert is_analytics_event({"type": "invitation.accepted", "id": "1"}) is False
