"""
Vortex Webhooks

Signature verification and decoding of inbound webhook deliveries.

Example::

    from vortex_invites import VortexWebhooks

    webhooks = VortexWebhooks(secret=os.environ["VORTEX_WEBHOOK_SECRET"])

    # In any HTTP handler, with the *raw* request body:
    event = webhooks.construct_event(raw_body, request.headers["X-Vortex-Signature"])
"""

import hashlib
import hmac
import json
import logging
from typing import TYPE_CHECKING, Any, Optional, Union

from pydantic import ValidationError

from .errors import VortexWebhookSignatureError, WebhookPayloadError
from .webhook_types import (
    VortexAnalyticsEvent,
    VortexEvent,
    VortexWebhookEvent,
    is_analytics_event,
)

if TYPE_CHECKING:
    from .config import VortexSettings

logger = logging.getLogger(__name__)

SIGNATURE_HEADER = "X-Vortex-Signature"


class VortexWebhooks:
    """
    Framework-agnostic webhook verification and parsing.

    Args:
        secret: The webhook signing secret from your Vortex dashboard
            (usually ``whsec_...``).
    """

    def __init__(self, secret: str) -> None:
        if not secret:
            raise ValueError("VortexWebhooks requires a secret")
        self._secret = secret.encode("utf-8")

    @classmethod
    def from_settings(cls, settings: "VortexSettings") -> "VortexWebhooks":
        if not settings.webhook_secret:
            raise ValueError("VortexWebhooks requires a secret (VORTEX_WEBHOOK_SECRET)")
        return cls(secret=settings.webhook_secret)

    def compute_signature(self, payload: Union[str, bytes]) -> str:
        """Lowercase hex HMAC-SHA256 of ``payload`` under the signing secret."""
        if isinstance(payload, str):
            payload = payload.encode("utf-8")
        return hmac.new(self._secret, payload, hashlib.sha256).hexdigest()

    def verify_signature(self, payload: Union[str, bytes], signature: Optional[str]) -> bool:
        """
        Check the ``X-Vortex-Signature`` value for a raw request body.

        Never raises: a missing, malformed or mismatching signature is simply
        ``False``.
        """
        if not signature:
            return False

        try:
            supplied = signature.encode("ascii")
        except (AttributeError, UnicodeEncodeError):
            return False

        expected = self.compute_signature(payload).encode("ascii")
        return hmac.compare_digest(supplied, expected)

    def construct_event(
        self, payload: Union[str, bytes], signature: Optional[str]
    ) -> VortexEvent:
        """
        Verify and parse an incoming webhook payload.

        Args:
            payload: The raw request body (str or bytes). Must be the exact
                bytes that were signed, not a re-serialized dict.
            signature: The value of the ``X-Vortex-Signature`` header.

        Returns:
            A :class:`VortexWebhookEvent` or :class:`VortexAnalyticsEvent`.

        Raises:
            VortexWebhookSignatureError: If the signature is invalid.
            WebhookPayloadError: If the signed body is not a valid event.
        """
        if not self.verify_signature(payload, signature):
            raise VortexWebhookSignatureError(
                "Webhook signature verification failed. Ensure you are using "
                "the raw request body and the correct signing secret."
            )

        try:
            body = payload if isinstance(payload, str) else payload.decode("utf-8")
            parsed: Any = json.loads(body)
        except (UnicodeDecodeError, json.JSONDecodeError) as e:
            raise WebhookPayloadError(f"Webhook body is not valid JSON: {e}") from e

        if not isinstance(parsed, dict):
            raise WebhookPayloadError(
                f"Webhook body must be a JSON object, got {type(parsed).__name__}"
            )

        try:
            if is_analytics_event(parsed):
                return VortexAnalyticsEvent(**parsed)
            return VortexWebhookEvent(**parsed)
        except ValidationError as e:
            logger.warning("Signed webhook delivery %r did not match any event shape", parsed.get("id"))
            raise WebhookPayloadError(f"Webhook body is not a recognised event: {e}") from e
