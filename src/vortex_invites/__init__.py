"""
Vortex Invites

Python SDK for Vortex invitations: local JWT generation from a Vortex API
key, a client for the invitation REST API, and webhook verification.
"""

from .client import Vortex
from .config import VortexSettings
from .errors import (
    InvalidInputError,
    MalformedApiKeyError,
    SigningError,
    VortexApiError,
    VortexError,
    VortexWebhookSignatureError,
    WebhookPayloadError,
)
from .jwt import TOKEN_LIFETIME_SECONDS, generate_jwt
from .keys import ParsedApiKey, derive_signing_key, parse_api_key
from .types import (
    AcceptUser,
    AutojoinDomain,
    AutojoinDomainsResponse,
    CreateInvitationGroup,
    CreateInvitationResponse,
    CreateInvitationTarget,
    Group,
    Identifier,
    Invitation,
    InvitationAcceptance,
    InvitationGroup,
    InvitationStatus,
    InvitationTarget,
    Inviter,
    LegacyJwtPayload,
    SyncInternalInvitationResponse,
    UnfurlConfig,
    User,
)
from .webhook_types import (
    AnalyticsEventType,
    VortexAnalyticsEvent,
    VortexEvent,
    VortexWebhookEvent,
    WebhookEventType,
    is_analytics_event,
    is_webhook_event,
)
from .webhooks import VortexWebhooks

__version__ = "0.1.0"
__author__ = "TeamVortexSoftware"
__email__ = "support@vortexsoftware.com"

__all__ = [
    "Vortex",
    "VortexSettings",
    "VortexWebhooks",
    "generate_jwt",
    "parse_api_key",
    "derive_signing_key",
    "ParsedApiKey",
    "TOKEN_LIFETIME_SECONDS",
    # errors
    "VortexError",
    "MalformedApiKeyError",
    "InvalidInputError",
    "SigningError",
    "VortexApiError",
    "VortexWebhookSignatureError",
    "WebhookPayloadError",
    # types
    "User",
    "LegacyJwtPayload",
    "Identifier",
    "Group",
    "AcceptUser",
    "Invitation",
    "InvitationTarget",
    "InvitationGroup",
    "InvitationAcceptance",
    "InvitationStatus",
    "CreateInvitationTarget",
    "CreateInvitationGroup",
    "CreateInvitationResponse",
    "Inviter",
    "UnfurlConfig",
    "AutojoinDomain",
    "AutojoinDomainsResponse",
    "SyncInternalInvitationResponse",
    # webhooks
    "VortexEvent",
    "VortexWebhookEvent",
    "VortexAnalyticsEvent",
    "WebhookEventType",
    "AnalyticsEventType",
    "is_webhook_event",
    "is_analytics_event",
]
