"""
Vortex Webhook Types

Models for the two kinds of signed deliveries Vortex sends: state-change
webhook events and analytics events. A delivery is an analytics event when
its top-level object carries a ``name`` field. Unknown fields are ignored
so new server-side fields do not break older SDK versions.
"""

from enum import Enum
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, Field


# ─── Event type constants ──────────────────────────────────────────────


class WebhookEventType(str, Enum):
    """Webhook event types for Vortex state changes."""

    # Invitation lifecycle
    INVITATION_CREATED = "invitation.created"
    INVITATION_ACCEPTED = "invitation.accepted"
    INVITATION_DEACTIVATED = "invitation.deactivated"
    INVITATION_EMAIL_DELIVERED = "invitation.email.delivered"
    INVITATION_EMAIL_BOUNCED = "invitation.email.bounced"
    INVITATION_EMAIL_OPENED = "invitation.email.opened"
    INVITATION_LINK_CLICKED = "invitation.link.clicked"
    INVITATION_REMINDER_SENT = "invitation.reminder.sent"

    # Deployments
    DEPLOYMENT_CREATED = "deployment.created"
    DEPLOYMENT_DEACTIVATED = "deployment.deactivated"

    # A/B tests
    ABTEST_STARTED = "abtest.started"
    ABTEST_WINNER_DECLARED = "abtest.winner_declared"

    MEMBER_CREATED = "member.created"
    GROUP_MEMBER_ADDED = "group.member.added"
    EMAIL_COMPLAINED = "email.complained"


class AnalyticsEventType(str, Enum):
    """Analytics event names emitted by the invitation widgets."""

    WIDGET_LOADED = "widget_loaded"
    INVITATION_SENT = "invitation_sent"
    INVITATION_CLICKED = "invitation_clicked"
    INVITATION_ACCEPTED = "invitation_accepted"
    SHARE_TRIGGERED = "share_triggered"


# ─── Event payloads ────────────────────────────────────────────────────


class VortexWebhookEvent(BaseModel):
    """A server-side state change (invitation accepted, deployment created, ...)."""

    id: str
    type: str
    timestamp: str
    account_id: str = Field(alias="accountId")
    environment_id: Optional[str] = Field(None, alias="environmentId")
    source_table: str = Field(alias="sourceTable")
    operation: str  # "insert" | "update" | "delete"
    data: Dict[str, Any]

    class Config:
        populate_by_name = True
        extra = "ignore"


class VortexAnalyticsEvent(BaseModel):
    """Client-side behavioral telemetry forwarded by Vortex."""

    id: str
    name: str
    account_id: str = Field(alias="accountId")
    organization_id: str = Field(alias="organizationId")
    project_id: str = Field(alias="projectId")
    environment_id: str = Field(alias="environmentId")
    deployment_id: Optional[str] = Field(None, alias="deploymentId")
    widget_configuration_id: Optional[str] = Field(None, alias="widgetConfigurationId")
    foreign_user_id: Optional[str] = Field(None, alias="foreignUserId")
    session_id: Optional[str] = Field(None, alias="sessionId")
    payload: Optional[Dict[str, Any]] = None
    platform: Optional[str] = None
    segmentation: Optional[str] = None
    timestamp: str

    class Config:
        populate_by_name = True
        extra = "ignore"


# ─── Union & discriminators ────────────────────────────────────────────

VortexEvent = Union[VortexWebhookEvent, VortexAnalyticsEvent]


def is_analytics_event(event: Dict[str, Any]) -> bool:
    """Returns True if the decoded delivery is an analytics event (has 'name')."""
    return "name" in event


def is_webhook_event(event: Dict[str, Any]) -> bool:
    """Returns True if the decoded delivery is a state-change webhook event (no 'name')."""
    return not is_analytics_event(event)
