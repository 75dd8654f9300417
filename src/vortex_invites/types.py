from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import AliasChoices, BaseModel, Field


# ─── Enums ─────────────────────────────────────────────────────────────


class InvitationStatus(str, Enum):
    QUEUED = "queued"
    SENDING = "sending"
    SENT = "sent"
    DELIVERED = "delivered"
    ACCEPTED = "accepted"
    SHARED = "shared"
    UNFURLED = "unfurled"
    ACCEPTED_ELSEWHERE = "accepted_elsewhere"


class DeliveryType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    SHARE = "share"
    INTERNAL = "internal"


class InvitationType(str, Enum):
    SINGLE_USE = "single_use"
    MULTI_USE = "multi_use"
    AUTOJOIN = "autojoin"


class InvitationTargetType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    SHARE = "share"
    INTERNAL = "internal"


class CreateInvitationTargetType(str, Enum):
    EMAIL = "email"
    PHONE = "phone"
    INTERNAL = "internal"


# ─── JWT inputs ────────────────────────────────────────────────────────


class User(BaseModel):
    """
    User to mint a JWT for.

    Unknown keys are kept (``model_extra``) and copied into the token payload
    after the known optional fields.
    """

    id: str
    email: str
    user_name: Optional[str] = Field(
        None, validation_alias=AliasChoices("user_name", "userName", "name")
    )
    user_avatar_url: Optional[str] = Field(
        None, validation_alias=AliasChoices("user_avatar_url", "userAvatarUrl", "avatar_url")
    )
    admin_scopes: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("admin_scopes", "adminScopes")
    )
    allowed_email_domains: Optional[List[str]] = Field(
        None, validation_alias=AliasChoices("allowed_email_domains", "allowedEmailDomains")
    )

    class Config:
        extra = "allow"
        populate_by_name = True


class Identifier(BaseModel):
    """Identifier structure for legacy JWT generation"""
    type: str  # "email", "sms", ...
    value: str


class Group(BaseModel):
    """Group structure for legacy JWT generation"""
    type: str
    id: Optional[str] = None  # Legacy field (deprecated, use group_id)
    group_id: Optional[str] = Field(None, alias="groupId")
    name: str

    class Config:
        populate_by_name = True


class LegacyJwtPayload(BaseModel):
    """
    Deprecated payload shape (identifiers + groups + role).

    Tokens built from it keep the field order the token service
    historically received: userId, groups, role, expires, identifiers.
    """

    user_id: str = Field(alias="userId")
    identifiers: List[Identifier]
    groups: Optional[List[Group]] = None
    role: Optional[str] = None
    attributes: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True


# ─── Invitations (responses) ───────────────────────────────────────────


class InvitationTarget(BaseModel):
    type: str
    value: str
    name: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")

    class Config:
        populate_by_name = True


class InvitationGroup(BaseModel):
    """
    Invitation group from API responses
    This matches the MemberGroups table structure from the API
    """
    id: str  # Vortex internal UUID
    account_id: Optional[str] = Field(None, alias="accountId")
    group_id: Optional[str] = Field(None, alias="groupId")  # Customer's group ID
    type: str  # Group type (e.g., "workspace", "team")
    name: str
    created_at: Optional[str] = Field(None, alias="createdAt")

    class Config:
        populate_by_name = True


class InvitationAcceptance(BaseModel):
    id: str
    account_id: Optional[str] = Field(None, alias="accountId")
    project_id: Optional[str] = Field(None, alias="projectId")
    accepted_at: Optional[str] = Field(None, alias="acceptedAt")
    target: Optional[InvitationTarget] = None

    class Config:
        populate_by_name = True


class Invitation(BaseModel):
    id: str
    account_id: Optional[str] = Field(None, alias="accountId")
    project_id: Optional[str] = Field(None, alias="projectId")
    status: str
    created_at: Optional[str] = Field(None, alias="createdAt")
    modified_at: Optional[str] = Field(None, alias="modifiedAt")
    click_throughs: int = Field(0, alias="clickThroughs")
    delivery_count: int = Field(0, alias="deliveryCount")
    views: int = 0
    deactivated: bool = False
    delivery_types: List[str] = Field(default_factory=list, alias="deliveryTypes")
    foreign_creator_id: Optional[str] = Field(None, alias="foreignCreatorId")
    invitation_type: Optional[str] = Field(None, alias="invitationType")
    widget_configuration_id: Optional[str] = Field(None, alias="widgetConfigurationId")
    target: List[InvitationTarget] = Field(default_factory=list)
    groups: List[InvitationGroup] = Field(default_factory=list)
    accepts: List[InvitationAcceptance] = Field(default_factory=list)
    scope: Optional[str] = None
    scope_type: Optional[str] = Field(None, alias="scopeType")
    expired: bool = False
    expires: Optional[str] = None
    configuration_attributes: Optional[Dict[str, Any]] = Field(
        None, alias="configurationAttributes"
    )
    attributes: Optional[Dict[str, Any]] = None
    metadata: Optional[Dict[str, Any]] = None
    pass_through: Optional[str] = Field(None, alias="passThrough")

    class Config:
        populate_by_name = True


# ─── Accepting invitations ─────────────────────────────────────────────


class AcceptUser(BaseModel):
    """User accepting an invitation; at least one of email or phone is required."""
    email: Optional[str] = None
    phone: Optional[str] = None
    name: Optional[str] = None


# ─── Creating invitations ──────────────────────────────────────────────


class CreateInvitationTarget(BaseModel):
    type: CreateInvitationTargetType
    value: str
    name: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")

    class Config:
        populate_by_name = True
        use_enum_values = True


class Inviter(BaseModel):
    user_id: str = Field(alias="userId")
    user_email: Optional[str] = Field(None, alias="userEmail")
    name: Optional[str] = None
    avatar_url: Optional[str] = Field(None, alias="avatarUrl")

    class Config:
        populate_by_name = True


class CreateInvitationGroup(BaseModel):
    type: str
    group_id: str = Field(alias="groupId")
    name: str

    class Config:
        populate_by_name = True


class UnfurlConfig(BaseModel):
    """Open Graph data used when the invitation link is unfurled."""
    title: Optional[str] = None
    description: Optional[str] = None
    image: Optional[str] = None
    type: Optional[str] = None
    site_name: Optional[str] = Field(None, alias="siteName")

    class Config:
        populate_by_name = True


class CreateInvitationRequest(BaseModel):
    widget_configuration_id: str = Field(alias="widgetConfigurationId")
    target: CreateInvitationTarget
    inviter: Inviter
    groups: Optional[List[CreateInvitationGroup]] = None
    source: Optional[str] = None
    subtype: Optional[str] = None
    template_variables: Optional[Dict[str, str]] = Field(None, alias="templateVariables")
    metadata: Optional[Dict[str, Any]] = None
    unfurl_config: Optional[UnfurlConfig] = Field(None, alias="unfurlConfig")

    class Config:
        populate_by_name = True


class CreateInvitationResponse(BaseModel):
    id: str
    short_link: str = Field(alias="shortLink")
    status: str
    created_at: str = Field(alias="createdAt")

    class Config:
        populate_by_name = True


# ─── Autojoin ──────────────────────────────────────────────────────────


class AutojoinDomain(BaseModel):
    id: str
    domain: str


class AutojoinDomainsResponse(BaseModel):
    autojoin_domains: List[AutojoinDomain] = Field(
        default_factory=list, alias="autojoinDomains"
    )
    invitation: Optional[Invitation] = None

    class Config:
        populate_by_name = True


class ConfigureAutojoinRequest(BaseModel):
    scope: str
    scope_type: str = Field(alias="scopeType")
    scope_name: Optional[str] = Field(None, alias="scopeName")
    domains: List[str]
    widget_id: str = Field(alias="widgetId")
    metadata: Optional[Dict[str, Any]] = None

    class Config:
        populate_by_name = True


# ─── Internal invitations ──────────────────────────────────────────────


class SyncInternalInvitationRequest(BaseModel):
    creator_id: str = Field(alias="creatorId")
    target_value: str = Field(alias="targetValue")
    action: str  # "accepted" | "declined"
    component_id: str = Field(alias="componentId")

    class Config:
        populate_by_name = True


class SyncInternalInvitationResponse(BaseModel):
    processed: int
    invitation_ids: List[str] = Field(default_factory=list, alias="invitationIds")

    class Config:
        populate_by_name = True
