import logging
from typing import Any, Dict, List, Optional, Union
from urllib.parse import quote

import httpx
from pydantic import ValidationError

from .config import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, VortexSettings
from .errors import InvalidInputError, VortexApiError
from .jwt import JwtSubject, generate_jwt
from .types import (
    AcceptUser,
    AutojoinDomainsResponse,
    ConfigureAutojoinRequest,
    CreateInvitationGroup,
    CreateInvitationRequest,
    CreateInvitationResponse,
    CreateInvitationTarget,
    Invitation,
    InvitationTarget,
    Inviter,
    SyncInternalInvitationRequest,
    SyncInternalInvitationResponse,
    UnfurlConfig,
)

logger = logging.getLogger(__name__)

SDK_NAME = "vortex-invites"

AcceptTarget = Union[
    AcceptUser,
    InvitationTarget,
    Dict[str, Any],
    List[Union[InvitationTarget, Dict[str, str]]],
]


def _get_version() -> str:
    """Lazy import of version to avoid circular import"""
    from . import __version__

    return __version__


def _segment(value: str) -> str:
    return quote(value, safe="")


def _parse_response(response: httpx.Response) -> Dict:
    if response.status_code >= 400:
        try:
            body: Any = response.json()
        except ValueError:
            body = response.text

        message = f"API request failed with status {response.status_code}"
        if isinstance(body, dict) and body.get("error"):
            message = str(body["error"])

        logger.warning(
            "Vortex API %s %s failed with status %d",
            response.request.method,
            response.request.url.path,
            response.status_code,
        )
        raise VortexApiError(message, response.status_code, body)

    # DELETE may answer 204 or an empty 200
    if response.status_code == 204 or not response.content:
        return {}

    try:
        return response.json()  # type: ignore[no-any-return]
    except ValueError as e:
        raise VortexApiError(
            f"API returned invalid JSON: {e}", response.status_code, response.text
        ) from e


def _accept_user_from_target(target: Union[InvitationTarget, Dict[str, Any]]) -> AcceptUser:
    if isinstance(target, InvitationTarget):
        target_type, target_value = target.type, target.value
    else:
        target_type, target_value = target["type"], target["value"]

    if target_type in ("phone", "phoneNumber"):
        return AcceptUser(phone=target_value)
    # any other target type is treated as an email address
    return AcceptUser(email=target_value)


def _is_legacy_target(value: Any) -> bool:
    return isinstance(value, InvitationTarget) or (
        isinstance(value, dict) and "type" in value and "value" in value
    )


def _accept_body(invitation_ids: List[str], user: Union[AcceptUser, Dict[str, Any]]) -> Dict:
    if isinstance(user, dict):
        try:
            user = AcceptUser(**user)
        except ValidationError as e:
            raise InvalidInputError(f"Invalid user for accepting invitations: {e}") from e
    if not user.email and not user.phone:
        raise InvalidInputError("User must have either email or phone")
    return {"invitationIds": invitation_ids, "user": user.model_dump(exclude_none=True)}


def _create_invitation_body(
    widget_configuration_id: str,
    target: Union[CreateInvitationTarget, Dict[str, Any]],
    inviter: Union[Inviter, Dict[str, Any]],
    groups: Optional[List[Union[CreateInvitationGroup, Dict[str, str]]]],
    source: Optional[str],
    subtype: Optional[str],
    template_variables: Optional[Dict[str, str]],
    metadata: Optional[Dict[str, Any]],
    unfurl_config: Optional[Union[UnfurlConfig, Dict[str, Any]]],
) -> Dict:
    if isinstance(target, dict):
        target = CreateInvitationTarget(**target)
    if isinstance(inviter, dict):
        inviter = Inviter(**inviter)
    if isinstance(unfurl_config, dict):
        unfurl_config = UnfurlConfig(**unfurl_config)

    request = CreateInvitationRequest(
        widget_configuration_id=widget_configuration_id,
        target=target,
        inviter=inviter,
        groups=[CreateInvitationGroup(**g) if isinstance(g, dict) else g for g in groups]
        if groups
        else None,
        source=source,
        subtype=subtype,
        template_variables=template_variables,
        metadata=metadata,
        unfurl_config=unfurl_config,
    )
    # by_alias gives the camelCase keys the API expects
    return request.model_dump(by_alias=True, exclude_none=True, mode="json")


class Vortex:
    def __init__(
        self,
        api_key: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize Vortex client

        Args:
            api_key: Your Vortex API key (VRTX.{encodedId}.{key})
            base_url: Base URL for Vortex API (default: https://api.vortexsoftware.com/api/v1)
            timeout: Per-request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout)
        self._sync_client = httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: VortexSettings) -> "Vortex":
        return cls(settings.api_key, base_url=settings.base_url, timeout=settings.timeout)

    def __repr__(self) -> str:
        return f"Vortex(base_url={self.base_url!r})"

    def generate_jwt(self, user: JwtSubject, **extra: Any) -> str:
        """
        Generate a JWT token for a user

        Args:
            user: User object or dict with 'id', 'email', and optional 'name',
                  'avatar_url', 'admin_scopes', 'allowed_email_domains'
            **extra: Additional properties to include in JWT payload

        Returns:
            JWT token string

        Raises:
            MalformedApiKeyError: If the API key format is invalid
            InvalidInputError: If required user fields are missing

        Example:
            jwt = vortex.generate_jwt(
                user={'id': 'user-123', 'email': 'user@example.com', 'name': 'John Doe'},
                role='admin',
                department='Engineering',
            )
        """
        return generate_jwt(self.api_key, user, extra)

    def _request_kwargs(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict],
        params: Optional[Dict],
    ) -> Dict[str, Any]:
        logger.debug("Vortex API %s %s", method, endpoint)
        return {
            "method": method,
            "url": f"{self.base_url}{endpoint}",
            "json": data,
            "params": params,
            "headers": {
                "x-api-key": self.api_key,
                "Content-Type": "application/json",
                "User-Agent": f"{SDK_NAME}/{_get_version()}",
                "x-vortex-sdk-name": SDK_NAME,
                "x-vortex-sdk-version": _get_version(),
            },
        }

    async def _vortex_api_request(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict:
        """
        Make an API request to Vortex

        Raises:
            VortexApiError: If the API request fails
        """
        try:
            response = await self._client.request(
                **self._request_kwargs(method, endpoint, data, params)
            )
        except httpx.RequestError as e:
            raise VortexApiError(f"Request failed: {e}") from e
        return _parse_response(response)

    def _vortex_api_request_sync(
        self,
        method: str,
        endpoint: str,
        data: Optional[Dict] = None,
        params: Optional[Dict] = None,
    ) -> Dict:
        """Synchronous twin of :meth:`_vortex_api_request`."""
        try:
            response = self._sync_client.request(
                **self._request_kwargs(method, endpoint, data, params)
            )
        except httpx.RequestError as e:
            raise VortexApiError(f"Request failed: {e}") from e
        return _parse_response(response)

    # ─── Invitations ───────────────────────────────────────────────────

    async def get_invitations_by_target(
        self, target_type: str, target_value: str
    ) -> List[Invitation]:
        """
        Get invitations for a specific target

        Args:
            target_type: Type of target (email, phone, ...)
            target_value: Target value
        """
        params = {"targetType": target_type, "targetValue": target_value}
        response = await self._vortex_api_request("GET", "/invitations", params=params)
        return [Invitation(**inv) for inv in response.get("invitations", [])]

    def get_invitations_by_target_sync(
        self, target_type: str, target_value: str
    ) -> List[Invitation]:
        params = {"targetType": target_type, "targetValue": target_value}
        response = self._vortex_api_request_sync("GET", "/invitations", params=params)
        return [Invitation(**inv) for inv in response.get("invitations", [])]

    async def get_invitation(self, invitation_id: str) -> Invitation:
        response = await self._vortex_api_request(
            "GET", f"/invitations/{_segment(invitation_id)}"
        )
        return Invitation(**response)

    def get_invitation_sync(self, invitation_id: str) -> Invitation:
        response = self._vortex_api_request_sync(
            "GET", f"/invitations/{_segment(invitation_id)}"
        )
        return Invitation(**response)

    async def revoke_invitation(self, invitation_id: str) -> Dict:
        """Revoke an invitation"""
        return await self._vortex_api_request(
            "DELETE", f"/invitations/{_segment(invitation_id)}"
        )

    def revoke_invitation_sync(self, invitation_id: str) -> Dict:
        return self._vortex_api_request_sync(
            "DELETE", f"/invitations/{_segment(invitation_id)}"
        )

    async def accept_invitations(
        self, invitation_ids: List[str], user_or_target: AcceptTarget
    ) -> Dict:
        """
        Accept multiple invitations

        Args:
            invitation_ids: List of invitation IDs to accept
            user_or_target: AcceptUser (or dict) with email/phone/name. A legacy
                InvitationTarget, or a list of them, is still accepted but
                deprecated.

        Example:
            result = await client.accept_invitations(
                ["inv-123"], AcceptUser(email="user@example.com", name="John Doe")
            )
        """
        if isinstance(user_or_target, list):
            logger.warning(
                "[Vortex SDK] DEPRECATED: Passing a list of targets is deprecated. "
                "Use the AcceptUser format and call once per user instead."
            )
            if not user_or_target:
                raise InvalidInputError("No targets provided")

            # every target is attempted; the last failure is re-raised
            last_result: Dict = {}
            last_error: Optional[Exception] = None
            for target in user_or_target:
                try:
                    last_result = await self.accept_invitations(invitation_ids, target)
                except (VortexApiError, InvalidInputError) as e:
                    last_error = e
            if last_error is not None:
                raise last_error
            return last_result

        if _is_legacy_target(user_or_target):
            logger.warning(
                "[Vortex SDK] DEPRECATED: Passing an InvitationTarget is deprecated. "
                "Use the AcceptUser format instead: AcceptUser(email='user@example.com')"
            )
            user_or_target = _accept_user_from_target(user_or_target)  # type: ignore[arg-type]

        data = _accept_body(invitation_ids, user_or_target)  # type: ignore[arg-type]
        return await self._vortex_api_request("POST", "/invitations/accept", data=data)

    def accept_invitations_sync(
        self, invitation_ids: List[str], user_or_target: AcceptTarget
    ) -> Dict:
        """Synchronous version of :meth:`accept_invitations`."""
        if isinstance(user_or_target, list):
            logger.warning(
                "[Vortex SDK] DEPRECATED: Passing a list of targets is deprecated. "
                "Use the AcceptUser format and call once per user instead."
            )
            if not user_or_target:
                raise InvalidInputError("No targets provided")

            last_result: Dict = {}
            last_error: Optional[Exception] = None
            for target in user_or_target:
                try:
                    last_result = self.accept_invitations_sync(invitation_ids, target)
                except (VortexApiError, InvalidInputError) as e:
                    last_error = e
            if last_error is not None:
                raise last_error
            return last_result

        if _is_legacy_target(user_or_target):
            logger.warning(
                "[Vortex SDK] DEPRECATED: Passing an InvitationTarget is deprecated. "
                "Use the AcceptUser format instead: AcceptUser(email='user@example.com')"
            )
            user_or_target = _accept_user_from_target(user_or_target)  # type: ignore[arg-type]

        data = _accept_body(invitation_ids, user_or_target)  # type: ignore[arg-type]
        return self._vortex_api_request_sync("POST", "/invitations/accept", data=data)

    async def accept_invitation(
        self, invitation_id: str, user: Union[AcceptUser, Dict[str, Any]]
    ) -> Dict:
        """
        Accept a single invitation (recommended method)

        Example:
            result = await client.accept_invitation("inv-123", {"email": "user@example.com"})
        """
        return await self.accept_invitations([invitation_id], user)

    def accept_invitation_sync(
        self, invitation_id: str, user: Union[AcceptUser, Dict[str, Any]]
    ) -> Dict:
        return self.accept_invitations_sync([invitation_id], user)

    async def reinvite(self, invitation_id: str) -> Invitation:
        """Resend an invitation and return its updated state"""
        response = await self._vortex_api_request(
            "POST", f"/invitations/{_segment(invitation_id)}/reinvite"
        )
        return Invitation(**response)

    def reinvite_sync(self, invitation_id: str) -> Invitation:
        response = self._vortex_api_request_sync(
            "POST", f"/invitations/{_segment(invitation_id)}/reinvite"
        )
        return Invitation(**response)

    # ─── Groups ────────────────────────────────────────────────────────

    async def get_invitations_by_group(
        self, group_type: str, group_id: str
    ) -> List[Invitation]:
        response = await self._vortex_api_request(
            "GET", f"/invitations/by-group/{_segment(group_type)}/{_segment(group_id)}"
        )
        return [Invitation(**inv) for inv in response.get("invitations", [])]

    def get_invitations_by_group_sync(
        self, group_type: str, group_id: str
    ) -> List[Invitation]:
        response = self._vortex_api_request_sync(
            "GET", f"/invitations/by-group/{_segment(group_type)}/{_segment(group_id)}"
        )
        return [Invitation(**inv) for inv in response.get("invitations", [])]

    async def delete_invitations_by_group(self, group_type: str, group_id: str) -> Dict:
        """Delete all invitations for a specific group"""
        return await self._vortex_api_request(
            "DELETE", f"/invitations/by-group/{_segment(group_type)}/{_segment(group_id)}"
        )

    def delete_invitations_by_group_sync(self, group_type: str, group_id: str) -> Dict:
        return self._vortex_api_request_sync(
            "DELETE", f"/invitations/by-group/{_segment(group_type)}/{_segment(group_id)}"
        )

    # ─── Backend-created invitations ───────────────────────────────────

    async def create_invitation(
        self,
        widget_configuration_id: str,
        target: Union[CreateInvitationTarget, Dict[str, Any]],
        inviter: Union[Inviter, Dict[str, Any]],
        groups: Optional[List[Union[CreateInvitationGroup, Dict[str, str]]]] = None,
        source: Optional[str] = None,
        subtype: Optional[str] = None,
        template_variables: Optional[Dict[str, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        unfurl_config: Optional[Union[UnfurlConfig, Dict[str, Any]]] = None,
    ) -> CreateInvitationResponse:
        """
        Create an invitation from your backend, authenticated by the API key
        alone (no user JWT). Useful for admin-initiated or "People You May
        Know" flows.

        Args:
            widget_configuration_id: The widget configuration ID to use
            target: Who is invited; type 'email', 'phone' or 'internal'
            inviter: The inviting user; user_id is required
            groups: Optional groups/scopes to attach
            source: Optional analytics source (server defaults to 'api')
            subtype: Optional invitation subtype
            template_variables: Optional email template variables
            metadata: Optional metadata passed through to webhooks
            unfurl_config: Optional link-preview data

        Example:
            result = await vortex.create_invitation(
                widget_configuration_id="widget-config-123",
                target={"type": "internal", "value": "internal-user-abc"},
                inviter={"user_id": "user-456"},
                source="pymk",
            )
        """
        data = _create_invitation_body(
            widget_configuration_id, target, inviter, groups, source, subtype,
            template_variables, metadata, unfurl_config,
        )
        response = await self._vortex_api_request("POST", "/invitations", data=data)
        return CreateInvitationResponse(**response)

    def create_invitation_sync(
        self,
        widget_configuration_id: str,
        target: Union[CreateInvitationTarget, Dict[str, Any]],
        inviter: Union[Inviter, Dict[str, Any]],
        groups: Optional[List[Union[CreateInvitationGroup, Dict[str, str]]]] = None,
        source: Optional[str] = None,
        subtype: Optional[str] = None,
        template_variables: Optional[Dict[str, str]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        unfurl_config: Optional[Union[UnfurlConfig, Dict[str, Any]]] = None,
    ) -> CreateInvitationResponse:
        """See :meth:`create_invitation`."""
        data = _create_invitation_body(
            widget_configuration_id, target, inviter, groups, source, subtype,
            template_variables, metadata, unfurl_config,
        )
        response = self._vortex_api_request_sync("POST", "/invitations", data=data)
        return CreateInvitationResponse(**response)

    # ─── Autojoin ──────────────────────────────────────────────────────

    async def get_autojoin_domains(
        self, scope_type: str, scope: str
    ) -> AutojoinDomainsResponse:
        """
        Get autojoin domains configured for a scope

        Example:
            result = await vortex.get_autojoin_domains("organization", "acme-org")
        """
        response = await self._vortex_api_request(
            "GET", f"/invitations/by-scope/{_segment(scope_type)}/{_segment(scope)}/autojoin"
        )
        return AutojoinDomainsResponse(**response)

    def get_autojoin_domains_sync(
        self, scope_type: str, scope: str
    ) -> AutojoinDomainsResponse:
        response = self._vortex_api_request_sync(
            "GET", f"/invitations/by-scope/{_segment(scope_type)}/{_segment(scope)}/autojoin"
        )
        return AutojoinDomainsResponse(**response)

    async def configure_autojoin(
        self,
        scope: str,
        scope_type: str,
        domains: List[str],
        widget_id: str,
        scope_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AutojoinDomainsResponse:
        """
        Sync the autojoin domains of a scope.

        Domains missing from ``domains`` are removed; an empty list
        deactivates the scope's autojoin invitation.
        """
        request = ConfigureAutojoinRequest(
            scope=scope,
            scope_type=scope_type,
            domains=domains,
            widget_id=widget_id,
            scope_name=scope_name,
            metadata=metadata,
        )
        response = await self._vortex_api_request(
            "POST", "/invitations/autojoin", data=request.model_dump(by_alias=True, exclude_none=True)
        )
        return AutojoinDomainsResponse(**response)

    def configure_autojoin_sync(
        self,
        scope: str,
        scope_type: str,
        domains: List[str],
        widget_id: str,
        scope_name: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> AutojoinDomainsResponse:
        request = ConfigureAutojoinRequest(
            scope=scope,
            scope_type=scope_type,
            domains=domains,
            widget_id=widget_id,
            scope_name=scope_name,
            metadata=metadata,
        )
        response = self._vortex_api_request_sync(
            "POST", "/invitations/autojoin", data=request.model_dump(by_alias=True, exclude_none=True)
        )
        return AutojoinDomainsResponse(**response)

    # ─── Internal invitations ──────────────────────────────────────────

    async def sync_internal_invitation(
        self, creator_id: str, target_value: str, action: str, component_id: str
    ) -> SyncInternalInvitationResponse:
        """
        Tell Vortex an internal invitation was accepted or declined in your app.

        Args:
            creator_id: The inviter's user ID
            target_value: The invitee's user ID
            action: "accepted" or "declined"
            component_id: The widget component UUID
        """
        request = SyncInternalInvitationRequest(
            creator_id=creator_id,
            target_value=target_value,
            action=action,
            component_id=component_id,
        )
        response = await self._vortex_api_request(
            "POST",
            "/invitation-actions/sync-internal-invitation",
            data=request.model_dump(by_alias=True),
        )
        return SyncInternalInvitationResponse(**response)

    def sync_internal_invitation_sync(
        self, creator_id: str, target_value: str, action: str, component_id: str
    ) -> SyncInternalInvitationResponse:
        request = SyncInternalInvitationRequest(
            creator_id=creator_id,
            target_value=target_value,
            action=action,
            component_id=component_id,
        )
        response = self._vortex_api_request_sync(
            "POST",
            "/invitation-actions/sync-internal-invitation",
            data=request.model_dump(by_alias=True),
        )
        return SyncInternalInvitationResponse(**response)

    # ─── Lifecycle ─────────────────────────────────────────────────────

    async def close(self) -> None:
        await self._client.aclose()

    def close_sync(self) -> None:
        self._sync_client.close()

    async def __aenter__(self) -> "Vortex":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    def __enter__(self) -> "Vortex":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close_sync()
