"""
Vortex JWT generation.

Tokens are HS256 JWTs whose bytes must match what the other Vortex SDKs
produce for the same inputs, so header and payload are kept as ordered
lists of ``(key, value)`` pairs and serialized in exactly that order.

Header fields: iat, alg, typ, kid.
Payload fields: userId, userEmail, expires, then userName, userAvatarUrl,
adminScopes, allowedEmailDomains when set, then any extra properties.
"""

import hashlib
import hmac
import json
import logging
import time
from typing import Any, Dict, List, Mapping, Optional, Tuple, Union

from pydantic import BaseModel, ValidationError

from .errors import InvalidInputError, SigningError
from .keys import b64url_encode, derive_signing_key, parse_api_key
from .types import LegacyJwtPayload, User

logger = logging.getLogger(__name__)

TOKEN_LIFETIME_SECONDS = 3600

Pairs = List[Tuple[str, Any]]
JwtSubject = Union[User, LegacyJwtPayload, Dict[str, Any]]


def _put(pairs: Pairs, key: str, value: Any) -> None:
    # Same key again keeps its original position, like an insertion-ordered map
    for i, (existing, _) in enumerate(pairs):
        if existing == key:
            pairs[i] = (key, value)
            return
    pairs.append((key, value))


def _json_default(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(by_alias=True, exclude_none=True)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def _compact_json(value: Any) -> str:
    try:
        return json.dumps(
            value, separators=(",", ":"), ensure_ascii=False, default=_json_default
        )
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"JWT claims must be JSON serializable: {e}") from e


def encode_segment(pairs: Pairs) -> str:
    """Serialize ordered pairs to compact JSON and base64url encode it."""
    members = ",".join(
        f"{_compact_json(key)}:{_compact_json(value)}" for key, value in pairs
    )
    return b64url_encode(("{" + members + "}").encode("utf-8"))


def sign(signing_input: str, signing_key: bytes) -> str:
    """HMAC-SHA256 ``signing_input`` and return the base64url signature."""
    try:
        digest = hmac.new(signing_key, signing_input.encode("utf-8"), hashlib.sha256).digest()
    except (TypeError, ValueError) as e:
        raise SigningError(f"Failed to sign JWT: {e}") from e
    return b64url_encode(digest)


def build_header(kid: str, iat: int) -> Pairs:
    return [("iat", iat), ("alg", "HS256"), ("typ", "JWT"), ("kid", kid)]


def _add_extras(pairs: Pairs, extra: Optional[Mapping[str, Any]]) -> None:
    if not extra:
        return
    for key, value in extra.items():
        if key == "user":
            continue
        _put(pairs, key, value)


def build_payload(
    user: User, expires: int, extra: Optional[Mapping[str, Any]] = None
) -> Pairs:
    """Build the payload pairs for the current (userEmail based) token format."""
    pairs: Pairs = [
        ("userId", user.id),
        ("userEmail", user.email),
        ("expires", expires),
    ]

    if user.user_name:
        pairs.append(("userName", user.user_name))
    if user.user_avatar_url:
        pairs.append(("userAvatarUrl", user.user_avatar_url))
    if user.admin_scopes:
        pairs.append(("adminScopes", list(user.admin_scopes)))
    # domain-restricted invitations
    if user.allowed_email_domains:
        pairs.append(("allowedEmailDomains", list(user.allowed_email_domains)))

    _add_extras(pairs, user.model_extra)
    _add_extras(pairs, extra)
    return pairs


def build_legacy_payload(
    payload: LegacyJwtPayload, expires: int, extra: Optional[Mapping[str, Any]] = None
) -> Pairs:
    """
    Build the payload pairs for the deprecated identifiers/groups/role format.

    Order is userId, groups, role, expires, identifiers; groups and role are
    left out when unset.
    """
    pairs: Pairs = [("userId", payload.user_id)]

    if payload.groups is not None:
        pairs.append(
            ("groups", [g.model_dump(by_alias=True, exclude_none=True) for g in payload.groups])
        )
    if payload.role is not None:
        pairs.append(("role", payload.role))

    pairs.append(("expires", expires))
    pairs.append(("identifiers", [i.model_dump() for i in payload.identifiers]))

    if payload.attributes:
        pairs.append(("attributes", payload.attributes))

    _add_extras(pairs, extra)
    return pairs


def _coerce_subject(subject: JwtSubject) -> Union[User, LegacyJwtPayload]:
    if isinstance(subject, (User, LegacyJwtPayload)):
        return subject
    if not isinstance(subject, Mapping):
        raise InvalidInputError(
            f"user must be a User, LegacyJwtPayload or dict, got {type(subject).__name__}"
        )

    try:
        if "identifiers" in subject and "email" not in subject:
            return LegacyJwtPayload(**subject)
        return User(**subject)
    except ValidationError as e:
        raise InvalidInputError(f"Invalid user for JWT generation: {e}") from e


def generate_jwt(
    api_key: str,
    user: JwtSubject,
    extra: Optional[Mapping[str, Any]] = None,
    now: Optional[int] = None,
) -> str:
    """
    Generate a signed JWT for ``user`` using the given Vortex API key.

    Args:
        api_key: Raw ``VRTX.{encodedId}.{key}`` API key
        user: ``User`` (or a dict with 'id', 'email' and optional 'name',
              'avatar_url', 'admin_scopes', 'allowed_email_domains'), or a
              deprecated ``LegacyJwtPayload`` / dict with 'identifiers'
        extra: Additional properties appended to the payload
        now: Unix time in seconds to issue the token at (defaults to now)

    Returns:
        JWT token string

    Raises:
        InvalidInputError: If required user fields are missing or an extra
            property is not JSON serializable
        MalformedApiKeyError: If the API key cannot be parsed
        SigningError: If the HMAC primitive fails
    """
    subject = _coerce_subject(user)

    if isinstance(subject, User):
        if not subject.id or not subject.email:
            raise InvalidInputError("User must have a non-empty 'id' and 'email'")
    else:
        logger.warning(
            "[Vortex SDK] DEPRECATED: identifiers/groups/role JWT payloads are deprecated. "
            "Pass a User with 'id' and 'email' instead."
        )
        if not subject.user_id or not subject.identifiers:
            raise InvalidInputError(
                "Legacy payload must have a non-empty 'user_id' and 'identifiers'"
            )

    parsed = parse_api_key(api_key)
    signing_key = derive_signing_key(parsed.kid, parsed.secret)

    iat = int(time.time()) if now is None else int(now)
    expires = iat + TOKEN_LIFETIME_SECONDS

    header = build_header(parsed.kid, iat)
    if isinstance(subject, User):
        payload = build_payload(subject, expires, extra)
    else:
        payload = build_legacy_payload(subject, expires, extra)

    to_sign = f"{encode_segment(header)}.{encode_segment(payload)}"
    token = f"{to_sign}.{sign(to_sign, signing_key)}"

    logger.debug("Generated JWT with kid=%s expiring at %d", parsed.kid, expires)
    return token
