"""
Vortex API key handling.

An API key has the shape ``VRTX.{encodedId}.{key}`` where ``encodedId`` is
the base64url (unpadded) encoding of a 16-byte UUID and ``key`` is the
secret used to derive per-token signing keys.

Example::

    parsed = parse_api_key("VRTX.8mNyMrlnR5O7qj6HNxkHmg.test-signing-key")
    parsed.kid  # 'f2637232-b967-4793-bbaa-3e873719079a'
    signing_key = derive_signing_key(parsed.kid, parsed.secret)
"""

import base64
import binascii
import hashlib
import hmac
import re
import uuid
from typing import NamedTuple

from .errors import MalformedApiKeyError, SigningError

API_KEY_PREFIX = "VRTX"

_B64URL_RE = re.compile(r"[A-Za-z0-9_-]*")


class ParsedApiKey(NamedTuple):
    kid: str
    secret: bytes

    def __repr__(self) -> str:
        # keep the secret out of tracebacks and debug output
        return f"ParsedApiKey(kid={self.kid!r}, secret=<redacted>)"


def b64url_encode(data: bytes) -> str:
    """Base64url encode ``data`` without ``=`` padding."""
    return base64.urlsafe_b64encode(data).decode("ascii").rstrip("=")


def b64url_decode(text: str) -> bytes:
    """Decode unpadded base64url text, rejecting characters outside the alphabet."""
    if not _B64URL_RE.fullmatch(text):
        raise ValueError("not unpadded base64url")
    return base64.urlsafe_b64decode(text + "=" * (-len(text) % 4))


def parse_api_key(api_key: str) -> ParsedApiKey:
    """
    Split a ``VRTX.{encodedId}.{key}`` API key into its key id and secret.

    Raises:
        MalformedApiKeyError: If the key does not have three segments, has the
            wrong prefix, or the id does not decode to exactly 16 bytes.
    """
    if not isinstance(api_key, str):
        raise MalformedApiKeyError("API key must be a string")

    parts = api_key.split(".")
    if len(parts) != 3:
        raise MalformedApiKeyError(
            f"Invalid API key format. Expected: {API_KEY_PREFIX}.{{encodedId}}.{{key}}"
        )

    prefix, encoded_id, key = parts
    if prefix != API_KEY_PREFIX:
        raise MalformedApiKeyError(f"Invalid API key prefix. Expected: {API_KEY_PREFIX}")

    try:
        id_bytes = b64url_decode(encoded_id)
    except (binascii.Error, ValueError) as e:
        raise MalformedApiKeyError(f"Invalid key id encoding in API key: {e}") from e

    if len(id_bytes) != 16:
        raise MalformedApiKeyError(
            f"Invalid key id in API key: expected 16 bytes, got {len(id_bytes)}"
        )

    return ParsedApiKey(kid=str(uuid.UUID(bytes=id_bytes)), secret=key.encode("utf-8"))


def derive_signing_key(kid: str, secret: bytes) -> bytes:
    """Derive the per-token signing key: HMAC-SHA256(key=secret, msg=kid)."""
    try:
        return hmac.new(secret, kid.encode("utf-8"), hashlib.sha256).digest()
    except (TypeError, ValueError) as e:
        raise SigningError(f"Failed to derive signing key: {e}") from e
