"""Tests for Vortex API key parsing and signing key derivation."""

import pytest

from vortex_invites import MalformedApiKeyError, derive_signing_key, parse_api_key
from vortex_invites.keys import b64url_decode, b64url_encode

# UUID f2637232-b967-4793-bbaa-3e873719079a encoded as unpadded base64url
TEST_API_KEY = "VRTX.8mNyMrlnR5O7qj6HNxkHmg.test-signing-key"
TEST_KID = "f2637232-b967-4793-bbaa-3e873719079a"

# HMAC-SHA256(key=b"test-signing-key", msg=TEST_KID), cross-checked with openssl
TEST_SIGNING_KEY_HEX = "2f6733b18700331e063f2333c3465df7cb6e9abc80462e8bb5211f8cdc366cda"


class TestParseApiKey:
    def test_parses_kid_and_secret(self) -> None:
        parsed = parse_api_key(TEST_API_KEY)
        assert parsed.kid == TEST_KID
        assert parsed.secret == b"test-signing-key"

    def test_repr_hides_secret(self) -> None:
        assert "test-signing-key" not in repr(parse_api_key(TEST_API_KEY))

    @pytest.mark.parametrize(
        "api_key",
        [
            "invalid-key",
            "WRONG.format.key",
            "VRTX.only-two-parts",
            "VRTX.8mNyMrlnR5O7qj6HNxkHmg.key.extra",
            "vrtx.8mNyMrlnR5O7qj6HNxkHmg.test-signing-key",
            "",
        ],
    )
    def test_rejects_malformed_structure(self, api_key: str) -> None:
        with pytest.raises(MalformedApiKeyError):
            parse_api_key(api_key)

    def test_rejects_short_id(self) -> None:
        # 8 bytes instead of 16
        with pytest.raises(MalformedApiKeyError, match="16 bytes"):
            parse_api_key("VRTX.AAAAAAAAAAA.secret")

    def test_rejects_bad_alphabet(self) -> None:
        with pytest.raises(MalformedApiKeyError):
            parse_api_key("VRTX.8mNyMrlnR5O7qj6H+xkHmg.secret")

    def test_malformed_key_is_value_error(self) -> None:
        with pytest.raises(ValueError):
            parse_api_key("invalid-key")


class TestDeriveSigningKey:
    def test_matches_reference_digest(self) -> None:
        key = derive_signing_key(TEST_KID, b"test-signing-key")
        assert len(key) == 32
        assert key.hex() == TEST_SIGNING_KEY_HEX

    def test_depends_on_kid(self) -> None:
        other = derive_signing_key("00000000-0000-0000-0000-000000000000", b"test-signing-key")
        assert other.hex() != TEST_SIGNING_KEY_HEX


class TestBase64Url:
    def test_encode_strips_padding(self) -> None:
        assert b64url_encode(b"\xfb\xff") == "-_8"

    def test_decode_restores_padding(self) -> None:
        assert b64url_decode("-_8") == b"\xfb\xff"
