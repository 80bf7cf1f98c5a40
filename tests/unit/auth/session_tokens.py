"""Unit tests for signed session tokens."""

from __future__ import annotations

import pytest

from tutor_relay.errors import TokenError
from tutor_relay.auth.tokens import TokenPayload, mint_token, verify_token, mint_session_token

_SECRET = "test-secret"


def _reason(token: str, **kwargs) -> str:
    with pytest.raises(TokenError) as excinfo:
        verify_token(token, _SECRET, **kwargs)
    return excinfo.value.reason


def test_minted_token_verifies() -> None:
    token, payload = mint_session_token("sess-1", "a1-ordering-coffee", _SECRET, ttl_s=60, now=1_000)

    assert payload == TokenPayload(session_key="sess-1", scenario_id="a1-ordering-coffee", exp=1_060)
    assert token.count(".") == 2
    assert verify_token(token, _SECRET, session_key="sess-1", now=1_030) == payload


def test_expired_token_is_rejected() -> None:
    token, _ = mint_session_token("sess-1", None, _SECRET, ttl_s=60, now=1_000)
    assert _reason(token, now=1_061) == "expired"


def test_wrong_secret_or_tampered_payload_is_rejected() -> None:
    token, _ = mint_session_token("sess-1", None, _SECRET, ttl_s=60, now=1_000)
    with pytest.raises(TokenError) as excinfo:
        verify_token(token, "other-secret", now=1_000)
    assert excinfo.value.reason == "bad_signature"

    other, _ = mint_session_token("sess-2", None, _SECRET, ttl_s=60, now=1_000)
    header, _, signature = token.split(".")
    forged = ".".join([header, other.split(".")[1], signature])
    assert _reason(forged, now=1_000) == "bad_signature"


def test_token_for_other_session_is_rejected() -> None:
    token, _ = mint_session_token("sess-1", None, _SECRET, ttl_s=60, now=1_000)
    assert _reason(token, session_key="sess-2", now=1_000) == "session_mismatch"


def test_malformed_tokens() -> None:
    assert _reason("") == "malformed"
    assert _reason("a.b") == "malformed"
    assert _reason("a..c") == "malformed"


def test_minting_requires_a_secret() -> None:
    with pytest.raises(ValueError):
        mint_token(TokenPayload(session_key="k", scenario_id=None, exp=1), "")
