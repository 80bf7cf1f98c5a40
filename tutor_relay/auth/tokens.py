"""Signed session tokens.

Format: ``base64url(header).base64url(payload).base64url(signature)`` where the
signature is HMAC-SHA256 over ``header.payload`` with the shared signing
secret. The payload carries ``{sessionKey, scenarioId, exp}`` with ``exp`` in
unix seconds.
"""

from __future__ import annotations

import hmac
import json
import time
import base64
import hashlib
import binascii
from typing import Any
from dataclasses import dataclass

from ..errors.auth import TokenError

_HEADER = {"alg": "HS256", "typ": "JWT"}


@dataclass(frozen=True, slots=True)
class TokenPayload:
    session_key: str
    scenario_id: str | None
    exp: int

    def to_dict(self) -> dict[str, Any]:
        return {"sessionKey": self.session_key, "scenarioId": self.scenario_id, "exp": self.exp}


def _b64url_encode(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _b64url_decode(segment: str) -> bytes:
    padding = "=" * (-len(segment) % 4)
    return base64.urlsafe_b64decode(segment + padding)


def _sign(signing_input: str, secret: str) -> bytes:
    return hmac.new(secret.encode("utf-8"), signing_input.encode("utf-8"), hashlib.sha256).digest()


def _encode_json(value: dict[str, Any]) -> str:
    return _b64url_encode(json.dumps(value, separators=(",", ":")).encode("utf-8"))


def mint_token(payload: TokenPayload, secret: str) -> str:
    """Return a signed token for ``payload``."""
    if not secret:
        raise ValueError("A signing secret is required to mint session tokens")
    signing_input = f"{_encode_json(_HEADER)}.{_encode_json(payload.to_dict())}"
    return f"{signing_input}.{_b64url_encode(_sign(signing_input, secret))}"


def mint_session_token(
    session_key: str,
    scenario_id: str | None,
    secret: str,
    *,
    ttl_s: int,
    now: float | None = None,
) -> tuple[str, TokenPayload]:
    issued = int(now if now is not None else time.time())
    payload = TokenPayload(session_key=session_key, scenario_id=scenario_id, exp=issued + int(ttl_s))
    return mint_token(payload, secret), payload


def verify_token(
    token: str,
    secret: str,
    *,
    session_key: str | None = None,
    now: float | None = None,
) -> TokenPayload:
    """Validate ``token`` and return its payload.

    Raises:
        TokenError: With ``reason`` one of ``malformed``, ``bad_signature``,
            ``bad_payload``, ``expired`` or ``session_mismatch``.
    """
    parts = (token or "").split(".")
    if len(parts) != 3 or not all(parts):
        raise TokenError("malformed", "Malformed token")

    header, body, signature = parts
    try:
        signature_bytes = _b64url_decode(signature)
    except (binascii.Error, ValueError) as exc:
        raise TokenError("bad_signature", "Invalid signature encoding") from exc

    expected = _sign(f"{header}.{body}", secret)
    if not hmac.compare_digest(expected, signature_bytes):
        raise TokenError("bad_signature", "Invalid signature")

    try:
        data = json.loads(_b64url_decode(body).decode("utf-8"))
    except (binascii.Error, ValueError) as exc:
        raise TokenError("bad_payload", "Invalid payload encoding") from exc

    if not isinstance(data, dict) or not isinstance(data.get("sessionKey"), str):
        raise TokenError("bad_payload", "Token payload is missing sessionKey")

    exp = data.get("exp")
    current = int(now if now is not None else time.time())
    if isinstance(exp, bool) or not isinstance(exp, (int, float)) or exp < current:
        raise TokenError("expired", "Token expired")

    scenario_id = data.get("scenarioId")
    payload = TokenPayload(
        session_key=data["sessionKey"],
        scenario_id=scenario_id if isinstance(scenario_id, str) else None,
        exp=int(exp),
    )
    if session_key is not None and not hmac.compare_digest(
        payload.session_key.encode("utf-8"), session_key.encode("utf-8")
    ):
        raise TokenError("session_mismatch", "Token was issued for a different session")
    return payload


__all__ = ["TokenPayload", "mint_token", "mint_session_token", "verify_token"]
