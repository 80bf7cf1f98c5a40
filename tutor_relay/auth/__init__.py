"""Signed session token mint/verify."""

from .tokens import TokenPayload, mint_token, verify_token, mint_session_token

__all__ = ["TokenPayload", "mint_token", "mint_session_token", "verify_token"]
