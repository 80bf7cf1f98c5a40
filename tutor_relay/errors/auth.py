"""Session token exceptions."""


class TokenError(Exception):
    """Signed session token failed verification.

    Attributes:
        reason: Short machine-readable reason (malformed, bad_signature,
            bad_payload, expired, session_mismatch).
    """

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason
        self.message = message


__all__ = ["TokenError"]
