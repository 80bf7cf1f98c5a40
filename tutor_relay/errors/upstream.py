"""Upstream realtime backend exceptions."""


class UpstreamUnavailableError(Exception):
    """Raised when the upstream socket cannot be established or has gone away.

    The relay treats this as a recoverable condition: the client is told the
    session is degraded and upstream-dependent actions fail individually.
    """

    def __init__(self, message: str = "Upstream realtime backend unavailable", *, status: int | None = None):
        super().__init__(message)
        self.message = message
        self.status = status


class DisallowedEventError(Exception):
    """Raised when an event outside the outbound allow-list is about to be sent upstream."""

    def __init__(self, event_type: str) -> None:
        super().__init__(f"Event type '{event_type}' may not be sent upstream")
        self.event_type = event_type


__all__ = ["UpstreamUnavailableError", "DisallowedEventError"]
