"""Centralized exception classes for the relay.

Organization:
    - protocol.py: Client frame violations with error codes
    - upstream.py: Upstream connection and outbound allow-list errors
    - tool.py: Tool handler failures
    - auth.py: Signed session token failures
    - scenario.py: Unknown or malformed scenario content
    - classify.py: Exception-to-telemetry label mapping
"""

from .auth import TokenError
from .tool import ToolExecutionError
from .classify import classify_error
from .protocol import ProtocolError
from .upstream import DisallowedEventError, UpstreamUnavailableError
from .scenario import ScenarioNotFoundError, ScenarioValidationError

__all__ = [
    "ProtocolError",
    "UpstreamUnavailableError",
    "DisallowedEventError",
    "ToolExecutionError",
    "TokenError",
    "ScenarioNotFoundError",
    "ScenarioValidationError",
    "classify_error",
]
