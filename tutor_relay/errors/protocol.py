"""Client protocol violations with structured error codes.

Raised while parsing or validating client frames. Each carries a
machine-readable ``error_code`` that is sent back to the client in a
``server.error`` event; the connection itself stays open.
"""


class ProtocolError(Exception):
    """Structured client protocol failure with error code metadata.

    Attributes:
        error_code: Machine-parseable error identifier.
        message: Human-readable error description.
    """

    def __init__(self, error_code: str, message: str) -> None:
        super().__init__(message)
        self.error_code = error_code
        self.message = message


__all__ = ["ProtocolError"]
