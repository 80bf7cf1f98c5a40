"""Tool execution exceptions."""


class ToolExecutionError(Exception):
    """Raised by tool handlers for expected, user-visible failures.

    The executor boundary converts it (and any other exception) into an
    ``{"ok": False, "error": ...}`` result.
    """

    def __init__(self, tool_name: str, message: str) -> None:
        super().__init__(message)
        self.tool_name = tool_name
        self.message = message


__all__ = ["ToolExecutionError"]
