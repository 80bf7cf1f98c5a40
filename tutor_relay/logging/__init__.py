"""Logging helpers and context utilities."""

from .context import (
    UNSET,
    LOG_FIELDS,
    log_context,
    set_log_context,
    reset_log_context,
    configure_logging,
    current_log_context,
    install_log_context,
)

__all__ = [
    "LOG_FIELDS",
    "UNSET",
    "configure_logging",
    "current_log_context",
    "install_log_context",
    "log_context",
    "reset_log_context",
    "set_log_context",
]
