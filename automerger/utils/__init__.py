"""Utility functions."""

from .logging import (
    setup_logging,
    get_logger,
    log_group,
    running_in_actions,
    workflow_command,
)

__all__ = [
    "setup_logging",
    "get_logger",
    "log_group",
    "running_in_actions",
    "workflow_command",
]
