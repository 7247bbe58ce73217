"""Automerger: unattended merging of well-formed event submission PRs."""

from .config import AutomergeConfig
from .errors import (
    AutomergeError,
    ConfigurationError,
    RemoteError,
    RemoteUnavailable,
    TargetNotFound,
    RemoteRejected,
    MalformedResponse,
    MergeRejected,
)
from .pipeline import run_automerge, run_automerge_sync

__version__ = "0.1.0"

__all__ = [
    "AutomergeConfig",
    "AutomergeError",
    "ConfigurationError",
    "RemoteError",
    "RemoteUnavailable",
    "TargetNotFound",
    "RemoteRejected",
    "MalformedResponse",
    "MergeRejected",
    "run_automerge",
    "run_automerge_sync",
]
