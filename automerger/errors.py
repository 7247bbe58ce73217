"""Exception types for remote and configuration failures.

Rule failures are never exceptions; they are reported as data on the
Verdict. Everything here is an operational problem that aborts a run.
"""

from typing import Optional


class AutomergeError(Exception):
    """Base exception for all automerger errors."""


class ConfigurationError(AutomergeError, ValueError):
    """Raised when required settings are missing or invalid."""


class RemoteError(AutomergeError):
    """
    A call to the repository host failed.

    Attributes:
        message: Human-readable description
        status: HTTP status reported by the host, if any
        retryable: Whether the invoking scheduler should try again later
    """

    retryable = False

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)


class RemoteUnavailable(RemoteError):
    """Transient failure: network, timeout, rate limit or 5xx."""

    retryable = True


class TargetNotFound(RemoteError):
    """The requested pull request, commit or file does not exist."""


class RemoteRejected(RemoteError):
    """The host refused the request (bad credentials, missing permission, 4xx)."""


class MalformedResponse(RemoteError):
    """The host answered, but with data we cannot interpret."""


class MergeRejected(RemoteError):
    """The merge mutation was refused because the PR is not mergeable."""
