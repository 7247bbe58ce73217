"""Configuration for the automerger."""

from dataclasses import dataclass
from typing import Optional, Tuple
import json
import os

from .errors import ConfigurationError


MERGE_METHODS = {
    "merge": "MERGE",
    "squash": "SQUASH",
    "rebase": "REBASE",
}

DEFAULT_ALLOWED_PATHS = ("_data/events/*.json",)


def _split_list(value: Optional[str]) -> Tuple[str, ...]:
    """Parse a comma separated env value into a tuple of non-empty items."""
    if not value:
        return ()
    return tuple(item.strip() for item in value.split(",") if item.strip())


def _env_flag(name: str, default: str = "false") -> bool:
    return os.environ.get(name, default).lower() in ("1", "true", "yes")


def _load_event(event_path: Optional[str]) -> dict:
    """Load a GitHub event payload, or an empty dict when there is none."""
    if not event_path or not os.path.isfile(event_path):
        return {}

    try:
        with open(event_path, encoding="utf-8") as f:
            payload = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigurationError(f"Cannot read event payload {event_path}: {e}") from e

    return payload if isinstance(payload, dict) else {}


def pr_number_from_event(event_path: Optional[str]) -> int:
    """
    Read the pull request number from a GitHub event payload.

    Supports ``pull_request*`` payloads (top-level ``number`` or
    ``pull_request.number``) and ``workflow_run`` payloads, which list
    the PRs of same-repository branches under ``workflow_run.pull_requests``.

    Args:
        event_path: Path to the JSON payload (GITHUB_EVENT_PATH)

    Returns:
        The PR number, or 0 when the payload has none
    """
    payload = _load_event(event_path)

    number = payload.get("number")
    if number is None and isinstance(payload.get("pull_request"), dict):
        number = payload["pull_request"].get("number")
    if number is None and isinstance(payload.get("workflow_run"), dict):
        pulls = payload["workflow_run"].get("pull_requests") or []
        if pulls and isinstance(pulls[0], dict):
            number = pulls[0].get("number")

    try:
        return int(number) if number is not None else 0
    except (TypeError, ValueError):
        raise ConfigurationError(f"Event payload has a non-numeric PR number: {number!r}")


def head_sha_from_event(event_path: Optional[str]) -> Optional[str]:
    """
    Read the head commit of a ``workflow_run`` payload.

    Fork PRs never appear in ``workflow_run.pull_requests``; the head
    commit is then the only way to find the PR the CI run belongs to.
    """
    workflow_run = _load_event(event_path).get("workflow_run")
    if isinstance(workflow_run, dict):
        return workflow_run.get("head_sha") or None
    return None


@dataclass
class AutomergeConfig:
    """Configuration for one automerger invocation."""

    # GitHub settings
    repo: str = ""
    pr_number: int = 0
    head_sha: Optional[str] = None  # Locates the PR when no number is known (fork CI runs)
    github_token: Optional[str] = None
    api_url: str = "https://api.github.com"
    timeout: int = 15  # Per-call HTTP timeout in whole seconds

    # Scope rule
    allowed_paths: Tuple[str, ...] = DEFAULT_ALLOWED_PATHS
    max_changed_files: int = 1
    base_branch: Optional[str] = None  # Required target branch (None = any)

    # CI status rule
    required_checks: Tuple[str, ...] = ()     # Empty = every observed check
    ignored_checks: Tuple[str, ...] = ()      # Usually the automerger's own job
    accepted_conclusions: Tuple[str, ...] = ("success",)

    # Merge behavior
    merge_method: Optional[str] = None  # merge, squash, rebase (None = repo default)
    dry_run: bool = False

    @classmethod
    def from_env(cls) -> "AutomergeConfig":
        """Create config from environment variables."""
        pr_number = os.environ.get("PR_NUMBER")
        event_path = os.environ.get("GITHUB_EVENT_PATH")
        ignored = _split_list(os.environ.get("AUTOMERGE_IGNORED_CHECKS"))
        if not ignored and os.environ.get("GITHUB_JOB"):
            ignored = (os.environ["GITHUB_JOB"],)

        try:
            return cls(
                repo=os.environ.get("GITHUB_REPOSITORY", ""),
                pr_number=int(pr_number) if pr_number else pr_number_from_event(event_path),
                head_sha=os.environ.get("AUTOMERGE_HEAD_SHA") or head_sha_from_event(event_path),
                github_token=os.environ.get("GITHUB_TOKEN"),
                api_url=os.environ.get("GITHUB_API_URL", "https://api.github.com"),
                timeout=int(os.environ.get("AUTOMERGE_TIMEOUT", "15")),
                allowed_paths=_split_list(os.environ.get("AUTOMERGE_ALLOWED_PATHS")) or DEFAULT_ALLOWED_PATHS,
                max_changed_files=int(os.environ.get("AUTOMERGE_MAX_CHANGED_FILES", "1")),
                base_branch=os.environ.get("AUTOMERGE_BASE_BRANCH") or None,
                required_checks=_split_list(os.environ.get("AUTOMERGE_REQUIRED_CHECKS")),
                ignored_checks=ignored,
                accepted_conclusions=_split_list(os.environ.get("AUTOMERGE_ACCEPTED_CONCLUSIONS")) or ("success",),
                merge_method=os.environ.get("AUTOMERGE_MERGE_METHOD") or None,
                dry_run=_env_flag("AUTOMERGE_DRY_RUN"),
            )
        except ValueError as e:
            if isinstance(e, ConfigurationError):
                raise
            raise ConfigurationError(f"Invalid automerger environment: {e}") from e

    @property
    def graphql_merge_method(self) -> Optional[str]:
        """Merge method as the GraphQL enum value, or None for the repo default."""
        if self.merge_method is None:
            return None
        return MERGE_METHODS[self.merge_method.lower()]

    def validate(self) -> None:
        """
        Check that the config can drive a run.

        Raises:
            ConfigurationError: On the first problem found
        """
        if not self.repo or "/" not in self.repo:
            raise ConfigurationError("Repository required in owner/repo form. Use --repo or set GITHUB_REPOSITORY")
        if self.pr_number <= 0 and not self.head_sha:
            raise ConfigurationError(
                "PR number required. Use --pr-number, set PR_NUMBER or GITHUB_EVENT_PATH, "
                "or give the head commit with --head-sha"
            )
        if not self.github_token:
            raise ConfigurationError("GitHub token required. Set GITHUB_TOKEN env var")
        if self.max_changed_files < 1:
            raise ConfigurationError("max_changed_files must be at least 1")
        if not self.allowed_paths:
            raise ConfigurationError("At least one allowed path pattern is required")
        if self.merge_method is not None and self.merge_method.lower() not in MERGE_METHODS:
            raise ConfigurationError(
                f"Unknown merge method {self.merge_method!r}; expected one of {', '.join(MERGE_METHODS)}"
            )
        if self.timeout <= 0:
            raise ConfigurationError("timeout must be positive")
