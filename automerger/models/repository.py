"""Snapshot models for data read from the repository host."""

from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Mapping, Optional, Tuple


@dataclass(frozen=True)
class PullRequest:
    """A pull request as fetched once at the start of an evaluation."""
    node_id: str          # Stable GraphQL id, used for the merge mutation
    number: int           # Display number, never used for mutation
    author: str
    head_sha: str
    head_ref: str
    base_ref: str         # Target branch
    title: str = ""
    state: str = "open"   # open, closed
    merged: bool = False
    draft: bool = False
    html_url: str = ""

    @property
    def is_open(self) -> bool:
        return self.state == "open" and not self.merged


@dataclass(frozen=True)
class ChangedFile:
    """One entry of a pull request's file list."""
    path: str
    status: str = "modified"  # added, modified, removed, renamed, copied, changed, unchanged
    additions: int = 0
    deletions: int = 0
    previous_path: Optional[str] = None  # Set for renames
    patch: Optional[str] = None

    @property
    def is_removed(self) -> bool:
        return self.status == "removed"

    @property
    def is_renamed(self) -> bool:
        return self.status == "renamed"


@dataclass(frozen=True)
class ChangedFileSet:
    """Ordered set of files changed by a pull request."""
    files: Tuple[ChangedFile, ...] = ()

    def __iter__(self) -> Iterator[ChangedFile]:
        return iter(self.files)

    def __len__(self) -> int:
        return len(self.files)

    @property
    def paths(self) -> List[str]:
        return [f.path for f in self.files]

    @property
    def total_additions(self) -> int:
        return sum(f.additions for f in self.files)

    @property
    def total_deletions(self) -> int:
        return sum(f.deletions for f in self.files)


@dataclass(frozen=True)
class RepositoryFileSnapshot:
    """Content of a tracked file at a specific ref."""
    path: str
    ref: str
    content: str
    sha: str = ""


@dataclass(frozen=True)
class CheckRun:
    """A single CI check result recorded against a commit."""
    name: str
    status: str                       # queued, in_progress, completed, waiting, requested, pending
    conclusion: Optional[str] = None  # success, failure, neutral, cancelled, skipped, timed_out, ...
    id: int = 0
    app: Optional[str] = None

    @property
    def is_completed(self) -> bool:
        return self.status == "completed"


@dataclass(frozen=True)
class CheckRunSet:
    """All check runs recorded against the PR's head commit."""
    head_sha: str
    runs: Tuple[CheckRun, ...] = ()

    def latest(self) -> Dict[str, CheckRun]:
        """
        Most recent run per check name.

        Re-running a check creates a new run with a higher id, which
        supersedes the earlier attempts.
        """
        latest: Dict[str, CheckRun] = {}
        for run in self.runs:
            current = latest.get(run.name)
            if current is None or run.id > current.id:
                latest[run.name] = run
        return latest

    @property
    def names(self) -> List[str]:
        return sorted(self.latest())


@dataclass(frozen=True)
class OpenPullRequestRef:
    """A search hit: another open pull request."""
    number: int
    title: str = ""
    html_url: str = ""


@dataclass(frozen=True)
class AuthorPullRequestSearchResult:
    """Open pull requests by one author in one repository."""
    author: str
    repository: str
    items: Tuple[OpenPullRequestRef, ...] = ()

    def others(self, exclude_number: int) -> List[OpenPullRequestRef]:
        """Hits other than the given pull request."""
        return [item for item in self.items if item.number != exclude_number]


@dataclass(frozen=True)
class EvaluationInputs:
    """Everything the rules may look at, read once per evaluation."""
    pull_request: PullRequest
    changed_files: ChangedFileSet
    check_runs: CheckRunSet
    author_pull_requests: AuthorPullRequestSearchResult
    snapshots: Mapping[str, RepositoryFileSnapshot] = field(default_factory=dict)
