"""Data models for pull request evaluation."""

from .repository import (
    PullRequest,
    ChangedFile,
    ChangedFileSet,
    RepositoryFileSnapshot,
    CheckRun,
    CheckRunSet,
    OpenPullRequestRef,
    AuthorPullRequestSearchResult,
    EvaluationInputs,
)
from .decision import (
    RuleOutcome,
    Verdict,
    MergeStatus,
    MergeResult,
    OutcomeKind,
    PipelineOutcome,
)
from .event import Event, EventDate, PhysicalLocation, Coordinates

__all__ = [
    "PullRequest",
    "ChangedFile",
    "ChangedFileSet",
    "RepositoryFileSnapshot",
    "CheckRun",
    "CheckRunSet",
    "OpenPullRequestRef",
    "AuthorPullRequestSearchResult",
    "EvaluationInputs",
    "RuleOutcome",
    "Verdict",
    "MergeStatus",
    "MergeResult",
    "OutcomeKind",
    "PipelineOutcome",
    "Event",
    "EventDate",
    "PhysicalLocation",
    "Coordinates",
]
