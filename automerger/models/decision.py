"""Decision, merge and outcome models."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class RuleOutcome:
    """Result of evaluating one eligibility rule."""
    rule: str
    passed: bool
    reason: str = ""

    @classmethod
    def ok(cls, rule: str) -> "RuleOutcome":
        return cls(rule=rule, passed=True)

    @classmethod
    def fail(cls, rule: str, reason: str) -> "RuleOutcome":
        return cls(rule=rule, passed=False, reason=reason)

    def __str__(self) -> str:
        if self.passed:
            return f"{self.rule}: passed"
        return f"{self.rule}: {self.reason}"


@dataclass(frozen=True)
class Verdict:
    """
    The aggregated decision for one evaluation.

    Outcomes are kept in the fixed rule order, so ``reasons`` is
    reproducible across runs.
    """
    outcomes: Tuple[RuleOutcome, ...]

    @property
    def eligible(self) -> bool:
        return all(outcome.passed for outcome in self.outcomes)

    @property
    def failures(self) -> List[RuleOutcome]:
        return [outcome for outcome in self.outcomes if not outcome.passed]

    @property
    def reasons(self) -> List[str]:
        return [str(outcome) for outcome in self.failures]


class MergeStatus(Enum):
    """Terminal state reported by the merge mutation."""
    MERGED = "merged"
    ALREADY_MERGED = "already_merged"
    ALREADY_CLOSED = "already_closed"


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge mutation."""
    pr_number: int
    status: MergeStatus
    commit_sha: Optional[str] = None
    merged_at: Optional[datetime] = None
    message: str = ""

    @property
    def merged_now(self) -> bool:
        return self.status == MergeStatus.MERGED


class OutcomeKind(Enum):
    """Externally visible result of a pipeline run."""
    MERGED = "merged"
    ALREADY_SATISFIED = "already_satisfied"  # Already merged or closed elsewhere
    INELIGIBLE = "ineligible"
    DRY_RUN = "dry_run"                      # Eligible, merge skipped on request
    OPERATIONAL_FAILURE = "operational_failure"


@dataclass(frozen=True)
class PipelineOutcome:
    """Terminal state of one automerger invocation."""
    kind: OutcomeKind
    pr_number: int
    verdict: Optional[Verdict] = None
    merge_result: Optional[MergeResult] = None
    error: Optional[str] = None
    retryable: bool = False

    @property
    def exit_code(self) -> int:
        """Only operational failures fail the job; ineligibility is expected."""
        return 1 if self.kind == OutcomeKind.OPERATIONAL_FAILURE else 0

    @property
    def headline(self) -> str:
        if self.kind == OutcomeKind.MERGED:
            return f"PR #{self.pr_number} merged"
        if self.kind == OutcomeKind.ALREADY_SATISFIED:
            status = self.merge_result.status.value if self.merge_result else "already_merged"
            return f"PR #{self.pr_number} needs no merge ({status.replace('_', ' ')})"
        if self.kind == OutcomeKind.INELIGIBLE:
            return f"PR #{self.pr_number} is not eligible for automatic merge"
        if self.kind == OutcomeKind.DRY_RUN:
            return f"PR #{self.pr_number} is eligible (dry run, not merged)"
        retry = "retryable" if self.retryable else "not retryable"
        return f"PR #{self.pr_number}: automerge failed ({retry}): {self.error}"

    def summary(self) -> str:
        """Generate a markdown summary for the job page."""
        icons = {
            OutcomeKind.MERGED: "✅",
            OutcomeKind.ALREADY_SATISFIED: "☑️",
            OutcomeKind.INELIGIBLE: "⏸️",
            OutcomeKind.DRY_RUN: "🧪",
            OutcomeKind.OPERATIONAL_FAILURE: "❌",
        }
        lines = [f"## Automerge: {icons[self.kind]} {self.headline}", ""]

        if self.verdict is not None:
            lines.append("### Rules")
            for outcome in self.verdict.outcomes:
                icon = "✅" if outcome.passed else "❌"
                detail = "" if outcome.passed else f": {outcome.reason}"
                lines.append(f"- {icon} {outcome.rule}{detail}")

        if self.merge_result is not None and self.merge_result.commit_sha:
            lines.append("")
            lines.append(f"Merge commit: `{self.merge_result.commit_sha}`")

        if self.kind == OutcomeKind.OPERATIONAL_FAILURE and self.retryable:
            lines.append("")
            lines.append("This failure is transient; re-run the workflow to try again.")

        return "\n".join(lines)
