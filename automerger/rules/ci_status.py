"""CI status rule: required checks must have completed successfully."""

from typing import Iterable, List

from ..models import EvaluationInputs, RuleOutcome
from .base import Rule


class CIStatusRule(Rule):
    """
    Every required check must be completed with an accepted conclusion.

    Pending checks fail the rule; the automerger does not wait; it is
    re-run by the workflow when the checks finish. Without an explicit
    required list, every check reported on the head commit is required
    (minus the ignored ones), and a commit with no checks at all fails.
    """

    name = "ci-status"
    description = "All required CI checks passed"

    def __init__(
        self,
        required_checks: Iterable[str] = (),
        ignored_checks: Iterable[str] = (),
        accepted_conclusions: Iterable[str] = ("success",),
    ):
        self.required_checks = tuple(required_checks)
        self.ignored_checks = frozenset(ignored_checks)
        self.accepted_conclusions = frozenset(accepted_conclusions)

    def evaluate(self, inputs: EvaluationInputs) -> RuleOutcome:
        check_runs = inputs.check_runs
        if check_runs.head_sha != inputs.pull_request.head_sha:
            return self.fail(
                f"check runs belong to {check_runs.head_sha[:7]}, "
                f"not head commit {inputs.pull_request.head_sha[:7]}"
            )

        latest = check_runs.latest()
        if self.required_checks:
            required = list(self.required_checks)
        else:
            required = [name for name in check_runs.names if name not in self.ignored_checks]
            if not required:
                return self.fail("no CI checks reported for the head commit")

        missing: List[str] = []
        pending: List[str] = []
        failed: List[str] = []
        for name in required:
            run = latest.get(name)
            if run is None:
                missing.append(name)
            elif not run.is_completed:
                pending.append(f"{name} ({run.status})")
            elif run.conclusion not in self.accepted_conclusions:
                failed.append(f"{name} ({run.conclusion or 'no conclusion'})")

        problems = []
        if failed:
            problems.append(f"failed: {', '.join(failed)}")
        if pending:
            problems.append(f"pending: {', '.join(pending)}")
        if missing:
            problems.append(f"missing: {', '.join(missing)}")

        if problems:
            return self.fail("; ".join(problems))
        return self.ok()
