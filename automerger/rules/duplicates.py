"""Duplicate-submission rule: one open PR per author at a time."""

from ..models import EvaluationInputs, RuleOutcome
from .base import Rule


class DuplicateSubmissionRule(Rule):
    """The author must have no other open pull request in the repository."""

    name = "duplicate-submission"
    description = "Author has no other open pull request"

    def evaluate(self, inputs: EvaluationInputs) -> RuleOutcome:
        pr = inputs.pull_request
        search = inputs.author_pull_requests

        if search.author != pr.author:
            return self.fail(f"search was for {search.author}, but the PR author is {pr.author}")

        others = search.others(exclude_number=pr.number)
        if others:
            numbers = ", ".join(f"#{item.number}" for item in others)
            return self.fail(f"{pr.author} has other open pull requests: {numbers}")
        return self.ok()
