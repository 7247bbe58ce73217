"""Base class for eligibility rules."""

from abc import ABC, abstractmethod

from ..models import EvaluationInputs, RuleOutcome


class Rule(ABC):
    """
    Abstract base class for all eligibility rules.

    A rule is a pure predicate over an EvaluationInputs snapshot. It must
    not mutate its inputs, keep state between evaluations, or raise for a
    negative answer: a violation is reported as ``RuleOutcome.fail``.
    """

    name: str = ""
    description: str = ""

    def ok(self) -> RuleOutcome:
        return RuleOutcome.ok(self.name)

    def fail(self, reason: str) -> RuleOutcome:
        return RuleOutcome.fail(self.name, reason)

    @abstractmethod
    def evaluate(self, inputs: EvaluationInputs) -> RuleOutcome:
        """
        Evaluate the rule.

        Args:
            inputs: Snapshot of everything fetched for the pull request

        Returns:
            RuleOutcome indicating pass/fail with a reason
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
