"""Stage 2: Decide - Evaluate every rule and aggregate the verdict."""

from typing import List, Sequence

from ..models import EvaluationInputs, RuleOutcome, Verdict
from ..rules import Rule
from ..utils import get_logger


def evaluate_rule(rule: Rule, inputs: EvaluationInputs) -> RuleOutcome:
    """Run one rule; an unexpected exception counts as a failure."""
    logger = get_logger()
    try:
        outcome = rule.evaluate(inputs)
    except Exception as e:
        logger.error(f"Rule {rule.name} raised {e.__class__.__name__}: {e}")
        return RuleOutcome.fail(rule.name, f"rule could not be evaluated: {e}")

    logger.info(f"Rule {outcome}")
    return outcome


def decide(rules: Sequence[Rule], inputs: EvaluationInputs) -> Verdict:
    """
    All-must-pass aggregation.

    Every rule is evaluated even after a failure so the verdict lists
    all reasons, in the order of ``rules``.

    Args:
        rules: Rule set in reporting order
        inputs: Snapshot from stage 1

    Returns:
        Verdict; eligible iff every rule passed

    Raises:
        ValueError: If no rules are given
    """
    if not rules:
        raise ValueError("Refusing to decide with an empty rule set")

    outcomes: List[RuleOutcome] = [evaluate_rule(rule, inputs) for rule in rules]
    verdict = Verdict(outcomes=tuple(outcomes))

    logger = get_logger()
    if verdict.eligible:
        logger.info(f"Verdict: eligible ({len(outcomes)} rules passed)")
    else:
        logger.info(f"Verdict: ineligible ({len(verdict.failures)} of {len(outcomes)} rules failed)")
    return verdict
