"""Eligibility rules.

The rule set is fixed: ``build_rules`` returns the same four rules in the
same order every time, so failure reasons are reported deterministically.
Configuration only tunes their parameters.
"""

from typing import List

from ..config import AutomergeConfig
from .base import Rule
from .scope import PathAllowList, ScopeRule
from .content import ContentRule
from .ci_status import CIStatusRule
from .duplicates import DuplicateSubmissionRule


def build_rules(config: AutomergeConfig) -> List[Rule]:
    """Create the canonical rule set in evaluation order."""
    allow_list = PathAllowList(config.allowed_paths)
    return [
        ScopeRule(allow_list, max_changed_files=config.max_changed_files, base_branch=config.base_branch),
        ContentRule(allow_list),
        CIStatusRule(
            required_checks=config.required_checks,
            ignored_checks=config.ignored_checks,
            accepted_conclusions=config.accepted_conclusions,
        ),
        DuplicateSubmissionRule(),
    ]


__all__ = [
    "Rule",
    "PathAllowList",
    "ScopeRule",
    "ContentRule",
    "CIStatusRule",
    "DuplicateSubmissionRule",
    "build_rules",
]
