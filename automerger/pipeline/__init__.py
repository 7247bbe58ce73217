"""Pipeline stages for automerge."""

from .stage1_fetch import fetch_inputs
from .stage2_decide import decide, evaluate_rule
from .stage3_merge import MergeExecutor
from .stage4_report import OutcomeReporter
from .runner import run_automerge, run_automerge_sync

__all__ = [
    "fetch_inputs",
    "decide",
    "evaluate_rule",
    "MergeExecutor",
    "OutcomeReporter",
    "run_automerge",
    "run_automerge_sync",
]
