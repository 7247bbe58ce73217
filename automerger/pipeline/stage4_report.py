"""Stage 4: Report - Surface the outcome to the invoking workflow."""

import os
import sys
from typing import Optional, TextIO

from ..models import OutcomeKind, PipelineOutcome
from ..utils import get_logger, workflow_command


class OutcomeReporter:
    """
    Maps a PipelineOutcome to what the hosting automation can see.

    - Log lines for every outcome
    - Markdown job summary (``$GITHUB_STEP_SUMMARY``) when available
    - Step outputs ``outcome`` and ``retryable`` (``$GITHUB_OUTPUT``)
    - An ``::error::`` annotation for operational failures only
    - The process exit code

    Reporting never raises; a broken summary file only costs a warning.
    """

    def __init__(
        self,
        step_summary_path: Optional[str] = None,
        output_path: Optional[str] = None,
        stream: Optional[TextIO] = None,
    ):
        self.step_summary_path = step_summary_path
        self.output_path = output_path
        self.stream = stream or sys.stdout
        self.logger = get_logger()

    @classmethod
    def from_env(cls) -> "OutcomeReporter":
        """Create a reporter writing to the files GitHub Actions provides."""
        return cls(
            step_summary_path=os.environ.get("GITHUB_STEP_SUMMARY") or None,
            output_path=os.environ.get("GITHUB_OUTPUT") or None,
        )

    def report(self, outcome: PipelineOutcome) -> int:
        """
        Report an outcome.

        Args:
            outcome: Terminal state of the pipeline

        Returns:
            Exit code for the process (non-zero only for operational failures)
        """
        try:
            self._log(outcome)
            self._write_summary(outcome)
            self._write_outputs(outcome)
            if outcome.kind == OutcomeKind.OPERATIONAL_FAILURE:
                self.stream.write(workflow_command("error", outcome.headline, title="automerge") + "\n")
                self.stream.flush()
        except Exception:
            self.logger.exception(f"Failed to report outcome for PR #{outcome.pr_number}")
        return outcome.exit_code

    def _log(self, outcome: PipelineOutcome) -> None:
        if outcome.kind == OutcomeKind.OPERATIONAL_FAILURE:
            self.logger.error(outcome.headline)
            return

        self.logger.info(outcome.headline)
        if outcome.kind == OutcomeKind.INELIGIBLE and outcome.verdict is not None:
            for reason in outcome.verdict.reasons:
                self.logger.info(f"  - {reason}")

    def _append(self, path: str, text: str) -> None:
        try:
            with open(path, "a", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            self.logger.warning(f"Could not write {path}: {e}")

    def _write_summary(self, outcome: PipelineOutcome) -> None:
        if self.step_summary_path:
            self._append(self.step_summary_path, outcome.summary() + "\n")

    def _write_outputs(self, outcome: PipelineOutcome) -> None:
        if self.output_path:
            lines = [
                f"outcome={outcome.kind.value}",
                f"retryable={'true' if outcome.retryable else 'false'}",
            ]
            self._append(self.output_path, "\n".join(lines) + "\n")
