"""Scope rule: the PR may only touch allow-listed content files."""

from typing import Iterable, List, Optional

import pathspec

from ..models import ChangedFile, EvaluationInputs, RuleOutcome
from .base import Rule


class PathAllowList:
    """Gitignore-style patterns naming the files eligible for automerge."""

    def __init__(self, patterns: Iterable[str]):
        self.patterns = list(patterns)
        self._spec = pathspec.PathSpec.from_lines("gitwildmatch", self.patterns)

    def allows(self, path: str) -> bool:
        return self._spec.match_file(path)

    def content_files(self, files: Iterable[ChangedFile]) -> List[ChangedFile]:
        """Allow-listed files whose new content exists at the head commit."""
        return [f for f in files if self.allows(f.path) and not f.is_removed]


class ScopeRule(Rule):
    """
    The changed file set must consist only of allow-listed files.

    Removals and renames are rejected even inside the allow-list: both can
    drop existing entries, which is never a safe unattended change. Draft
    PRs and PRs against another branch than ``base_branch`` are out of scope
    as a whole.
    """

    name = "scope"
    description = "Only allow-listed content files are changed"

    def __init__(
        self,
        allow_list: PathAllowList,
        max_changed_files: int = 1,
        base_branch: Optional[str] = None,
    ):
        self.allow_list = allow_list
        self.max_changed_files = max_changed_files
        self.base_branch = base_branch

    def evaluate(self, inputs: EvaluationInputs) -> RuleOutcome:
        pull_request = inputs.pull_request
        files = inputs.changed_files

        if len(files) == 0:
            return self.fail("pull request changes no files")

        problems = []
        if pull_request.draft:
            problems.append("pull request is a draft")
        if self.base_branch and pull_request.base_ref != self.base_branch:
            problems.append(f"targets {pull_request.base_ref}, not {self.base_branch}")
        if len(files) > self.max_changed_files:
            problems.append(f"changes {len(files)} files, at most {self.max_changed_files} allowed")

        outside = [f.path for f in files if not self.allow_list.allows(f.path)]
        if outside:
            problems.append(f"files outside the allow-list: {', '.join(outside)}")

        for f in files:
            if f.is_removed:
                problems.append(f"removes {f.path}")
            elif f.is_renamed:
                problems.append(f"renames {f.previous_path} to {f.path}")

        if problems:
            return self.fail("; ".join(problems))
        return self.ok()
