"""Content rule: changed event files must be structurally well-formed."""

import json
from typing import Any, Dict, List, Tuple

import yaml
from pydantic import ValidationError

from ..models import Event, EvaluationInputs, RepositoryFileSnapshot, RuleOutcome
from .base import Rule
from .scope import PathAllowList

MAX_REPORTED_PROBLEMS = 5


class ContentError(ValueError):
    """A content file cannot be turned into event entries."""


def load_document(snapshot: RepositoryFileSnapshot) -> Any:
    """
    Parse a snapshot as JSON, or YAML for .yml/.yaml files.

    Raises:
        ContentError: If the text does not parse
    """
    try:
        if snapshot.path.endswith((".yml", ".yaml")):
            return yaml.safe_load(snapshot.content)
        return json.loads(snapshot.content)
    except json.JSONDecodeError as e:
        raise ContentError(f"{snapshot.path}: invalid JSON at line {e.lineno} column {e.colno}: {e.msg}") from e
    except yaml.YAMLError as e:
        raise ContentError(f"{snapshot.path}: invalid YAML: {e}") from e


def extract_entries(snapshot: RepositoryFileSnapshot) -> List[Dict[str, Any]]:
    """A file holds either one event object or a non-empty list of them."""
    document = load_document(snapshot)

    if isinstance(document, dict):
        return [document]
    if isinstance(document, list):
        if not document:
            raise ContentError(f"{snapshot.path}: contains an empty list")
        for index, entry in enumerate(document):
            if not isinstance(entry, dict):
                raise ContentError(f"{snapshot.path}[{index}]: expected an object, got {type(entry).__name__}")
        return document
    raise ContentError(f"{snapshot.path}: expected an object or a list, got {type(document).__name__}")


def _format_validation_error(where: str, error: ValidationError) -> List[str]:
    messages = []
    for detail in error.errors():
        field = ".".join(str(part) for part in detail.get("loc", ())) or "entry"
        messages.append(f"{where}: {field}: {detail.get('msg', 'invalid')}")
    return messages


def validate_snapshot(snapshot: RepositoryFileSnapshot) -> Tuple[List[Event], List[str]]:
    """
    Validate every entry of one file.

    Returns:
        Tuple of (valid events, problem messages)
    """
    try:
        entries = extract_entries(snapshot)
    except ContentError as e:
        return [], [str(e)]

    events: List[Event] = []
    problems: List[str] = []
    single = len(entries) == 1
    for index, entry in enumerate(entries):
        where = snapshot.path if single else f"{snapshot.path}[{index}]"
        try:
            events.append(Event.model_validate(entry))
        except ValidationError as e:
            problems.extend(_format_validation_error(where, e))
    return events, problems


class ContentRule(Rule):
    """
    Every allow-listed file the PR adds or edits must parse into valid
    event entries, and no two entries may share an identifier.
    """

    name = "content"
    description = "Changed event entries are well-formed"

    def __init__(self, allow_list: PathAllowList):
        self.allow_list = allow_list

    def evaluate(self, inputs: EvaluationInputs) -> RuleOutcome:
        content_files = self.allow_list.content_files(inputs.changed_files)
        if not content_files:
            return self.fail("no event content to validate")

        problems: List[str] = []
        seen: Dict[str, str] = {}

        for changed in content_files:
            snapshot = inputs.snapshots.get(changed.path)
            if snapshot is None:
                problems.append(f"{changed.path}: content was not fetched")
                continue

            events, file_problems = validate_snapshot(snapshot)
            problems.extend(file_problems)

            for event in events:
                key = event.identity
                if key in seen:
                    problems.append(f"{changed.path}: duplicate event '{key}' (also in {seen[key]})")
                else:
                    seen[key] = changed.path

        if problems:
            shown = problems[:MAX_REPORTED_PROBLEMS]
            if len(problems) > MAX_REPORTED_PROBLEMS:
                shown.append(f"and {len(problems) - MAX_REPORTED_PROBLEMS} more")
            return self.fail("; ".join(shown))
        return self.ok()
