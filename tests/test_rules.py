"""Tests for the eligibility rules.

Following the testing philosophy:
- Client-perspective behavior verification
- Given-When-Then structure
- Minimal mocking (only external APIs)
"""

import json

import pytest

from automerger.models import (
    AuthorPullRequestSearchResult,
    ChangedFile,
    ChangedFileSet,
    CheckRun,
    EvaluationInputs,
    OpenPullRequestRef,
    RepositoryFileSnapshot,
)
from automerger.rules import (
    CIStatusRule,
    ContentRule,
    DuplicateSubmissionRule,
    PathAllowList,
    ScopeRule,
)
from automerger.testing import (
    EVENT_PATH,
    HEAD_SHA,
    REPOSITORY,
    create_check_runs,
    create_event,
    create_pull_request,
)


def make_inputs(files=None, contents=None, check_runs=None, others=(), pr=None):
    """Build EvaluationInputs around the default pull request."""
    pr = pr or create_pull_request()
    if files is None:
        files = [ChangedFile(path=EVENT_PATH, status="added", additions=20)]
    if contents is None:
        contents = {EVENT_PATH: json.dumps(create_event())}
    items = [OpenPullRequestRef(number=pr.number)] + [OpenPullRequestRef(number=n) for n in others]
    return EvaluationInputs(
        pull_request=pr,
        changed_files=ChangedFileSet(files=tuple(files)),
        check_runs=check_runs or create_check_runs(),
        author_pull_requests=AuthorPullRequestSearchResult(
            author=pr.author, repository=REPOSITORY, items=tuple(items)
        ),
        snapshots={
            path: RepositoryFileSnapshot(path=path, ref=HEAD_SHA, content=text)
            for path, text in contents.items()
        },
    )


@pytest.fixture
def allow_list():
    return PathAllowList(["_data/events/*.json", "_data/events/*.yml"])


class TestScopeRule:
    """Tests for the changed-file allow-list."""

    def test_single_added_event_file_passes(self, allow_list):
        """Given one new event file, scope should pass."""
        # When
        outcome = ScopeRule(allow_list).evaluate(make_inputs())

        # Then
        assert outcome.passed is True
        assert outcome.rule == "scope"

    def test_file_outside_allow_list_fails(self, allow_list):
        """Given a change to a site file, scope should fail naming it."""
        # Given
        files = [
            ChangedFile(path=EVENT_PATH, status="added"),
            ChangedFile(path="js/events.jsx", status="modified"),
        ]

        # When
        outcome = ScopeRule(allow_list, max_changed_files=5).evaluate(make_inputs(files=files))

        # Then
        assert outcome.passed is False
        assert "js/events.jsx" in outcome.reason
        assert EVENT_PATH not in outcome.reason

    def test_too_many_files_fails(self, allow_list):
        """Given two event files with a limit of one, scope should fail."""
        # Given
        files = [
            ChangedFile(path="_data/events/a.json", status="added"),
            ChangedFile(path="_data/events/b.json", status="added"),
        ]

        # When
        outcome = ScopeRule(allow_list, max_changed_files=1).evaluate(make_inputs(files=files))

        # Then
        assert outcome.passed is False
        assert "at most 1" in outcome.reason

    def test_removed_event_file_fails(self, allow_list):
        """Given a deleted event file, scope should fail even inside the allow-list."""
        # Given
        files = [ChangedFile(path=EVENT_PATH, status="removed", deletions=20)]

        # When
        outcome = ScopeRule(allow_list).evaluate(make_inputs(files=files, contents={}))

        # Then
        assert outcome.passed is False
        assert f"removes {EVENT_PATH}" in outcome.reason

    def test_renamed_event_file_fails(self, allow_list):
        """Given a renamed event file, scope should fail."""
        # Given
        files = [ChangedFile(path=EVENT_PATH, status="renamed", previous_path="_data/events/old.json")]

        # When
        outcome = ScopeRule(allow_list).evaluate(make_inputs(files=files))

        # Then
        assert outcome.passed is False
        assert "renames _data/events/old.json" in outcome.reason

    def test_empty_change_set_fails(self, allow_list):
        """Given a PR without files, scope should fail."""
        # When
        outcome = ScopeRule(allow_list).evaluate(make_inputs(files=[], contents={}))

        # Then
        assert outcome.passed is False
        assert "no files" in outcome.reason

    def test_draft_pull_request_fails(self, allow_list):
        """Given a draft PR, scope should fail even for a valid event file."""
        # When
        outcome = ScopeRule(allow_list).evaluate(make_inputs(pr=create_pull_request(draft=True)))

        # Then
        assert outcome.passed is False
        assert outcome.reason == "pull request is a draft"

    def test_other_base_branch_fails(self, allow_list):
        """Given a configured target branch, PRs against another branch fail."""
        # Given
        inputs = make_inputs(pr=create_pull_request(base_ref="gh-pages"))

        # When
        outcome = ScopeRule(allow_list, base_branch="main").evaluate(inputs)

        # Then
        assert outcome.passed is False
        assert outcome.reason == "targets gh-pages, not main"

    def test_any_base_branch_without_configuration(self, allow_list):
        inputs = make_inputs(pr=create_pull_request(base_ref="gh-pages"))

        assert ScopeRule(allow_list).evaluate(inputs).passed is True


class TestContentRule:
    """Tests for event well-formedness."""

    def test_valid_event_passes(self, allow_list):
        """Given a complete on-site event, content should pass."""
        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs())

        # Then
        assert outcome.passed is True

    def test_virtual_event_passes(self, allow_list):
        """Given a virtual event, content should pass."""
        # Given
        contents = {EVENT_PATH: json.dumps(create_event(location="virtual"))}

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents=contents))

        # Then
        assert outcome.passed is True

    def test_invalid_json_fails(self, allow_list):
        """Given unparseable JSON, content should fail instead of raising."""
        # Given
        contents = {EVENT_PATH: '{"title": "Broken",'}

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents=contents))

        # Then
        assert outcome.passed is False
        assert "invalid JSON" in outcome.reason

    def test_end_before_start_fails(self, allow_list):
        """Given an event ending before it starts, content should fail."""
        # Given
        event = create_event(date={
            "start": "2026-11-07T17:00:00+01:00",
            "end": "2026-11-07T09:00:00+01:00",
        })

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: json.dumps(event)}))

        # Then
        assert outcome.passed is False
        assert "event end must be after its start" in outcome.reason

    def test_date_without_offset_fails(self, allow_list):
        """Given a start time without a UTC offset, content should fail."""
        # Given
        event = create_event(date={
            "start": "2026-11-07T09:00:00",
            "end": "2026-11-07T17:00:00+01:00",
        })

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: json.dumps(event)}))

        # Then
        assert outcome.passed is False
        assert "date.start" in outcome.reason

    def test_missing_title_fails(self, allow_list):
        """Given an event without a title, content should fail naming the field."""
        # Given
        event = create_event()
        del event["title"]

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: json.dumps(event)}))

        # Then
        assert outcome.passed is False
        assert "title" in outcome.reason

    def test_free_text_location_fails(self, allow_list):
        """Given a location that is neither 'virtual' nor an address, content should fail."""
        # Given
        event = create_event(location="Berlin")

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: json.dumps(event)}))

        # Then
        assert outcome.passed is False
        assert "location" in outcome.reason

    def test_duplicate_ids_fail(self, allow_list):
        """Given two entries sharing an id, content should fail."""
        # Given
        entries = [create_event(id="gdcr-berlin"), create_event(id="gdcr-berlin", title="Other")]

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: json.dumps(entries)}))

        # Then
        assert outcome.passed is False
        assert "duplicate event 'gdcr-berlin'" in outcome.reason

    def test_duplicate_title_and_start_fail(self, allow_list):
        """Given two entries without ids but the same title and start, content should fail."""
        # Given
        entries = [create_event(), create_event(url="https://example.org")]

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: json.dumps(entries)}))

        # Then
        assert outcome.passed is False
        assert "duplicate event" in outcome.reason

    def test_list_of_distinct_events_passes(self, allow_list):
        """Given a list of different events, content should pass."""
        # Given
        entries = [create_event(id="a"), create_event(id="b", location="virtual")]

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: json.dumps(entries)}))

        # Then
        assert outcome.passed is True

    def test_empty_list_fails(self, allow_list):
        """Given an empty list, content should fail."""
        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={EVENT_PATH: "[]"}))

        # Then
        assert outcome.passed is False
        assert "empty list" in outcome.reason

    def test_yaml_event_passes(self, allow_list):
        """Given a YAML event file, content should parse it as YAML."""
        # Given
        path = "_data/events/gdcr-online.yml"
        text = "\n".join([
            "title: GDCR Online",
            "location: virtual",
            "date:",
            "  start: '2026-11-07T09:00:00+00:00'",
            "  end: '2026-11-07T17:00:00+00:00'",
        ])
        files = [ChangedFile(path=path, status="added")]

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(files=files, contents={path: text}))

        # Then
        assert outcome.passed is True

    def test_missing_snapshot_fails(self, allow_list):
        """Given no fetched content for a changed file, content should fail."""
        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(contents={}))

        # Then
        assert outcome.passed is False
        assert "not fetched" in outcome.reason

    def test_no_content_files_fails(self, allow_list):
        """Given only files outside the allow-list, there is nothing to validate."""
        # Given
        files = [ChangedFile(path="README.md", status="modified")]

        # When
        outcome = ContentRule(allow_list).evaluate(make_inputs(files=files, contents={}))

        # Then
        assert outcome.passed is False
        assert "no event content" in outcome.reason


class TestCIStatusRule:
    """Tests for check run evaluation."""

    def test_all_checks_successful_passes(self):
        """Given only successful checks, CI status should pass."""
        # When
        outcome = CIStatusRule().evaluate(make_inputs())

        # Then
        assert outcome.passed is True

    def test_failed_check_fails(self):
        """Given a failed check, CI status should fail naming it."""
        # Given
        runs = create_check_runs(
            CheckRun(name="build", status="completed", conclusion="failure", id=1),
            CheckRun(name="lint", status="completed", conclusion="success", id=2),
        )

        # When
        outcome = CIStatusRule().evaluate(make_inputs(check_runs=runs))

        # Then
        assert outcome.passed is False
        assert "failed: build (failure)" in outcome.reason

    def test_pending_check_fails(self):
        """Given a check still running, CI status should fail rather than wait."""
        # Given
        runs = create_check_runs(CheckRun(name="build", status="in_progress", id=1))

        # When
        outcome = CIStatusRule().evaluate(make_inputs(check_runs=runs))

        # Then
        assert outcome.passed is False
        assert "pending: build (in_progress)" in outcome.reason

    def test_missing_required_check_fails(self):
        """Given a required check that never reported, CI status should fail."""
        # When
        outcome = CIStatusRule(required_checks=["build", "deploy-preview"]).evaluate(make_inputs())

        # Then
        assert outcome.passed is False
        assert "missing: deploy-preview" in outcome.reason

    def test_no_checks_fails(self):
        """Given a commit without any checks, CI status should fail."""
        # Given
        runs = create_check_runs(CheckRun(name="automerge", status="in_progress", id=9))

        # When
        outcome = CIStatusRule(ignored_checks=["automerge"]).evaluate(make_inputs(check_runs=runs))

        # Then
        assert outcome.passed is False
        assert "no CI checks" in outcome.reason

    def test_own_job_is_ignored(self):
        """Given the automerger's own running job, CI status should ignore it."""
        # Given
        runs = create_check_runs(
            CheckRun(name="build", status="completed", conclusion="success", id=1),
            CheckRun(name="automerge", status="in_progress", id=2),
        )

        # When
        outcome = CIStatusRule(ignored_checks=["automerge"]).evaluate(make_inputs(check_runs=runs))

        # Then
        assert outcome.passed is True

    def test_rerun_supersedes_earlier_failure(self):
        """Given a failed run followed by a successful re-run, CI status should pass."""
        # Given
        runs = create_check_runs(
            CheckRun(name="build", status="completed", conclusion="failure", id=1),
            CheckRun(name="build", status="completed", conclusion="success", id=2),
        )

        # When
        outcome = CIStatusRule().evaluate(make_inputs(check_runs=runs))

        # Then
        assert outcome.passed is True

    def test_skipped_check_fails_unless_accepted(self):
        """Given a skipped check, only an explicit accepted conclusion lets it pass."""
        # Given
        runs = create_check_runs(CheckRun(name="build", status="completed", conclusion="skipped", id=1))
        inputs = make_inputs(check_runs=runs)

        # When
        strict = CIStatusRule().evaluate(inputs)
        lenient = CIStatusRule(accepted_conclusions=["success", "skipped"]).evaluate(inputs)

        # Then
        assert strict.passed is False
        assert lenient.passed is True

    def test_checks_for_other_commit_fail(self):
        """Given check runs from a different commit, CI status should fail."""
        # Given
        runs = create_check_runs(head_sha="0000000deadbeef")

        # When
        outcome = CIStatusRule().evaluate(make_inputs(check_runs=runs))

        # Then
        assert outcome.passed is False
        assert "not head commit" in outcome.reason


class TestDuplicateSubmissionRule:
    """Tests for the one-open-PR-per-author rule."""

    def test_only_target_pr_open_passes(self):
        """Given the author's only open PR is this one, the rule should pass."""
        # When
        outcome = DuplicateSubmissionRule().evaluate(make_inputs())

        # Then
        assert outcome.passed is True

    def test_other_open_pr_fails(self):
        """Given another open PR by the same author, the rule should fail."""
        # When
        outcome = DuplicateSubmissionRule().evaluate(make_inputs(others=(17, 23)))

        # Then
        assert outcome.passed is False
        assert "#17" in outcome.reason
        assert "#23" in outcome.reason
        assert "#42" not in outcome.reason
