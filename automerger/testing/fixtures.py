"""Ready-made snapshots describing a typical event submission."""

import json
from typing import Any, Dict, Optional

from ..models import (
    AuthorPullRequestSearchResult,
    ChangedFile,
    ChangedFileSet,
    CheckRun,
    CheckRunSet,
    OpenPullRequestRef,
    PullRequest,
)
from .fake_client import FakeRepositoryClient

REPOSITORY = "coderetreat/coderetreat.github.io"
EVENT_PATH = "_data/events/gdcr-berlin.json"
HEAD_SHA = "3f2a9c1e5d7b8a60f4e2c9d1b7a5e3f0c8d6b4a2"
NODE_ID = "PR_kwDOABCD1234"


def create_event(**overrides: Any) -> Dict[str, Any]:
    """A valid on-site event entry."""
    event = {
        "title": "Global Day of Coderetreat Berlin",
        "url": "https://www.meetup.com/coderetreat-berlin/",
        "moderators": ["Alex Example"],
        "spokenLanguage": "English",
        "date": {
            "start": "2026-11-07T09:00:00+01:00",
            "end": "2026-11-07T17:00:00+01:00",
        },
        "location": {
            "city": "Berlin",
            "country": "Germany",
            "coordinates": {"latitude": 52.52, "longitude": 13.405},
        },
    }
    event.update(overrides)
    return event


def create_pull_request(**overrides: Any) -> PullRequest:
    values = dict(
        node_id=NODE_ID,
        number=42,
        author="event-host",
        head_sha=HEAD_SHA,
        head_ref="add-gdcr-berlin",
        base_ref="main",
        title="Add GDCR Berlin",
        html_url=f"https://github.com/{REPOSITORY}/pull/42",
    )
    values.update(overrides)
    return PullRequest(**values)


def create_check_runs(*runs: CheckRun, head_sha: str = HEAD_SHA) -> CheckRunSet:
    if not runs:
        runs = (
            CheckRun(name="build", status="completed", conclusion="success", id=101),
            CheckRun(name="validate-events", status="completed", conclusion="success", id=102),
        )
    return CheckRunSet(head_sha=head_sha, runs=tuple(runs))


def create_fake_client(
    event: Optional[Any] = None,
    path: str = EVENT_PATH,
    **overrides: Any,
) -> FakeRepositoryClient:
    """
    A client serving the happy path: one new event file, green checks and
    no other open PR by the author. Keyword overrides replace any of the
    FakeRepositoryClient constructor arguments.
    """
    pull_request = overrides.pop("pull_request", None) or create_pull_request()
    content = json.dumps(create_event() if event is None else event, indent=2)
    values = dict(
        pull_request=pull_request,
        changed_files=ChangedFileSet(files=(
            ChangedFile(path=path, status="added", additions=content.count("\n") + 1),
        )),
        check_runs=create_check_runs(),
        author_pull_requests=AuthorPullRequestSearchResult(
            author=pull_request.author,
            repository=REPOSITORY,
            items=(OpenPullRequestRef(number=pull_request.number, title=pull_request.title),),
        ),
        files={path: content},
    )
    values.update(overrides)
    return FakeRepositoryClient(**values)
