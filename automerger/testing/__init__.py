"""Testing utilities: an in-memory repository client and sample snapshots."""

from .fake_client import FakeRepositoryClient, RecordedCall
from .fixtures import (
    EVENT_PATH,
    HEAD_SHA,
    NODE_ID,
    REPOSITORY,
    create_check_runs,
    create_event,
    create_fake_client,
    create_pull_request,
)

__all__ = [
    "FakeRepositoryClient",
    "RecordedCall",
    "EVENT_PATH",
    "HEAD_SHA",
    "NODE_ID",
    "REPOSITORY",
    "create_check_runs",
    "create_event",
    "create_fake_client",
    "create_pull_request",
]
