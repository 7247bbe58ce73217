"""Repository client interface."""

from abc import ABC, abstractmethod
from typing import Optional

from ..models import (
    AuthorPullRequestSearchResult,
    ChangedFileSet,
    CheckRunSet,
    MergeResult,
    PullRequest,
    RepositoryFileSnapshot,
)


class RepositoryClient(ABC):
    """
    Access to one repository on the hosting service.

    Every read returns a fresh snapshot. Implementations raise
    ``TargetNotFound`` for missing objects, ``RemoteUnavailable`` for
    transient failures and ``MalformedResponse`` for data they cannot
    interpret, so callers can tell a retryable fault from a settled answer.
    """

    @abstractmethod
    def get_pull_request(self, number: int) -> PullRequest:
        """Fetch pull request metadata by display number."""

    @abstractmethod
    def find_open_pull_request(self, head_sha: str) -> int:
        """Return the number of the open pull request whose head is ``head_sha``."""

    @abstractmethod
    def list_changed_files(self, number: int) -> ChangedFileSet:
        """List the files a pull request changes."""

    @abstractmethod
    def list_check_runs(self, ref: str) -> CheckRunSet:
        """List CI check runs recorded against a commit."""

    @abstractmethod
    def get_file(self, path: str, ref: str) -> RepositoryFileSnapshot:
        """Fetch the content of a file at a ref."""

    @abstractmethod
    def search_open_pull_requests(self, author: str) -> AuthorPullRequestSearchResult:
        """Find open pull requests by an author in this repository."""

    @abstractmethod
    def merge_pull_request(
        self,
        node_id: str,
        number: int,
        expected_head_sha: str,
        merge_method: Optional[str] = None,
    ) -> MergeResult:
        """
        Issue the merge mutation for a pull request.

        Args:
            node_id: Stable GraphQL id of the pull request
            number: Display number, used only for reporting
            expected_head_sha: Head commit the decision was made on
            merge_method: GraphQL merge method (MERGE, SQUASH, REBASE) or None

        Returns:
            MergeResult with MERGED, ALREADY_MERGED or ALREADY_CLOSED
        """
