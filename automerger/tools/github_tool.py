"""GitHub API wrapper for automerge operations."""

from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

import requests
from github import Auth, Github, GithubException
from github import RateLimitExceededException, UnknownObjectException
from github.Repository import Repository

from ..errors import (
    MalformedResponse,
    MergeRejected,
    RemoteError,
    RemoteRejected,
    RemoteUnavailable,
    TargetNotFound,
)
from ..models import (
    AuthorPullRequestSearchResult,
    ChangedFile,
    ChangedFileSet,
    CheckRun,
    CheckRunSet,
    MergeResult,
    MergeStatus,
    OpenPullRequestRef,
    PullRequest,
    RepositoryFileSnapshot,
)
from ..utils import get_logger
from .base import RepositoryClient


MERGE_MUTATION = """
mutation($mergeParams: MergePullRequestInput!) {
  mergePullRequest(input: $mergeParams) {
    pullRequest {
      number
      merged
      mergedAt
      mergeCommit { oid }
    }
  }
}
"""

# Substrings of GitHub's merge error messages, checked in order.
_ALREADY_MERGED_MARKERS = ("already merged",)
_CLOSED_MARKERS = ("is closed", "pull request is not open", "closed pull request")
_NOT_MERGEABLE_MARKERS = (
    "not mergeable",
    "head branch was modified",
    "expected head",
    "base branch policy",
    "protected branch",
    "merge conflict",
    "draft",
)


def _github_message(exc: GithubException) -> str:
    """Flatten the message(s) GitHub attached to an exception."""
    data = exc.data if isinstance(exc.data, dict) else {}
    messages = []
    if data.get("message"):
        messages.append(str(data["message"]))
    for error in data.get("errors") or []:
        if isinstance(error, dict) and error.get("message"):
            messages.append(str(error["message"]))
        elif isinstance(error, str):
            messages.append(error)
    return "; ".join(messages) or str(exc)


def _is_rate_limited(exc: GithubException, message: str) -> bool:
    """REST reports rate limits as 403/429, GraphQL as a 400 with a RATE_LIMITED error."""
    data = exc.data if isinstance(exc.data, dict) else {}
    for error in data.get("errors") or []:
        if isinstance(error, dict) and error.get("type") == "RATE_LIMITED":
            return True
    return "rate limit" in message.lower()


def _classify(operation: str, exc: GithubException) -> RemoteError:
    """Map a GitHub status code to our error taxonomy."""
    message = _github_message(exc)
    status = exc.status or 0
    text = f"{operation}: GitHub API error {status}: {message}"

    if status >= 500 or status == 429 or _is_rate_limited(exc, message):
        return RemoteUnavailable(text, status=status)
    if status == 404:
        return TargetNotFound(text, status=status)
    return RemoteRejected(text, status=status)


@contextmanager
def _translate_errors(operation: str) -> Iterator[None]:
    """Convert PyGithub and transport errors raised inside the block."""
    try:
        yield
    except RemoteError:
        raise
    except UnknownObjectException as e:
        raise TargetNotFound(f"{operation}: not found", status=e.status) from e
    except RateLimitExceededException as e:
        raise RemoteUnavailable(f"{operation}: rate limit exceeded", status=e.status) from e
    except GithubException as e:
        raise _classify(operation, e) from e
    except requests.exceptions.RequestException as e:
        raise RemoteUnavailable(f"{operation}: {e.__class__.__name__}: {e}") from e
    except (AttributeError, TypeError, KeyError) as e:
        raise MalformedResponse(f"{operation}: unexpected response shape ({e})") from e


def _require(value: Any, field_name: str, operation: str) -> Any:
    if value is None or value == "":
        raise MalformedResponse(f"{operation}: response is missing '{field_name}'")
    return value


class GitHubTool(RepositoryClient):
    """
    PyGithub-backed repository client.

    Handles:
    - Reading pull request metadata, files and check runs
    - Finding the open pull request for a head commit
    - Reading file contents at a commit
    - Searching open pull requests by author
    - Issuing the GraphQL merge mutation
    """

    def __init__(
        self,
        repo: str,
        token: str,
        api_url: str = "https://api.github.com",
        timeout: int = 15,
        gh: Optional[Github] = None,
    ):
        """
        Initialize GitHub tool.

        Args:
            repo: Repository in format "owner/repo"
            token: GitHub token
            api_url: REST API root (differs on GitHub Enterprise)
            timeout: Per-request timeout in whole seconds (PyGithub requires an int)
            gh: Preconfigured client, mainly for tests
        """
        self.repo_name = repo
        self.gh = gh or Github(auth=Auth.Token(token), base_url=api_url, timeout=int(timeout))
        self.logger = get_logger()
        self._repo: Optional[Repository] = None

    @property
    def repo(self) -> Repository:
        """Get the repository object (lazy, no request until first use)."""
        if self._repo is None:
            self._repo = self.gh.get_repo(self.repo_name, lazy=True)
        return self._repo

    def get_pull_request(self, number: int) -> PullRequest:
        operation = f"get pull request #{number}"
        with _translate_errors(operation):
            pr = self.repo.get_pull(number)
            if pr.user is None:
                raise MalformedResponse(f"{operation}: pull request has no author")
            return PullRequest(
                node_id=_require(pr.node_id, "node_id", operation),
                number=pr.number,
                author=_require(pr.user.login, "user.login", operation),
                head_sha=_require(pr.head.sha, "head.sha", operation),
                head_ref=pr.head.ref or "",
                base_ref=_require(pr.base.ref, "base.ref", operation),
                title=pr.title or "",
                state=pr.state or "open",
                merged=bool(pr.merged),
                draft=bool(pr.draft),
                html_url=pr.html_url or "",
            )

    def find_open_pull_request(self, head_sha: str) -> int:
        operation = f"find open pull request for {head_sha[:7]}"
        with _translate_errors(operation):
            for pr in self.repo.get_pulls(state="open", sort="updated", direction="desc"):
                if pr.head.sha == head_sha:
                    self.logger.info(f"Commit {head_sha[:7]} is the head of PR #{pr.number}")
                    return pr.number
        raise TargetNotFound(f"{operation}: no open pull request has this head commit")

    def list_changed_files(self, number: int) -> ChangedFileSet:
        operation = f"list files of pull request #{number}"
        with _translate_errors(operation):
            files = [
                ChangedFile(
                    path=_require(f.filename, "filename", operation),
                    status=_require(f.status, "status", operation),
                    additions=f.additions or 0,
                    deletions=f.deletions or 0,
                    previous_path=f.previous_filename,
                    patch=f.patch,
                )
                for f in self.repo.get_pull(number).get_files()
            ]
        self.logger.debug(f"PR #{number} changes {len(files)} file(s)")
        return ChangedFileSet(files=tuple(files))

    def list_check_runs(self, ref: str) -> CheckRunSet:
        operation = f"list check runs for {ref}"
        with _translate_errors(operation):
            commit = self.repo.get_commit(ref)
            runs = [
                CheckRun(
                    name=_require(run.name, "name", operation),
                    status=_require(run.status, "status", operation),
                    conclusion=run.conclusion,
                    id=run.id or 0,
                    app=run.app.slug if run.app is not None else None,
                )
                for run in commit.get_check_runs()
            ]
            return CheckRunSet(head_sha=commit.sha, runs=tuple(runs))

    def get_file(self, path: str, ref: str) -> RepositoryFileSnapshot:
        operation = f"get {path}@{ref}"
        with _translate_errors(operation):
            content_file = self.repo.get_contents(path, ref=ref)
            if isinstance(content_file, list):
                raise MalformedResponse(f"{operation}: path is a directory")
            if content_file.encoding != "base64":
                # GitHub omits content for files over 1 MB
                raise MalformedResponse(f"{operation}: content not returned (encoding {content_file.encoding!r})")
            try:
                text = content_file.decoded_content.decode("utf-8")
            except (UnicodeDecodeError, ValueError) as e:
                raise MalformedResponse(f"{operation}: content is not UTF-8 text ({e})") from e
            return RepositoryFileSnapshot(path=path, ref=ref, content=text, sha=content_file.sha or "")

    def search_open_pull_requests(self, author: str) -> AuthorPullRequestSearchResult:
        query = f"is:pr is:open author:{author} repo:{self.repo_name}"
        operation = f"search '{query}'"
        with _translate_errors(operation):
            items = [
                OpenPullRequestRef(number=issue.number, title=issue.title or "", html_url=issue.html_url or "")
                for issue in self.gh.search_issues(query)
            ]
        self.logger.debug(f"Author {author} has {len(items)} open PR(s) in {self.repo_name}")
        return AuthorPullRequestSearchResult(author=author, repository=self.repo_name, items=tuple(items))

    def merge_pull_request(
        self,
        node_id: str,
        number: int,
        expected_head_sha: str,
        merge_method: Optional[str] = None,
    ) -> MergeResult:
        operation = f"merge pull request #{number}"
        merge_params = {"pullRequestId": node_id, "expectedHeadOid": expected_head_sha}
        if merge_method:
            merge_params["mergeMethod"] = merge_method

        try:
            with _translate_errors(operation):
                _, data = self.gh.requester.graphql_query(MERGE_MUTATION, {"mergeParams": merge_params})
        except RemoteError as e:
            terminal = self._terminal_merge_status(e)
            if terminal is None:
                raise
            self.logger.info(f"{operation}: {e.message}")
            return MergeResult(pr_number=number, status=terminal, message=e.message)

        return self._parse_merge_response(number, data, operation)

    @staticmethod
    def _terminal_merge_status(error: RemoteError) -> Optional[MergeStatus]:
        """
        Decide whether a failed mutation means the work is already done.

        Raises:
            MergeRejected: When GitHub says the PR cannot be merged as is
        """
        if error.retryable:
            return None
        text = error.message.lower()
        if any(marker in text for marker in _ALREADY_MERGED_MARKERS):
            return MergeStatus.ALREADY_MERGED
        if any(marker in text for marker in _CLOSED_MARKERS):
            return MergeStatus.ALREADY_CLOSED
        if any(marker in text for marker in _NOT_MERGEABLE_MARKERS):
            raise MergeRejected(error.message, status=error.status) from error
        return None

    @staticmethod
    def _parse_merge_response(number: int, data: Any, operation: str) -> MergeResult:
        try:
            pull_request = data["data"]["mergePullRequest"]["pullRequest"]
        except (KeyError, TypeError) as e:
            raise MalformedResponse(f"{operation}: response has no pullRequest ({e})") from e
        if not isinstance(pull_request, dict) or not pull_request.get("merged"):
            raise MalformedResponse(f"{operation}: mutation returned but pull request is not merged")

        merged_at = pull_request.get("mergedAt")
        commit = pull_request.get("mergeCommit") or {}
        return MergeResult(
            pr_number=number,
            status=MergeStatus.MERGED,
            commit_sha=commit.get("oid"),
            merged_at=datetime.fromisoformat(merged_at.replace("Z", "+00:00")) if merged_at else None,
        )
