"""Stage 3: Merge - Issue the single merge mutation."""

from typing import Optional

from ..models import MergeResult, MergeStatus, PullRequest, Verdict
from ..tools import RepositoryClient
from ..utils import get_logger


class MergeExecutor:
    """
    Executes the merge for an eligible pull request.

    Handles:
    - Refusing to act on an ineligible verdict
    - Pinning the merge to the evaluated head commit
    - Reporting already merged / closed PRs as a settled state

    There are no retries here. Running the pipeline once per PR state
    change is the caller's job.
    """

    def __init__(
        self,
        client: RepositoryClient,
        merge_method: Optional[str] = None
    ):
        """
        Initialize merge executor.

        Args:
            client: Repository client issuing the mutation
            merge_method: GraphQL merge method (MERGE, SQUASH, REBASE) or None for the repo default
        """
        self.client = client
        self.merge_method = merge_method
        self.logger = get_logger()

    def merge(self, pull_request: PullRequest, verdict: Verdict) -> MergeResult:
        """
        Merge a pull request the aggregator found eligible.

        Args:
            pull_request: Snapshot the verdict was computed from
            verdict: Aggregated verdict

        Returns:
            MergeResult with MERGED, ALREADY_MERGED or ALREADY_CLOSED

        Raises:
            ValueError: If the verdict is not eligible
            RemoteError: If the mutation fails for any other reason
        """
        if not verdict.eligible:
            raise ValueError(f"PR #{pull_request.number} is not eligible; refusing to merge")

        self.logger.info(f"Merging PR #{pull_request.number} at {pull_request.head_sha[:7]}...")
        result = self.client.merge_pull_request(
            node_id=pull_request.node_id,
            number=pull_request.number,
            expected_head_sha=pull_request.head_sha,
            merge_method=self.merge_method,
        )

        if result.status == MergeStatus.MERGED:
            self.logger.info(f"PR #{pull_request.number} merged successfully ({result.commit_sha})")
        else:
            self.logger.warning(f"PR #{pull_request.number} not merged: {result.status.value}")
        return result
