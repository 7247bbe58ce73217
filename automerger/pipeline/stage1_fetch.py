"""Stage 1: Fetch - Read everything the rules need, once."""

import asyncio
from types import MappingProxyType
from typing import Dict

from ..models import EvaluationInputs, RepositoryFileSnapshot
from ..rules import PathAllowList
from ..tools import RepositoryClient
from ..utils import get_logger


async def fetch_inputs(
    client: RepositoryClient,
    pr_number: int,
    allow_list: PathAllowList,
) -> EvaluationInputs:
    """
    Build the evaluation snapshot for a pull request.

    The PR is read first because its author and head commit parameterize
    the other reads. Changed files, check runs and the author search are
    then issued concurrently, and file contents follow the file list.

    Args:
        client: Repository client
        pr_number: Pull request number
        allow_list: Paths whose content must be fetched for validation

    Returns:
        EvaluationInputs for the rule set

    Raises:
        RemoteError: Any failed read aborts the whole fetch
    """
    logger = get_logger()

    pull_request = await asyncio.to_thread(client.get_pull_request, pr_number)
    logger.info(
        f"PR #{pull_request.number} by {pull_request.author} "
        f"({pull_request.head_sha[:7]} -> {pull_request.base_ref})"
    )

    changed_files, check_runs, author_pull_requests = await asyncio.gather(
        asyncio.to_thread(client.list_changed_files, pr_number),
        asyncio.to_thread(client.list_check_runs, pull_request.head_sha),
        asyncio.to_thread(client.search_open_pull_requests, pull_request.author),
    )
    logger.info(
        f"Fetched {len(changed_files)} changed file(s) "
        f"(+{changed_files.total_additions}/-{changed_files.total_deletions}), "
        f"{len(check_runs.runs)} check run(s), "
        f"{len(author_pull_requests.items)} open PR(s) by the author"
    )

    content_files = allow_list.content_files(changed_files)
    fetched = await asyncio.gather(*[
        asyncio.to_thread(client.get_file, changed.path, pull_request.head_sha)
        for changed in content_files
    ])
    snapshots: Dict[str, RepositoryFileSnapshot] = {snapshot.path: snapshot for snapshot in fetched}

    return EvaluationInputs(
        pull_request=pull_request,
        changed_files=changed_files,
        check_runs=check_runs,
        author_pull_requests=author_pull_requests,
        snapshots=MappingProxyType(snapshots),
    )
