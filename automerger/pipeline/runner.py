"""End-to-end automerge pipeline for one pull request."""

import asyncio
from typing import Optional, Sequence

from ..config import AutomergeConfig
from ..errors import RemoteError
from ..models import MergeResult, MergeStatus, OutcomeKind, PipelineOutcome, Verdict
from ..rules import PathAllowList, Rule, build_rules
from ..tools import GitHubTool, RepositoryClient
from ..utils import get_logger, log_group
from .stage1_fetch import fetch_inputs
from .stage2_decide import decide
from .stage3_merge import MergeExecutor


async def run_automerge(
    config: AutomergeConfig,
    client: Optional[RepositoryClient] = None,
    rules: Optional[Sequence[Rule]] = None,
) -> PipelineOutcome:
    """
    Run the complete automerge pipeline.

    Fetch -> decide -> merge (only when eligible). Without a PR number the
    PR is first looked up by ``config.head_sha``. A PR that is already
    merged or closed ends the run before any rule is evaluated.

    A remote failure at any point ends the run as an operational failure;
    a failure during the fetch happens before any rule runs, so nothing
    is merged.

    Args:
        config: Automerge configuration
        client: Repository client (defaults to a GitHubTool built from config)
        rules: Rule set override (defaults to ``build_rules(config)``)

    Returns:
        PipelineOutcome describing the terminal state
    """
    logger = get_logger()
    pr_number = config.pr_number

    if client is None:
        client = GitHubTool(
            repo=config.repo,
            token=config.github_token,
            api_url=config.api_url,
            timeout=config.timeout,
        )
    if rules is None:
        rules = build_rules(config)

    verdict: Optional[Verdict] = None

    try:
        if pr_number <= 0:
            with log_group(f"Resolving pull request for {config.head_sha[:7]}"):
                pr_number = await asyncio.to_thread(client.find_open_pull_request, config.head_sha)

        logger.info(f"Starting automerge for {config.repo} PR #{pr_number}")
        with log_group("Stage 1: fetching pull request data"):
            inputs = await fetch_inputs(client, pr_number, PathAllowList(config.allowed_paths))

        pull_request = inputs.pull_request
        if not pull_request.is_open:
            status = MergeStatus.ALREADY_MERGED if pull_request.merged else MergeStatus.ALREADY_CLOSED
            logger.info(f"PR #{pr_number} is no longer open ({status.value}); nothing to do")
            return PipelineOutcome(
                kind=OutcomeKind.ALREADY_SATISFIED,
                pr_number=pr_number,
                merge_result=MergeResult(pr_number=pr_number, status=status, message="pull request is not open"),
            )

        with log_group("Stage 2: evaluating eligibility rules"):
            verdict = decide(rules, inputs)

        if not verdict.eligible:
            return PipelineOutcome(kind=OutcomeKind.INELIGIBLE, pr_number=pr_number, verdict=verdict)

        if config.dry_run:
            logger.info("Dry run: skipping merge")
            return PipelineOutcome(kind=OutcomeKind.DRY_RUN, pr_number=pr_number, verdict=verdict)

        with log_group("Stage 3: merging"):
            executor = MergeExecutor(client, merge_method=config.graphql_merge_method)
            result = await asyncio.to_thread(executor.merge, pull_request, verdict)

    except RemoteError as e:
        logger.error(f"Remote failure ({e.__class__.__name__}): {e.message}")
        return PipelineOutcome(
            kind=OutcomeKind.OPERATIONAL_FAILURE,
            pr_number=pr_number,
            verdict=verdict,
            error=f"{e.__class__.__name__}: {e.message}",
            retryable=e.retryable,
        )

    kind = OutcomeKind.MERGED if result.merged_now else OutcomeKind.ALREADY_SATISFIED
    return PipelineOutcome(kind=kind, pr_number=pr_number, verdict=verdict, merge_result=result)


# Synchronous wrapper for non-async contexts
def run_automerge_sync(
    config: AutomergeConfig,
    client: Optional[RepositoryClient] = None,
    rules: Optional[Sequence[Rule]] = None,
) -> PipelineOutcome:
    """Synchronous wrapper for run_automerge."""
    return asyncio.run(run_automerge(config, client=client, rules=rules))
