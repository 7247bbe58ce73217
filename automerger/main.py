#!/usr/bin/env python3
"""
Automerger - Main Entry Point

Decides whether a single event-submission pull request is safe to merge
without human review, and merges it if so.

Usage:
    python -m automerger.main run --repo owner/repo --pr-number 123

Or via GitHub Actions (see ``automerger init``)
"""

import argparse
import logging
import sys
from pathlib import Path

from .config import AutomergeConfig
from .errors import ConfigurationError
from .models import OutcomeKind, PipelineOutcome
from .pipeline import OutcomeReporter, run_automerge_sync
from .utils import setup_logging, get_logger


def cmd_init(args):
    """Handle 'init' subcommand."""
    from .cli import init_repository

    target = Path(args.path or ".").resolve()
    sys.exit(0 if init_repository(target, package=args.package, ci_workflow=args.ci_workflow) else 1)


def cmd_run(args):
    """Handle 'run' subcommand."""
    setup_logging(level=logging.DEBUG if args.debug else logging.INFO)
    logger = get_logger()

    try:
        config = AutomergeConfig.from_env()
        if args.repo:
            config.repo = args.repo
        if args.pr_number:
            config.pr_number = args.pr_number
        if args.head_sha:
            config.head_sha = args.head_sha
        if args.dry_run:
            config.dry_run = True
        config.validate()
    except ConfigurationError as e:
        logger.error(str(e))
        sys.exit(2)

    try:
        outcome = run_automerge_sync(config)
    except Exception as e:
        logger.exception(f"Automerge crashed: {e}")
        outcome = PipelineOutcome(
            kind=OutcomeKind.OPERATIONAL_FAILURE,
            pr_number=config.pr_number,
            error=f"{e.__class__.__name__}: {e}",
        )

    sys.exit(OutcomeReporter.from_env().report(outcome))


def main():
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Automatically merge eligible event submission pull requests"
    )
    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Install the automerge workflow in a repository")
    init_parser.add_argument(
        "path",
        nargs="?",
        help="Target repository path (default: current directory)"
    )
    init_parser.add_argument(
        "--package",
        type=str,
        help="pip requirement the workflow installs (default: where this automerger was installed from)"
    )
    init_parser.add_argument(
        "--ci-workflow",
        default="CI",
        help="Name of the CI workflow whose completion re-runs the automerger (default: CI)"
    )

    # run command
    run_parser = subparsers.add_parser("run", help="Evaluate one pull request and merge it if eligible")
    run_parser.add_argument(
        "--repo",
        type=str,
        help="Repository in format owner/repo (default: GITHUB_REPOSITORY)"
    )
    run_parser.add_argument(
        "--pr-number",
        type=int,
        help="Pull request number (default: PR_NUMBER or the event payload)"
    )
    run_parser.add_argument(
        "--head-sha",
        type=str,
        help="Head commit used to find the PR when no number is known"
    )
    run_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Evaluate the rules without merging"
    )
    run_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging"
    )

    args = parser.parse_args()

    # Route to subcommand
    if args.command == "init":
        cmd_init(args)
    elif args.command == "run":
        cmd_run(args)
    else:
        # No subcommand - show help
        parser.print_help()
        sys.exit(0)


if __name__ == "__main__":
    main()
