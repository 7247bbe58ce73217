"""Logging utilities and GitHub Actions workflow commands."""

import logging
import os
import sys
from contextlib import contextmanager
from typing import Iterator, Optional

LOGGER_NAME = "automerger"

# The Actions runner already timestamps every line.
ACTIONS_FORMAT = "%(levelname)s - %(message)s"
DEFAULT_FORMAT = "[%(asctime)s] %(levelname)s - %(message)s"


def running_in_actions() -> bool:
    """True when executing inside a GitHub Actions job."""
    return os.environ.get("GITHUB_ACTIONS", "").lower() == "true"


def setup_logging(
    level: int = logging.INFO,
    format_str: Optional[str] = None
) -> logging.Logger:
    """
    Setup logging for the automerger.

    Args:
        level: Logging level (default: INFO)
        format_str: Custom format string (default depends on the environment)

    Returns:
        Configured logger
    """
    if format_str is None:
        format_str = ACTIONS_FORMAT if running_in_actions() else DEFAULT_FORMAT

    logging.basicConfig(
        level=level,
        format=format_str,
        handlers=[
            logging.StreamHandler(sys.stdout)
        ]
    )

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    return logger


def get_logger(name: str = LOGGER_NAME) -> logging.Logger:
    """Get a logger instance."""
    return logging.getLogger(name)


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _escape_property(value: str) -> str:
    return _escape_data(value).replace(":", "%3A").replace(",", "%2C")


def workflow_command(command: str, message: str = "", **properties: str) -> str:
    """
    Format a GitHub Actions workflow command line.

    Example: ``workflow_command("error", "boom", title="automerge")``
    gives ``::error title=automerge::boom``.
    """
    props = ",".join(f"{k}={_escape_property(str(v))}" for k, v in properties.items())
    head = f"::{command} {props}" if props else f"::{command}"
    return f"{head}::{_escape_data(message)}"


@contextmanager
def log_group(title: str) -> Iterator[None]:
    """Fold the enclosed log output into a collapsible group on Actions."""
    if not running_in_actions():
        get_logger().info(title)
        yield
        return

    sys.stdout.write(workflow_command("group", title) + "\n")
    sys.stdout.flush()
    try:
        yield
    finally:
        sys.stdout.write(workflow_command("endgroup") + "\n")
        sys.stdout.flush()
