"""Repository access for the automerger."""

from .base import RepositoryClient
from .github_tool import GitHubTool, MERGE_MUTATION

__all__ = [
    "RepositoryClient",
    "GitHubTool",
    "MERGE_MUTATION",
]
