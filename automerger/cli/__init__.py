"""Command line helpers."""

from .init_cmd import init_repository, installed_package_spec, render_workflow, WORKFLOW_TEMPLATE

__all__ = ["init_repository", "installed_package_spec", "render_workflow", "WORKFLOW_TEMPLATE"]
