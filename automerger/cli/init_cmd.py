"""Install the automerge workflow into a content repository."""

import json
from importlib import metadata
from pathlib import Path
from typing import Optional


# Check suites created by GitHub Actions never trigger ``check_suite``
# workflows, so CI completion is observed through ``workflow_run``.
WORKFLOW_TEMPLATE = '''name: Automerge event submissions

on:
  pull_request_target:
    types: [opened, synchronize, reopened, ready_for_review]
    paths:
      - "_data/events/**"
  workflow_run:
    workflows: ["__CI_WORKFLOW__"]
    types: [completed]

permissions:
  contents: write
  pull-requests: write
  checks: read

concurrency:
  group: automerge-${{ github.event.pull_request.number || github.event.workflow_run.head_sha }}
  cancel-in-progress: false

jobs:
  automerge:
    name: automerge
    runs-on: ubuntu-latest
    if: github.event_name == 'pull_request_target' || github.event.workflow_run.event == 'pull_request'

    steps:
      - uses: actions/setup-python@v5
        with:
          python-version: "3.12"

      - name: Install automerger
        run: pip install "__PACKAGE__"

      # The PR number (or, for fork PRs, the head commit) is read from the event payload
      - name: Evaluate and merge
        env:
          GITHUB_TOKEN: ${{ secrets.GITHUB_TOKEN }}
          AUTOMERGE_ALLOWED_PATHS: "_data/events/*.json"
          AUTOMERGE_IGNORED_CHECKS: "automerge"
        run: automerger run
'''

WORKFLOW_PATH = Path(".github") / "workflows" / "automerge.yml"
DEFAULT_CI_WORKFLOW = "CI"


def installed_package_spec() -> Optional[str]:
    """
    The pip requirement this automerger was installed from.

    A VCS install (``pip install git+https://...``) is reproduced with
    its commit. A local path is useless on a runner, so it gives None.
    """
    try:
        dist = metadata.distribution("automerger")
    except metadata.PackageNotFoundError:
        return None

    direct_url = dist.read_text("direct_url.json")
    if not direct_url:
        return f"automerger=={dist.version}"

    origin = json.loads(direct_url)
    url = origin.get("url", "")
    vcs_info = origin.get("vcs_info")
    if vcs_info:
        commit = vcs_info.get("commit_id") or vcs_info.get("requested_revision")
        spec = f"{vcs_info.get('vcs', 'git')}+{url}"
        return f"{spec}@{commit}" if commit else spec
    if url.startswith("file://"):
        return None
    return url or None


def render_workflow(package: str, ci_workflow: str = DEFAULT_CI_WORKFLOW) -> str:
    """Fill the workflow template."""
    return WORKFLOW_TEMPLATE.replace("__PACKAGE__", package).replace("__CI_WORKFLOW__", ci_workflow)


def init_repository(
    target_dir: Optional[Path] = None,
    package: Optional[str] = None,
    ci_workflow: str = DEFAULT_CI_WORKFLOW,
) -> bool:
    """
    Initialize the automerger in a repository.

    Creates:
      - .github/workflows/automerge.yml

    Args:
        target_dir: Repository root (default: current directory)
        package: pip requirement the workflow installs (default: where this copy came from)
        ci_workflow: Name of the CI workflow whose completion re-runs the automerger

    Returns:
        False if the target is not a git repository or no install source is known
    """
    target = target_dir or Path.cwd()

    # Check if git repo
    if not (target / ".git").exists():
        print(f"Error: {target} is not a git repository")
        return False

    workflow_file = target / WORKFLOW_PATH
    if workflow_file.exists():
        print(f"Already exists: {workflow_file}")
        print("\nAlready configured. No changes needed.")
        return True

    package = package or installed_package_spec()
    if not package:
        print("Error: cannot tell where the workflow should install automerger from.")
        print("Pass --package, e.g. --package git+https://github.com/<owner>/<repo>.git")
        return False

    workflow_file.parent.mkdir(parents=True, exist_ok=True)
    workflow_file.write_text(render_workflow(package, ci_workflow))
    print(f"Created: {workflow_file}")
    print(f"  installs: {package}")
    print(f"  re-runs after workflow: {ci_workflow}")

    print("\nNext steps:")
    print("  1. Adjust AUTOMERGE_ALLOWED_PATHS to where event files live")
    print("  2. git add .github && git commit -m 'Add event automerge'")
    print("  3. git push")

    return True
