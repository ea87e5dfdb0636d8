"""Remove command: tear down a workspace and its DDEV environment."""

import sys
from pathlib import Path

import click
from rich.console import Console

from ddev_workspace import ddev, docker, git
from ddev_workspace.config import Settings, load_settings
from ddev_workspace.errors import ExternalToolError, NotFoundError, WorkspaceError
from ddev_workspace.project import find_project_root
from ddev_workspace.registry import WorkspaceEntry, find_workspace
from ddev_workspace.steps import StepLog, print_summary
from ddev_workspace.utils import logger, prompt_confirm

from .utils import section


def resolve_target(project_root: Path, name: str | None, cwd: Path, settings: Settings) -> Path:
    """Canonical path of the workspace to remove: ``spaces/<name>`` or ``cwd``.

    Raises:
        NotFoundError: the path does not exist
    """
    target = settings.spaces_path(project_root) / name if name else cwd
    try:
        return target.resolve(strict=True)
    except OSError as e:
        raise NotFoundError(f"No such workspace: {target}") from e


def environment_label(entry: WorkspaceEntry, settings: Settings) -> str:
    try:
        return ddev.read_project_name(entry.path, settings)
    except NotFoundError:
        return "none"


def teardown(project_root: Path, entry: WorkspaceEntry, console: Console, settings: Settings) -> StepLog:
    """Delete environment, worktree, branch and build cache.

    Only the worktree removal is fatal; every other failure is recorded in
    the summary and the remaining steps still run.
    """
    steps = StepLog()

    if ddev.has_config(entry.path, settings):
        section(console, "Deleting DDEV project")
        try:
            ddev.delete(entry.path)
            steps = steps.add("DDEV project", "Deleted")
        except ExternalToolError as e:
            logger.warning(f"Failed to delete DDEV project: {e}")
            steps = steps.add("DDEV project", f"Failed to delete: {e}")
    else:
        steps = steps.add("DDEV project", f"Skipped (no {settings.ddev_config})")

    section(console, "Removing git worktree")
    try:
        git.worktree_remove(project_root, entry.path)
    except ExternalToolError as e:
        print_summary(console, "Workspace Removal Failed", steps)
        raise ExternalToolError(f"Failed to remove worktree: {e}", e.command, e.returncode) from e
    steps = steps.add("Git worktree", f"Removed {entry.path}")

    if entry.branch:
        section(console, "Deleting branch")
        try:
            git.branch_delete(project_root, entry.branch)
            steps = steps.add("Branch", f"Deleted {entry.branch}")
        except ExternalToolError as e:
            logger.warning(f"Failed to delete branch {entry.branch}: {e}")
            steps = steps.add("Branch", f"Failed to delete {entry.branch}: {e}")
    else:
        steps = steps.add("Branch", "Skipped (detached HEAD)")

    if settings.prune_build_cache:
        section(console, "Pruning Docker build cache")
        try:
            docker.prune_build_cache(project_root)
            steps = steps.add("Docker build cache", "Pruned")
        except ExternalToolError as e:
            logger.warning(f"Failed to prune Docker build cache: {e}")
            steps = steps.add("Docker build cache", f"Failed to prune: {e}")
    else:
        steps = steps.add("Docker build cache", "Skipped (disabled)")

    return steps


def remove_workspace(console: Console, name: str | None = None, cwd: Path | None = None) -> StepLog | None:
    """Remove a workspace after interactive confirmation.

    Returns:
        The ordered steps performed, or None when the user aborted
    """
    if cwd is None:
        cwd = Path.cwd()

    project_root = find_project_root(cwd)
    settings = load_settings(project_root)

    target = resolve_target(project_root, name, cwd, settings)
    entry = find_workspace(project_root, target, settings)

    console.print("The following will be destroyed:")
    console.print(f"  Worktree:  {entry.path}", highlight=False, markup=False, soft_wrap=True)
    console.print(f"  Branch:    {entry.branch or '(detached)'}", highlight=False, markup=False)
    console.print(
        f"  DDEV:      {environment_label(entry, settings)}", highlight=False, markup=False
    )
    console.print()

    if not prompt_confirm(console, "Are you sure?"):
        console.print("Aborted.")
        return None

    return teardown(project_root, entry, console, settings)


@click.command()
@click.argument("name", required=False)
@click.pass_context
def remove(ctx: click.Context, name: str | None) -> None:
    """Remove a worktree, its branch and its DDEV environment.

    Without NAME the worktree containing the current directory is removed.

    \b
    Examples:
        workspace remove 0001-new-task
        workspace remove
    """
    console: Console = ctx.obj["console"]

    try:
        steps = remove_workspace(console, name)
    except WorkspaceError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    if steps is not None:
        print_summary(console, "Workspace Removal Complete", steps)
