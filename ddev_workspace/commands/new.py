"""New command: create a worktree with its own DDEV environment."""

import sys
from pathlib import Path

import click
from rich.console import Console

from ddev_workspace import ddev, git
from ddev_workspace.config import Settings, load_settings
from ddev_workspace.errors import NotFoundError, PreconditionError, WorkspaceError
from ddev_workspace.project import find_project_root
from ddev_workspace.steps import CleanupState, StepLog, print_summary
from ddev_workspace.utils import logger

from .utils import import_database, rollback, section, start_environment


def find_original_name(project_root: Path, settings: Settings) -> str | None:
    """Read the un-prefixed DDEV project name.

    Default-branch workspaces keep the original name, so they are searched
    first, followed by the project root itself (non-bare layouts).
    """
    spaces = settings.spaces_path(project_root)
    candidates = [spaces / branch for branch in settings.default_branches]
    candidates.append(project_root)

    for candidate in candidates:
        try:
            return ddev.read_project_name(candidate, settings)
        except NotFoundError:
            logger.debug(f"No DDEV project name in {candidate}")
    return None


def resolve_base(project_root: Path, base: str | None, settings: Settings) -> str | None:
    """Pick the ref a new branch starts from.

    Raises:
        PreconditionError: an explicit base does not exist
    """
    if base:
        if not git.ref_exists(project_root, base):
            raise PreconditionError(f"Branch '{base}' does not exist")
        return base

    if settings.integration_branch:
        remote_ref = f"refs/remotes/{settings.remote}/{settings.integration_branch}"
        if git.ref_exists(project_root, remote_ref):
            return f"{settings.remote}/{settings.integration_branch}"

    return None


def add_worktree(project_root: Path, name: str, base: str | None, settings: Settings) -> str:
    """Check out an existing branch, or create one, into ``spaces/<name>``.

    Returns:
        Detail for the step summary
    """
    settings.spaces_path(project_root).mkdir(parents=True, exist_ok=True)
    relative = f"{settings.spaces_dir}/{name}"

    if git.branch_exists(project_root, name, remote=settings.remote):
        git.worktree_add(project_root, relative, name)
        return f"{name} (existing branch)"

    git.worktree_add(project_root, relative, name, create=True, base=base)
    return f"{name} (new branch from {base or 'HEAD'})"


def configure_environment(
    worktree: Path, name: str, identifier: str, original: str, steps: StepLog, settings: Settings
) -> tuple[str, StepLog]:
    """Rename the DDEV project and its dependent settings for this worktree.

    Default-branch workspaces keep the original name.
    """
    if settings.is_default_branch(name):
        return original, steps.add("DDEV project name", f"{original} (kept default)")

    environment_name = ddev.rename_project(worktree, identifier, original, settings)
    steps = steps.add("Renamed DDEV project", environment_name)

    if (worktree / settings.settings_php).is_file():
        host = ddev.rewrite_settings(worktree, environment_name, settings)
        steps = steps.add(f"Updated {settings.settings_php.name}", f"DB host set to {host}")

    return environment_name, steps


def create_workspace(
    console: Console,
    name: str,
    identifier: str | None = None,
    base: str | None = None,
    cwd: Path | None = None,
) -> StepLog:
    """Create a workspace: worktree, renamed DDEV project, started environment, data.

    Any failure after the worktree exists rolls back what was applied and
    re-raises the original error.

    Returns:
        The ordered steps performed
    """
    if cwd is None:
        cwd = Path.cwd()
    if not name:
        raise PreconditionError("Worktree name cannot be empty")

    project_root = find_project_root(cwd)
    settings = load_settings(project_root)

    if not identifier:
        identifier = ddev.derive_identifier(name, settings.identifier_length)

    steps = StepLog()

    original = find_original_name(project_root, settings)
    if original is not None:
        steps = steps.add("Read DDEV project name", original)

    base_ref = resolve_base(project_root, base, settings)

    worktree_path = settings.spaces_path(project_root) / name
    if worktree_path.exists():
        raise PreconditionError(f"Worktree path already exists: {worktree_path}")

    state = CleanupState(worktree_path=worktree_path, project_root=project_root)

    try:
        section(console, "Creating worktree")
        detail = add_worktree(project_root, name, base_ref, settings)
        state = state.with_worktree()
        steps = steps.add("Created git worktree", detail)

        if original is None:
            return steps.add("DDEV", "Skipped (no DDEV config found in a default-branch workspace)")

        environment_name, steps = configure_environment(
            worktree_path, name, identifier, original, steps, settings
        )
        state, steps = start_environment(console, state, steps, environment_name)
        steps = import_database(console, state, steps, cwd, settings)
    except (WorkspaceError, OSError, KeyboardInterrupt):
        rollback(console, state)
        raise

    return steps


@click.command()
@click.argument("name")
@click.argument("identifier", required=False)
@click.option("--base", "-b", metavar="REF", help="Branch or ref to start a new branch from")
@click.pass_context
def new(ctx: click.Context, name: str, identifier: str | None, base: str | None) -> None:
    """Create a new worktree and DDEV environment.

    NAME is both the branch and the directory under spaces/. The DDEV project
    is renamed to IDENTIFIER-<name>; IDENTIFIER defaults to the first four
    characters of NAME.

    \b
    Examples:
        workspace new 0001-new-task
        workspace new 0001-new-task t1
        workspace new --base develop 0001-new-task
    """
    console: Console = ctx.obj["console"]

    try:
        steps = create_workspace(console, name, identifier=identifier, base=base)
    except (WorkspaceError, OSError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    print_summary(console, "Workspace Setup Complete", steps)
