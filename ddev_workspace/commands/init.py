"""Init command: clone a repository into the bare-clone workspace layout.

Layout created under ``<cwd>/<project>``::

    .bare/            bare object store
    .git              "gitdir: .bare"
    db/               database snapshots
    spaces/<default>  first worktree, on the default branch
"""

import re
import shutil
import sys
from pathlib import Path

import click
from rich.console import Console

from ddev_workspace import ddev, git
from ddev_workspace.config import BARE_DIR, GIT_ENTRY, GITDIR_CONTENT, Settings, load_settings
from ddev_workspace.errors import NotFoundError, PreconditionError, WorkspaceError
from ddev_workspace.steps import CleanupState, StepLog, print_summary
from ddev_workspace.utils import logger

from .utils import import_database, section, start_environment


def extract_project_name(remote_url: str) -> str:
    """Project name from a remote URL: last path segment without ``.git``.

    Handles both ``https://host/user/project.git`` and
    ``git@host:user/project.git`` forms.
    """
    url = remote_url.rstrip("/")
    name = re.split(r"[/:]", url)[-1]
    return name.removesuffix(".git")


def detect_default_branch(project_dir: Path, settings: Settings) -> str:
    """Default branch from the remote HEAD, else the first conventional name present.

    Raises:
        NotFoundError: no candidate branch exists
    """
    branch = git.remote_head(project_dir, settings.remote)
    if branch:
        return branch

    for candidate in settings.default_branches:
        if git.ref_exists(project_dir, f"refs/remotes/{settings.remote}/{candidate}"):
            return candidate

    raise NotFoundError("Could not detect default branch")


def cleanup_project(console: Console, project_dir: Path, state: CleanupState | None) -> None:
    """Remove everything ``init`` created. Best effort."""
    section(console, "Cleaning up")

    if state is not None and state.environment_started:
        console.print("Deleting DDEV project...")
        try:
            ddev.delete(state.worktree_path)
        except WorkspaceError as e:
            logger.warning(f"Failed to delete DDEV project: {e}")

    console.print(f"Removing project directory {project_dir}...", soft_wrap=True)
    try:
        shutil.rmtree(project_dir)
    except OSError as e:
        logger.warning(f"Failed to remove project directory: {e}")
    console.print("Cleanup complete.")


def bootstrap_project(
    console: Console,
    remote_url: str,
    project_name: str | None = None,
    cwd: Path | None = None,
) -> StepLog:
    """Clone ``remote_url`` and create the first workspace on the default branch.

    All or nothing: any failure removes the whole project directory.

    Returns:
        The ordered steps performed
    """
    if cwd is None:
        cwd = Path.cwd()

    name = project_name or extract_project_name(remote_url)
    if not name:
        raise PreconditionError(f"Could not determine project name from URL: {remote_url}")

    project_dir = cwd / name
    if project_dir.exists():
        raise PreconditionError(f"Directory already exists: {project_dir}")

    settings = load_settings()
    steps = StepLog()
    state: CleanupState | None = None

    try:
        project_dir.mkdir(parents=True)
    except OSError as e:
        raise PreconditionError(f"Could not create project directory: {e}") from e

    try:
        section(console, "Cloning repository (bare)")
        bare_path = project_dir / BARE_DIR
        git.clone_bare(project_dir, remote_url, bare_path)
        steps = steps.add("Cloned repository (bare)", str(bare_path))

        git_file = project_dir / GIT_ENTRY
        git_file.write_text(GITDIR_CONTENT)
        steps = steps.add(f"Created {GIT_ENTRY} file", str(git_file))

        # A bare clone only maps heads onto heads; track remote branches instead.
        git.set_config(
            project_dir,
            f"remote.{settings.remote}.fetch",
            f"+refs/heads/*:refs/remotes/{settings.remote}/*",
        )
        section(console, "Fetching branches")
        git.fetch(project_dir, settings.remote)
        steps = steps.add("Configured fetch refspec", "Fetched all branches")

        default_branch = detect_default_branch(project_dir, settings)
        steps = steps.add("Default branch", default_branch)

        settings.spaces_path(project_dir).mkdir()
        (project_dir / settings.db_dir).mkdir()

        section(console, "Creating worktree")
        worktree_path = settings.spaces_path(project_dir) / default_branch
        git.worktree_add(project_dir, f"{settings.spaces_dir}/{default_branch}", default_branch)
        state = CleanupState(worktree_path=worktree_path, project_root=project_dir).with_worktree()
        steps = steps.add("Created worktree", str(worktree_path))

        if not ddev.has_config(worktree_path, settings):
            return steps.add("DDEV", f"Skipped (no {settings.ddev_config} found)")

        try:
            environment_name = ddev.read_project_name(worktree_path, settings)
        except NotFoundError:
            # DDEV names an unnamed project after its directory
            environment_name = worktree_path.name
        steps = steps.add("DDEV project name", f"{environment_name} (kept default)")
        state, steps = start_environment(console, state, steps, environment_name)
        steps = import_database(console, state, steps, cwd, settings)
    except (WorkspaceError, OSError, KeyboardInterrupt):
        cleanup_project(console, project_dir, state)
        raise

    return steps


@click.command()
@click.argument("url")
@click.argument("name", required=False)
@click.pass_context
def init(ctx: click.Context, url: str, name: str | None) -> None:
    """Clone a repository into a bare-clone workspace structure.

    Creates NAME (default: derived from URL) in the current directory with
    the bare clone, a db/ folder and a first worktree on the default branch.
    DDEV is started when that branch has a .ddev/config.yaml.

    \b
    Examples:
        workspace init git@github.com:user/project.git
        workspace init git@github.com:user/project.git myproject
    """
    console: Console = ctx.obj["console"]

    try:
        steps = bootstrap_project(console, url, project_name=name)
    except (WorkspaceError, OSError) as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    print_summary(console, "Workspace Setup Complete", steps)
