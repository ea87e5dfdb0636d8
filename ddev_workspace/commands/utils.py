"""Steps shared by the creation and bootstrap workflows."""

from pathlib import Path

from rich.console import Console

from ddev_workspace import ddev, git
from ddev_workspace.config import Settings
from ddev_workspace.errors import ExternalToolError, NotFoundError
from ddev_workspace.steps import CleanupState, StepLog
from ddev_workspace.utils import logger, prompt_text


def section(console: Console, title: str) -> None:
    console.print(f"\n[bold cyan]--- {title} ---[/bold cyan]")


def start_environment(
    console: Console, state: CleanupState, steps: StepLog, environment_name: str
) -> tuple[CleanupState, StepLog]:
    """Start DDEV in the new worktree and mark it for rollback."""
    section(console, "Starting DDEV")
    ddev.start(state.worktree_path)
    return state.with_environment(), steps.add("Started DDEV", environment_name)


def resolve_dump_path(console: Console, project_root: Path, cwd: Path, settings: Settings) -> Path | None:
    """Find the database snapshot to import.

    Uses the project's default dump when present, otherwise asks for a path.
    An empty answer means "skip".

    Raises:
        NotFoundError: the path entered does not exist
    """
    default_dump = settings.db_dump_path(project_root)
    if default_dump.is_file():
        console.print(f"\nFound database dump at {default_dump}", soft_wrap=True)
        return default_dump

    relative_default = Path(settings.db_dir) / settings.db_dump
    console.print(f"\nNo database dump found at {relative_default}")
    answer = prompt_text(console, "Enter path to database dump (or press Enter to skip): ")
    if not answer:
        return None

    dump = Path(answer).expanduser()
    if not dump.is_absolute():
        dump = cwd / dump
    if not dump.is_file():
        raise NotFoundError(f"File not found: {dump}")
    return dump


def import_database(
    console: Console,
    state: CleanupState,
    steps: StepLog,
    cwd: Path,
    settings: Settings,
) -> StepLog:
    """Import the database snapshot into the started environment."""
    dump = resolve_dump_path(console, state.project_root, cwd, settings)
    if dump is None:
        return steps.add("Database", "Skipped (no import)")

    section(console, "Importing database")
    ddev.import_db(state.worktree_path, dump)
    return steps.add("Database", f"Imported from {dump}")


def rollback(console: Console, state: CleanupState) -> None:
    """Undo the side effects recorded in ``state``, best effort.

    Failures are reported as warnings and never raised.
    """
    if not (state.environment_started or state.worktree_created):
        return

    section(console, "Cleaning up")

    if state.environment_started:
        console.print("Deleting DDEV project...")
        try:
            ddev.delete(state.worktree_path)
        except ExternalToolError as e:
            logger.warning(f"Failed to delete DDEV project: {e}")

    if state.worktree_created:
        console.print("Removing git worktree...")
        try:
            git.worktree_remove(state.project_root, state.worktree_path)
        except ExternalToolError as e:
            logger.warning(f"Failed to remove worktree: {e}")

    console.print("Cleanup complete.")
