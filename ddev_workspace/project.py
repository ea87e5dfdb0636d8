"""Project root discovery."""

from pathlib import Path

from ddev_workspace import git
from ddev_workspace.config import BARE_DIR, GIT_ENTRY
from ddev_workspace.errors import ExternalToolError, NotFoundError


def find_project_root(cwd: Path | None = None) -> Path:
    """Find the project root from the root, any workspace or any subdirectory.

    The root is the parent of git's common directory and must contain either
    the bare object store (``.bare``) or a ``.git`` entry.

    Args:
        cwd: Directory to start from (default: current)

    Returns:
        Absolute project root path

    Raises:
        NotFoundError: not inside a git repository, or no valid root found
    """
    if cwd is None:
        cwd = Path.cwd()

    try:
        common = git.common_dir(cwd)
    except ExternalToolError as e:
        raise NotFoundError(f"Not inside a git repository: {cwd}") from e

    common_path = Path(common)
    if not common_path.is_absolute():
        common_path = cwd / common_path

    project_root = common_path.resolve().parent

    if (project_root / BARE_DIR).exists() or (project_root / GIT_ENTRY).exists():
        return project_root

    raise NotFoundError(
        f"Could not find project root (no {BARE_DIR} or {GIT_ENTRY} at {project_root})"
    )
