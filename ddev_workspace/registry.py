"""Worktree registry built from ``git worktree list --porcelain``."""

from dataclasses import dataclass
from pathlib import Path

from ddev_workspace import git
from ddev_workspace.config import Settings
from ddev_workspace.errors import ExternalToolError, NotFoundError


@dataclass(frozen=True)
class WorkspaceEntry:
    """One record of the worktree listing."""

    name: str
    path: Path
    branch: str | None = None
    head: str | None = None
    is_primary: bool = False
    in_spaces: bool = False

    @property
    def detached(self) -> bool:
        return self.branch is None


def _relative_name(path: Path, spaces_dir: Path) -> str | None:
    try:
        relative = path.relative_to(spaces_dir)
    except ValueError:
        return None
    name = relative.as_posix()
    return None if name in ("", ".") else name


def _build_entry(record: dict, project_root: Path, spaces_dir: Path) -> WorkspaceEntry:
    path = Path(record["path"])
    name = _relative_name(path, spaces_dir)
    return WorkspaceEntry(
        name=name if name is not None else path.name,
        path=path,
        branch=record.get("branch"),
        head=record.get("head"),
        is_primary=record.get("bare", False) or path == project_root,
        in_spaces=name is not None,
    )


def parse_worktree_list(output: str, project_root: Path, spaces_dir: Path) -> list[WorkspaceEntry]:
    """Parse porcelain worktree output into entries, preserving order.

    Records are separated by blank lines; the last record may not be
    followed by one.
    """
    entries = []
    current: dict = {}

    for line in output.splitlines():
        if line.startswith("worktree "):
            if current:
                entries.append(_build_entry(current, project_root, spaces_dir))
            current = {"path": line[len("worktree ") :]}
        elif not current:
            continue
        elif line == "":
            entries.append(_build_entry(current, project_root, spaces_dir))
            current = {}
        elif line == "bare":
            current["bare"] = True
        elif line.startswith("HEAD "):
            current["head"] = line[len("HEAD ") :]
        elif line.startswith("branch "):
            ref = line[len("branch ") :]
            current["branch"] = ref.removeprefix(git.HEADS_PREFIX)

    if current:
        entries.append(_build_entry(current, project_root, spaces_dir))

    return entries


def list_entries(project_root: Path, settings: Settings) -> list[WorkspaceEntry]:
    """Every worktree git knows about, primary entries included."""
    try:
        output = git.worktree_list(project_root)
    except ExternalToolError as e:
        raise ExternalToolError(f"Failed to list worktrees: {e}", e.command, e.returncode) from e
    return parse_worktree_list(output, project_root, settings.spaces_path(project_root))


def list_workspaces(project_root: Path, settings: Settings) -> list[WorkspaceEntry]:
    """Usable workspaces under the spaces directory."""
    return [e for e in list_entries(project_root, settings) if not e.is_primary and e.in_spaces]


def find_workspace(project_root: Path, target: Path, settings: Settings) -> WorkspaceEntry:
    """Look up a canonical path among the non-primary worktrees.

    Raises:
        NotFoundError: path is not a removable worktree
    """
    for entry in list_entries(project_root, settings):
        if entry.is_primary:
            continue
        if entry.path == target or entry.path.resolve() == target:
            return entry
    raise NotFoundError(f"{target} is not a git worktree of {project_root}")
