"""Git operations.

Every function takes the directory to run in; the process working directory
is never changed. Failures surface as ``ExternalToolError``.
"""

import subprocess
from pathlib import Path

from ddev_workspace.errors import ExternalToolError
from ddev_workspace.utils import run_command, run_live

HEADS_PREFIX = "refs/heads/"


def _git(args: list[str], cwd: Path, live: bool = False) -> str:
    command = ["git", *args]
    try:
        if live:
            run_live(command, cwd=cwd)
            return ""
        return run_command(command, cwd=cwd).stdout
    except (subprocess.CalledProcessError, OSError) as e:
        raise ExternalToolError.from_exception(command, e) from e


def common_dir(cwd: Path) -> str:
    """Return git's shared metadata directory as printed (may be relative to ``cwd``)."""
    return _git(["rev-parse", "--git-common-dir"], cwd).strip()


def ref_exists(cwd: Path, ref: str) -> bool:
    """Check whether ``ref`` resolves to an object."""
    try:
        _git(["rev-parse", "--verify", "--quiet", ref], cwd)
    except ExternalToolError:
        return False
    return True


def branch_exists(cwd: Path, branch: str, remote: str | None = None) -> bool:
    """Check for a local branch, or a remote-tracking branch when ``remote`` is given."""
    if ref_exists(cwd, f"{HEADS_PREFIX}{branch}"):
        return True
    return remote is not None and ref_exists(cwd, f"refs/remotes/{remote}/{branch}")


def worktree_list(cwd: Path) -> str:
    """Raw ``git worktree list --porcelain`` output."""
    return _git(["worktree", "list", "--porcelain"], cwd)


def worktree_add(
    cwd: Path,
    path: str,
    branch: str,
    create: bool = False,
    base: str | None = None,
) -> None:
    """Add a worktree at ``path``.

    With ``create`` the branch is created together with the worktree, from
    ``base`` when given or the current HEAD otherwise.
    """
    if create:
        args = ["worktree", "add", "-b", branch, path]
        if base:
            args.append(base)
    else:
        args = ["worktree", "add", path, branch]
    _git(args, cwd, live=True)


def worktree_remove(cwd: Path, path: Path) -> None:
    """Force-remove a worktree, discarding uncommitted changes."""
    _git(["worktree", "remove", "--force", str(path)], cwd, live=True)


def branch_delete(cwd: Path, branch: str) -> None:
    _git(["branch", "-D", branch], cwd, live=True)


def clone_bare(cwd: Path, url: str, target: Path) -> None:
    _git(["clone", "--bare", url, str(target)], cwd, live=True)


def set_config(cwd: Path, key: str, value: str) -> None:
    _git(["config", key, value], cwd)


def fetch(cwd: Path, remote: str) -> None:
    _git(["fetch", remote], cwd, live=True)


def remote_head(cwd: Path, remote: str) -> str | None:
    """Short name of the branch ``refs/remotes/<remote>/HEAD`` points to, if set."""
    prefix = f"refs/remotes/{remote}/"
    try:
        ref = _git(["symbolic-ref", f"{prefix}HEAD"], cwd).strip()
    except ExternalToolError:
        return None
    if not ref.startswith(prefix):
        return None
    return ref[len(prefix) :] or None
