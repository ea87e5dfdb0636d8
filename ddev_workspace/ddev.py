"""DDEV project configuration and commands.

The project name lives in ``.ddev/config.yaml`` as a ``name: <value>`` line.
Edits are plain text substitutions that refuse to write when the expected
text is missing, so a repeated or unexpected run never double-prefixes a name.
"""

import os
import re
import subprocess
import tempfile
from pathlib import Path

from ddev_workspace.config import Settings
from ddev_workspace.errors import ExternalToolError, MutationError, NotFoundError
from ddev_workspace.utils import run_live

COMMENT_BLOCK_RE = re.compile(r"/\*.*?\*/\s*", re.DOTALL)
HOST_ASSIGNMENT_RE = re.compile(r"""\$host\s*=\s*["'].*?["']""")


def derive_identifier(workspace_name: str, length: int = 4) -> str:
    """Default environment identifier: the first ``length`` characters of the name."""
    return workspace_name[:length]


def compose_name(identifier: str, original: str) -> str:
    return f"{identifier}-{original}"


def db_host(environment_name: str) -> str:
    """Database container host DDEV assigns to a project."""
    return f"ddev-{environment_name}-db"


def has_config(workspace: Path, settings: Settings) -> bool:
    return (workspace / settings.ddev_config).is_file()


def read_project_name(workspace: Path, settings: Settings) -> str:
    """Return the DDEV project name declared in a workspace.

    Raises:
        NotFoundError: config file missing or without a ``name:`` line
    """
    config_path = workspace / settings.ddev_config
    key = settings.ddev_name_key
    try:
        with open(config_path) as f:
            for line in f:
                line = line.rstrip("\r\n")
                if line.startswith(key):
                    return line[len(key) :]
    except FileNotFoundError as e:
        raise NotFoundError(f"No DDEV config at {config_path}") from e
    except OSError as e:
        raise NotFoundError(f"Could not read {config_path}: {e}") from e

    raise NotFoundError(f"No '{key.strip()}' field found in {config_path}")


def _write_atomic(path: Path, content: str) -> None:
    """Replace ``path`` with ``content``; on failure the original file is untouched.

    Raises:
        MutationError: the temporary file could not be written or moved into place
    """
    try:
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.")
    except OSError as e:
        raise MutationError(f"Could not write {path}: {e}") from e

    try:
        with os.fdopen(fd, "w") as f:
            f.write(content)
        os.chmod(tmp_name, path.stat().st_mode & 0o777)
        os.replace(tmp_name, path)
    except OSError as e:
        Path(tmp_name).unlink(missing_ok=True)
        raise MutationError(f"Could not write {path}: {e}") from e
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise


def _read(path: Path) -> str:
    try:
        return path.read_text()
    except OSError as e:
        raise MutationError(f"Could not read {path}: {e}") from e


def rename_project(workspace: Path, identifier: str, original: str, settings: Settings) -> str:
    """Prefix the DDEV project name with ``identifier``.

    The exact line ``name: <original>`` must be present; only its first
    occurrence is replaced.

    Returns:
        The new project name

    Raises:
        MutationError: the original line is absent (file left untouched)
    """
    config_path = workspace / settings.ddev_config
    content = _read(config_path)

    new_name = compose_name(identifier, original)
    old_line = f"{settings.ddev_name_key}{original}"
    new_line = f"{settings.ddev_name_key}{new_name}"

    line_re = re.compile(rf"^{re.escape(old_line)}$", re.MULTILINE)
    if not line_re.search(content):
        raise MutationError(f"Could not find the line '{old_line}' in {config_path}")

    _write_atomic(config_path, line_re.sub(lambda _: new_line, content, count=1))
    return new_name


def rewrite_settings(workspace: Path, environment_name: str, settings: Settings) -> str:
    """Point ``settings.ddev.php`` at the renamed project's database host.

    Drops the first ``/* ... */`` block (DDEV's "managed file" banner, so DDEV
    stops regenerating the file) and rewrites the ``$host`` assignment.

    Returns:
        The new database host

    Raises:
        MutationError: no ``$host`` assignment found (file left untouched)
    """
    settings_path = workspace / settings.settings_php
    content = _read(settings_path)

    content = COMMENT_BLOCK_RE.sub("", content, count=1)

    host = db_host(environment_name)
    if not HOST_ASSIGNMENT_RE.search(content):
        raise MutationError(f"Could not find $host assignment in {settings_path}")
    content = HOST_ASSIGNMENT_RE.sub(lambda _: f'$host = "{host}"', content)

    _write_atomic(settings_path, content)
    return host


def _ddev(args: list[str], cwd: Path) -> None:
    command = ["ddev", *args]
    try:
        run_live(command, cwd=cwd)
    except (subprocess.CalledProcessError, OSError) as e:
        raise ExternalToolError.from_exception(command, e) from e


def start(workspace: Path) -> None:
    _ddev(["start"], workspace)


def delete(workspace: Path) -> None:
    """Delete the project and its containers without a snapshot or prompt."""
    _ddev(["delete", "--omit-snapshot", "--yes"], workspace)


def import_db(workspace: Path, dump: Path) -> None:
    _ddev(["import-db", f"--file={dump}"], workspace)
