"""Docker housekeeping."""

import subprocess
from pathlib import Path

from ddev_workspace.errors import ExternalToolError
from ddev_workspace.utils import run_live


def prune_build_cache(cwd: Path | None = None) -> None:
    """Reclaim the Docker build cache left behind by removed DDEV projects."""
    command = ["docker", "builder", "prune", "-f"]
    try:
        run_live(command, cwd=cwd)
    except (subprocess.CalledProcessError, OSError) as e:
        raise ExternalToolError.from_exception(command, e) from e
