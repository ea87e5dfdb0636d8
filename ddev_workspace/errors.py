"""Error types raised by workspace workflows.

Workflows raise a ``WorkspaceError`` subclass on expected failures. The CLI
layer catches ``WorkspaceError``, logs the message and exits non-zero.
Programmer bugs raise normal exceptions.
"""

from collections.abc import Sequence


class WorkspaceError(Exception):
    """Base class for expected workspace failures."""


class PreconditionError(WorkspaceError):
    """Bad arguments, missing input or ambiguous state. Raised before side effects."""


class NotFoundError(WorkspaceError):
    """Project root, environment declaration or registry entry is missing."""


class MutationError(WorkspaceError):
    """Expected text pattern was not found in a configuration file."""


class ExternalToolError(WorkspaceError):
    """An invoked tool exited non-zero or could not be executed."""

    def __init__(self, message: str, command: Sequence[str] = (), returncode: int | None = None):
        super().__init__(message)
        self.command = list(command)
        self.returncode = returncode

    @classmethod
    def from_exception(cls, command: Sequence[str], exc: Exception) -> "ExternalToolError":
        """Build from a ``CalledProcessError`` or ``OSError`` raised by ``subprocess``."""
        cmd = " ".join(command)
        returncode = getattr(exc, "returncode", None)
        if returncode is not None:
            return cls(f"'{cmd}' exited with status {returncode}", command, returncode)
        return cls(f"could not run '{cmd}': {exc}", command)
