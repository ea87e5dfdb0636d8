"""Command modules for DDEV Workspace."""

from ddev_workspace.commands.init import init
from ddev_workspace.commands.list import list_workspaces
from ddev_workspace.commands.new import new
from ddev_workspace.commands.remove import remove

__all__ = ["init", "list_workspaces", "new", "remove"]
