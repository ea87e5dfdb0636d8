"""List command for workspaces."""

import sys

import click
from rich.console import Console
from rich.table import Table

from ddev_workspace import ddev
from ddev_workspace.config import load_settings
from ddev_workspace.errors import NotFoundError, WorkspaceError
from ddev_workspace.project import find_project_root
from ddev_workspace.registry import list_workspaces as get_workspaces
from ddev_workspace.utils import logger


@click.command(name="list")
@click.pass_context
def list_workspaces(ctx: click.Context) -> None:
    """List all workspaces with their branch and DDEV project."""
    console: Console = ctx.obj["console"]

    try:
        project_root = find_project_root()
        settings = load_settings(project_root)
        workspaces = get_workspaces(project_root, settings)
    except WorkspaceError as e:
        logger.error(f"Error: {e}")
        sys.exit(1)

    if not workspaces:
        console.print("No workspaces found.")
        console.print("[dim]Use 'workspace new <name>' to create one[/dim]")
        return

    table = Table()
    table.add_column("Name", style="cyan", no_wrap=True)
    table.add_column("Branch", style="green", no_wrap=True)
    table.add_column("DDEV", style="blue", no_wrap=True)

    for w in workspaces:
        try:
            environment = ddev.read_project_name(w.path, settings)
        except NotFoundError:
            environment = "-"
        table.add_row(w.name, w.branch or "(detached)", environment)

    console.print(table)
