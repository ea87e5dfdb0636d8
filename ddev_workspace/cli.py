"""Main CLI entry point for DDEV Workspace."""

import sys

import click
from rich.console import Console

from ddev_workspace import __version__
from ddev_workspace.commands import init, list_workspaces, new, remove
from ddev_workspace.utils import AliasedGroup, logger

console = Console()


@click.group(
    cls=AliasedGroup,
    aliases={
        "ls": "list",
        "rm": "remove",
        "del": "remove",
        "create": "new",
        "clone": "init",
    },
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option("--version", "-v", is_flag=True, help="Show version and exit")
@click.option("--verbose", is_flag=True, help="Show every command being run")
@click.pass_context
def cli(ctx: click.Context, version: bool, verbose: bool) -> None:
    """DDEV Workspace - git worktrees with isolated DDEV environments.

    Each workspace is a worktree under spaces/ with its own branch, DDEV
    project and database. Commands work from the project root, from inside
    any workspace, or from any subdirectory.
    """
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    ctx.obj["console"] = console

    if verbose:
        logger.set_verbose(True)

    if version:
        console.print(f"DDEV Workspace v{__version__}")
        sys.exit(0)

    # Missing subcommand is a usage error
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help(), err=True)
        sys.exit(1)


cli.add_command(init)
cli.add_command(new)
cli.add_command(remove)
cli.add_command(list_workspaces)


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
