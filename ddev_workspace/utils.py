"""Utility functions for DDEV Workspace."""

import logging
import subprocess
from pathlib import Path
from typing import Any

import click
from rich.console import Console
from rich.logging import RichHandler


class Logger:
    """Custom logger with rich output support."""

    def __init__(self, name: str = "workspace"):
        """Initialize logger."""
        self.logger = logging.getLogger(name)
        self.console = Console(stderr=True)
        self._setup_handlers()

    def _setup_handlers(self) -> None:
        """Set up logging handlers."""
        self.logger.handlers.clear()

        handler = RichHandler(
            console=self.console,
            show_time=False,
            show_path=False,
            markup=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
        self.logger.addHandler(handler)
        self.logger.setLevel(logging.INFO)

    def set_verbose(self, verbose: bool) -> None:
        """Enable or disable verbose logging."""
        level = logging.DEBUG if verbose else logging.INFO
        self.logger.setLevel(level)

    def debug(self, message: str, **kwargs: Any) -> None:
        """Log debug message."""
        self.logger.debug(message, **kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        """Log info message."""
        self.logger.info(message, **kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        """Log warning message."""
        self.logger.warning(f"[yellow]⚠[/yellow] {message}", **kwargs)

    def error(self, message: str, **kwargs: Any) -> None:
        """Log error message."""
        self.logger.error(f"[red]✗[/red] {message}", **kwargs)

    def success(self, message: str, **kwargs: Any) -> None:
        """Log success message."""
        self.logger.info(f"[green]✓[/green] {message}", **kwargs)


# Global logger instance
logger = Logger()


def run_command(
    command: list[str],
    cwd: Path | None = None,
    capture_output: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a command in an explicit working directory.

    Args:
        command: Command and arguments as list
        cwd: Working directory for command
        capture_output: Capture stdout and stderr instead of inheriting the terminal

    Returns:
        CompletedProcess result

    Raises:
        subprocess.CalledProcessError: command exited non-zero
        FileNotFoundError: executable is not on PATH
    """
    logger.debug(f"Running: {' '.join(command)}" + (f" (in {cwd})" if cwd else ""))

    try:
        result = subprocess.run(
            command,
            check=True,
            capture_output=capture_output,
            text=True,
            cwd=cwd,
        )

        if capture_output:
            if result.stdout:
                logger.debug(f"Output: {result.stdout.rstrip()}")
            if result.stderr:
                logger.debug(f"Error: {result.stderr.rstrip()}")

        return result

    except subprocess.CalledProcessError as e:
        if capture_output and e.stderr:
            logger.debug(f"Command failed: {' '.join(command)}: {e.stderr.rstrip()}")
        raise


def run_live(command: list[str], cwd: Path | None = None) -> None:
    """Run a long command with stdin/stdout/stderr attached to the terminal.

    Raises the same exceptions as ``run_command``.
    """
    run_command(command, cwd=cwd, capture_output=False)


def read_input(console: Console, prompt: str) -> str:
    """Read one line from the user. EOF counts as an empty answer."""
    try:
        return console.input(prompt)
    except EOFError:
        console.print()
        return ""


def prompt_confirm(console: Console, question: str) -> bool:
    """Ask for a destructive-action confirmation.

    Only ``y`` or ``Y`` confirm; anything else (including ``yes``) declines.
    """
    answer = read_input(console, f"{question} (y/N) ").strip()
    return answer in ("y", "Y")


def prompt_text(console: Console, question: str) -> str:
    """Ask for a free-form single-line answer, stripped of surrounding whitespace."""
    return read_input(console, question).strip()


class AliasedGroup(click.Group):
    """Click group that supports command aliases."""

    def __init__(self, *args: Any, aliases: dict[str, str] | None = None, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.aliases = aliases or {}

    def get_command(self, ctx: click.Context, cmd_name: str) -> click.Command | None:
        rv = click.Group.get_command(self, ctx, cmd_name)
        if rv is not None:
            return rv

        if cmd_name in self.aliases:
            actual_cmd = self.aliases[cmd_name]
            return click.Group.get_command(self, ctx, actual_cmd)

        # Unique prefix match
        matches = [x for x in self.list_commands(ctx) if x.startswith(cmd_name)]
        if not matches:
            return None
        elif len(matches) == 1:
            return click.Group.get_command(self, ctx, matches[0])

        ctx.fail(f"Too many matches: {', '.join(sorted(matches))}")

    def format_epilog(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        """Format the epilog to include aliases."""
        if self.aliases:
            command_to_aliases: dict[str, list[str]] = {}
            for alias, command in self.aliases.items():
                command_to_aliases.setdefault(command, []).append(alias)

            with formatter.section("Aliases"):
                rows = []
                for command in sorted(command_to_aliases.keys()):
                    alias_str = ", ".join(sorted(command_to_aliases[command]))
                    rows.append((alias_str, f"-> {command}"))
                formatter.write_dl(rows)

        super().format_epilog(ctx, formatter)
