"""Step log and rollback state shared by the workflows."""

from dataclasses import dataclass, replace
from pathlib import Path

from rich.console import Console


@dataclass(frozen=True)
class StepResult:
    """One completed (or skipped, or partially failed) workflow step."""

    description: str
    detail: str


@dataclass(frozen=True)
class StepLog:
    """Ordered, append-only record of the steps a workflow performed.

    ``add`` returns a new log so partial runs can be inspected as values.
    """

    steps: tuple[StepResult, ...] = ()

    def add(self, description: str, detail: str) -> "StepLog":
        return StepLog(self.steps + (StepResult(description, detail),))

    def __iter__(self):
        return iter(self.steps)

    def __len__(self) -> int:
        return len(self.steps)

    def descriptions(self) -> list[str]:
        return [step.description for step in self.steps]

    def detail(self, description: str) -> str | None:
        """Detail of the first step with the given description."""
        for step in self.steps:
            if step.description == description:
                return step.detail
        return None


@dataclass(frozen=True)
class CleanupState:
    """Side effects applied so far by a creation run.

    Flags are flipped only after the corresponding side effect succeeded.
    """

    worktree_path: Path
    project_root: Path
    worktree_created: bool = False
    environment_started: bool = False

    def with_worktree(self) -> "CleanupState":
        return replace(self, worktree_created=True)

    def with_environment(self) -> "CleanupState":
        return replace(self, environment_started=True)


def print_summary(console: Console, title: str, steps: StepLog) -> None:
    """Print the ordered step summary."""
    console.print()
    console.print(f"[bold green]=== {title} ===[/bold green]")
    console.print()
    for step in steps:
        label = f"{step.description}:"
        console.print(f"  {label:<25} {step.detail}", highlight=False, markup=False, soft_wrap=True)
    console.print()
