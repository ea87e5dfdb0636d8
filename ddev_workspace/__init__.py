"""DDEV Workspace - git worktrees paired with isolated DDEV environments."""

__version__ = "0.1.0"
