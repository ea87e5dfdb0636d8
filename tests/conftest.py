"""Pytest fixtures for workspace tests."""

import io
import subprocess
from pathlib import Path

import pytest
from rich.console import Console

DDEV_CONFIG = """name: project
type: drupal10
docroot: web
php_version: "8.3"
"""

SETTINGS_PHP = """<?php

/**
 * @file
 * #ddev-generated: Automatically generated Drupal settings file.
 * ddev manages this file and may delete or overwrite the file unless this
 * comment is removed.
 */

$host = "db";
$port = 3306;
$driver = "mysql";
"""


def git(cwd: Path, *args: str) -> str:
    result = subprocess.run(
        ["git", *args],
        cwd=cwd,
        capture_output=True,
        text=True,
        check=True,
    )
    return result.stdout


@pytest.fixture
def console():
    """Console writing to a buffer, readable via ``console.file.getvalue()``."""
    return Console(file=io.StringIO(), width=200)


def _init_repo(path: Path, with_ddev: bool) -> Path:
    path.mkdir(parents=True)
    git(path, "init", "-q")
    git(path, "symbolic-ref", "HEAD", "refs/heads/main")
    git(path, "config", "user.email", "test@test.com")
    git(path, "config", "user.name", "Test")

    (path / "README.md").write_text("# Test")
    if with_ddev:
        (path / ".ddev").mkdir()
        (path / ".ddev" / "config.yaml").write_text(DDEV_CONFIG)
        settings_dir = path / "web" / "sites" / "default"
        settings_dir.mkdir(parents=True)
        (settings_dir / "settings.ddev.php").write_text(SETTINGS_PHP)

    git(path, "add", ".")
    git(path, "commit", "-q", "-m", "Initial commit")
    return path


@pytest.fixture
def project(tmp_path):
    """Git repository on ``main`` with a DDEV project named ``project``."""
    return _init_repo(tmp_path.resolve() / "project", with_ddev=True)


@pytest.fixture
def plain_project(tmp_path):
    """Git repository on ``main`` without any DDEV configuration."""
    return _init_repo(tmp_path.resolve() / "plain", with_ddev=False)


@pytest.fixture
def add_worktree(project):
    """Create ``spaces/<name>`` on a new branch of the same name."""

    def _add(name: str) -> Path:
        git(project, "worktree", "add", "-q", "-b", name, f"spaces/{name}")
        return project / "spaces" / name

    return _add
