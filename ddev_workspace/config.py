"""Configuration management for DDEV Workspace."""

from pathlib import Path

import yaml
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ddev_workspace.errors import PreconditionError

# Layout markers used before any settings can be loaded (root discovery).
BARE_DIR = ".bare"
GIT_ENTRY = ".git"
GITDIR_CONTENT = "gitdir: .bare\n"

PROJECT_CONFIG_FILE = ".workspace.yaml"


class Settings(BaseSettings):
    """Workspace settings with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="WORKSPACE_",
        case_sensitive=False,
        extra="ignore",
    )

    # Project layout
    spaces_dir: str = "spaces"
    db_dir: str = "db"
    db_dump: str = "db.sql.gz"

    # Git conventions
    remote: str = "origin"
    default_branches: list[str] = Field(default=["main", "master"])
    integration_branch: str | None = "develop"

    # DDEV
    identifier_length: int = 4
    ddev_config: Path = Path(".ddev") / "config.yaml"
    ddev_name_key: str = "name: "
    settings_php: Path = Path("web") / "sites" / "default" / "settings.ddev.php"

    # Removal
    prune_build_cache: bool = True

    @field_validator("identifier_length")
    @classmethod
    def validate_identifier_length(cls, v: int) -> int:
        """Identifiers must keep at least one character."""
        if v < 1:
            raise ValueError("identifier_length must be at least 1")
        return v

    @field_validator("default_branches")
    @classmethod
    def validate_default_branches(cls, v: list[str]) -> list[str]:
        """Require at least one default branch name."""
        if not v:
            raise ValueError("default_branches cannot be empty")
        return v

    def spaces_path(self, project_root: Path) -> Path:
        """Directory holding every workspace of a project."""
        return project_root / self.spaces_dir

    def db_dump_path(self, project_root: Path) -> Path:
        """Default database snapshot location."""
        return project_root / self.db_dir / self.db_dump

    def is_default_branch(self, name: str) -> bool:
        return name in self.default_branches


def get_project_config_path(project_root: Path) -> Path:
    """Get the path to a project's override file."""
    return project_root / PROJECT_CONFIG_FILE


def load_settings(project_root: Path | None = None) -> Settings:
    """Load settings, applying ``.workspace.yaml`` overrides from the project root."""
    config_path = get_project_config_path(project_root) if project_root else None
    if config_path is None or not config_path.exists():
        try:
            return Settings()
        except ValidationError as e:
            raise PreconditionError(f"Invalid WORKSPACE_ environment settings: {e}") from e

    try:
        with open(config_path) as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise PreconditionError(f"{config_path} must contain a mapping")
        return Settings(**data)
    except (yaml.YAMLError, ValidationError) as e:
        raise PreconditionError(f"Invalid {config_path}: {e}") from e
