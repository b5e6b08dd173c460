"""Configuration models describing Bootstrapper settings."""

from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EXCLUDE_PATTERNS = [
    "node_modules",
    ".git",
    "dist",
    "build",
    "out",
    "__pycache__",
    ".venv",
    ".DS_Store",
]


class BootstrapperBaseModel(BaseModel):
    """Shared configuration for Bootstrapper Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class CaptureSettings(BootstrapperBaseModel):
    """Options governing how source trees are captured into blueprints.

    Attributes:
        exclude_patterns: Entry names or relative paths skipped during traversal.
            Patterns prefixed with ``**/`` match anywhere inside the relative path.
        include_gitignore: Whether ``.gitignore`` files are captured.
        follow_symlinks: Whether symbolic links are traversed.
        max_file_size_mb: Files larger than this are skipped; ``0`` disables the limit.
    """

    exclude_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    include_gitignore: bool = True
    follow_symlinks: bool = False
    max_file_size_mb: int = 10


class StorageSettings(BootstrapperBaseModel):
    """Blueprint storage location.

    Attributes:
        blueprints_path: Optional directory for blueprint records. ``~`` is expanded.
            When unset the store lives under ``~/.bootstrapper/blueprints``.
    """

    blueprints_path: Optional[str] = None


class CommunitySettings(BootstrapperBaseModel):
    """Remote community catalog settings.

    Attributes:
        repository: Hosted repository in ``owner/repo`` form.
        api_base: Base URL of the content API.
        timeout_seconds: Timeout applied to every individual request.
        token: Optional API token sent as a bearer credential.
    """

    repository: str = "topdown/Bootstrapper-Blueprints"
    api_base: str = "https://api.github.com"
    timeout_seconds: float = 10.0
    token: Optional[str] = None


class LoggingSettings(BootstrapperBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
        max_size_mb: Maximum log size before rotation.
        backup_count: Number of historical log files to retain.
    """

    level: str = "WARNING"
    max_size_mb: int = 10
    backup_count: int = 3


class CLIOptions(BootstrapperBaseModel):
    """CLI behavior defaults.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
    """

    quiet_default: bool = False


class BootstrapperConfig(BootstrapperBaseModel):
    """Top-level configuration struct for Bootstrapper.

    Attributes:
        capture: Tree capture settings.
        storage: Blueprint storage settings.
        community: Community catalog settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    capture: CaptureSettings = Field(default_factory=CaptureSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)
    community: CommunitySettings = Field(default_factory=CommunitySettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_EXCLUDE_PATTERNS",
    "BootstrapperBaseModel",
    "CaptureSettings",
    "StorageSettings",
    "CommunitySettings",
    "LoggingSettings",
    "CLIOptions",
    "BootstrapperConfig",
]
