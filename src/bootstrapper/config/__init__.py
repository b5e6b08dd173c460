"""Configuration management for Bootstrapper.

Settings live in ``~/.bootstrapper/config.yaml``. Effective values are resolved
in increasing precedence: model defaults, the file, ``BOOTSTRAPPER__`` environment
variables, then overrides passed in by the CLI.
"""

from __future__ import annotations

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping

import yaml

from .exceptions import ConfigError
from .models import (
    DEFAULT_EXCLUDE_PATTERNS,
    BootstrapperConfig,
    CaptureSettings,
    CLIOptions,
    CommunitySettings,
    LoggingSettings,
    StorageSettings,
)
from .resolver import (
    assign_nested,
    flatten_for_env,
    parse_env_overrides,
    resolve_with_precedence,
)

CONFIG_DIR = Path("~/.bootstrapper")
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.yaml"
HEADER_LINES = (
    "# Bootstrapper configuration file",
    "# Edit with `bootstrapper config edit` or `bootstrapper config set KEY --value VALUE`.",
)


def render_config_document(data: Mapping[str, Any], *, stamp: datetime | None = None) -> str:
    """Return the YAML text written to the configuration file for ``data``."""
    moment = (stamp or datetime.now(timezone.utc)).astimezone(timezone.utc)
    header = [*HEADER_LINES, f"# Last updated: {moment.strftime('%Y-%m-%dT%H:%M:%SZ')}"]
    body = yaml.safe_dump(dict(data), sort_keys=False, allow_unicode=True)
    return "\n".join(header) + "\n" + body


class ConfigManager:
    """Own the configuration file and produce validated :class:`BootstrapperConfig` objects.

    Usage:
        manager = ConfigManager()
        config = manager.load()
        manager.save({"community": {"repository": "acme/blueprints"}})
    """

    def __init__(
        self,
        config_path: Path | None = None,
        *,
        env: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize the manager.

        Args:
            config_path: Configuration file; defaults to ``~/.bootstrapper/config.yaml``.
            env: Environment mapping consulted for overrides; defaults to ``os.environ``.
        """
        self._path = (config_path or DEFAULT_CONFIG_PATH).expanduser()
        self._env: Mapping[str, str] = os.environ if env is None else env

    @property
    def config_path(self) -> Path:
        return self._path

    @property
    def config_dir(self) -> Path:
        """Directory holding the configuration file and ``bootstrapper.log``."""
        return self._path.parent

    def ensure_exists(self) -> Path:
        """Write a default configuration file unless one is already present."""
        if not self._path.exists():
            self._write(BootstrapperConfig().model_dump(mode="python"))
        return self._path

    def load(
        self,
        *,
        cli_overrides: Mapping[str, Any] | None = None,
        include_env: bool = True,
        ensure_file: bool = True,
        env_overrides: Mapping[str, str] | None = None,
    ) -> BootstrapperConfig:
        """Resolve the effective configuration.

        Args:
            cli_overrides: Highest-precedence values, nested or dotted keys.
            include_env: Apply ``BOOTSTRAPPER__`` variables when True.
            ensure_file: Create a default file first if none exists.
            env_overrides: Environment mapping used instead of the manager's own.

        Returns:
            BootstrapperConfig: Validated configuration.

        Raises:
            ConfigError: If the file is not a YAML mapping or a value is invalid.
        """
        if ensure_file:
            self.ensure_exists()

        env_layer: dict[str, Any] | None = None
        if include_env:
            source = self._env if env_overrides is None else env_overrides
            env_layer = parse_env_overrides(source) or None

        return resolve_with_precedence(
            defaults=BootstrapperConfig(),
            file_overrides=self.load_file_overrides(),
            env_overrides=env_layer,
            cli_overrides=cli_overrides,
        )

    def load_file_overrides(self) -> dict[str, Any]:
        """Return the mapping stored in the configuration file (empty if absent).

        Raises:
            ConfigError: If the file is not valid YAML or not a mapping.
        """
        text = self.read_text()
        if not text.strip():
            return {}
        try:
            document = yaml.safe_load(text)
        except yaml.YAMLError as exc:
            raise ConfigError(f"Failed to parse {self._path}: {exc}") from exc
        if document is None:
            return {}
        if not isinstance(document, dict):
            raise ConfigError(f"{self._path} must contain a mapping at the top level.")
        return document

    def save(self, config: BootstrapperConfig | Mapping[str, Any]) -> None:
        """Replace the configuration file with ``config``."""
        if isinstance(config, BootstrapperConfig):
            self._write(config.model_dump(mode="python"))
        else:
            self._write(config)

    def read_text(self) -> str:
        """Return the raw file contents, or an empty string when there is no file."""
        try:
            return self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return ""

    def _write(self, data: Mapping[str, Any]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(render_config_document(data), encoding="utf-8")


__all__ = [
    "CONFIG_DIR",
    "DEFAULT_CONFIG_PATH",
    "DEFAULT_EXCLUDE_PATTERNS",
    "BootstrapperConfig",
    "CLIOptions",
    "CaptureSettings",
    "CommunitySettings",
    "ConfigError",
    "ConfigManager",
    "LoggingSettings",
    "StorageSettings",
    "assign_nested",
    "flatten_for_env",
    "parse_env_overrides",
    "render_config_document",
    "resolve_with_precedence",
]
