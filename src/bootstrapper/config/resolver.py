"""Configuration resolution helpers."""

from __future__ import annotations

from collections.abc import Mapping as MappingABC
from copy import deepcopy
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import yaml
from pydantic import ValidationError

from .exceptions import ConfigError
from .models import BootstrapperConfig

ENV_PREFIX = "BOOTSTRAPPER__"


def resolve_with_precedence(
    *,
    defaults: BootstrapperConfig,
    file_overrides: Mapping[str, Any] | None = None,
    env_overrides: Mapping[str, Any] | None = None,
    cli_overrides: Mapping[str, Any] | None = None,
) -> BootstrapperConfig:
    """Merge configuration layers and validate the result.

    Layers are applied lowest first: defaults, the YAML file, environment
    variables, then CLI overrides. Keys may be nested mappings or dotted paths
    such as ``community.repository``.

    Args:
        defaults: Baseline configuration.
        file_overrides: Values read from the configuration file.
        env_overrides: Values derived from ``BOOTSTRAPPER__`` variables.
        cli_overrides: Values supplied on the command line.

    Returns:
        BootstrapperConfig: Validated configuration.

    Raises:
        ConfigError: If an override layer is malformed or the merged values are invalid.
    """
    layers: Iterable[Tuple[str, Optional[Mapping[str, Any]]]] = (
        ("file", file_overrides),
        ("environment", env_overrides),
        ("cli", cli_overrides),
    )
    merged = defaults.model_dump(mode="python")
    for label, layer in layers:
        if layer is not None:
            merged = _deep_merge(merged, _expand_dotted(layer, label))

    try:
        return BootstrapperConfig.model_validate(merged)
    except ValidationError as exc:
        raise ConfigError(f"Invalid configuration values: {exc}") from exc


def flatten_for_env(config: BootstrapperConfig) -> Dict[str, str]:
    """Render ``config`` as ``BOOTSTRAPPER__SECTION__KEY`` environment mappings."""
    flat: Dict[str, str] = {}
    stack: list[tuple[list[str], Any]] = [([], config.model_dump(mode="python"))]
    while stack:
        prefix, node = stack.pop()
        if isinstance(node, dict):
            stack.extend((prefix + [str(key)], child) for key, child in node.items())
            continue
        if isinstance(node, list):
            rendered = yaml.safe_dump(node, default_flow_style=True).strip()
        elif node is None:
            rendered = "null"
        else:
            rendered = str(node)
        flat[ENV_PREFIX + "__".join(part.upper() for part in prefix)] = rendered
    return flat


def parse_env_overrides(env: Mapping[str, str]) -> dict[str, Any]:
    """Collect nested overrides from ``BOOTSTRAPPER__`` environment variables.

    Values are parsed as YAML literals; unparsable values are kept verbatim.
    """
    overrides: dict[str, Any] = {}
    for key, raw_value in env.items():
        if not key.startswith(ENV_PREFIX):
            continue
        path = [segment.lower() for segment in key[len(ENV_PREFIX) :].split("__") if segment]
        if not path:
            continue
        try:
            value = yaml.safe_load(raw_value)
        except yaml.YAMLError:
            value = raw_value
        assign_nested(overrides, path, value)
    return overrides


def assign_nested(target: dict[str, Any], path: list[str], value: Any) -> None:
    """Assign ``value`` at ``path`` inside ``target``, creating mappings as needed.

    Raises:
        ConfigError: If an intermediate segment holds a non-mapping value.
    """
    node = target
    for segment in path[:-1]:
        child = node.setdefault(segment, {})
        if not isinstance(child, dict):
            raise ConfigError(f"Cannot assign into '{segment}' because it is not a mapping.")
        node = child
    node[path[-1]] = value


def _expand_dotted(source: Mapping[str, Any], label: str) -> dict[str, Any]:
    if not isinstance(source, MappingABC):
        raise ConfigError(f"{label.capitalize()} overrides must be a mapping.")

    expanded: dict[str, Any] = {}
    for key, value in source.items():
        if not isinstance(key, str):
            raise ConfigError(f"{label.capitalize()} override keys must be strings.")
        if isinstance(value, MappingABC):
            value = _expand_dotted(value, label)
        path = key.split(".")
        try:
            existing = _lookup(expanded, path)
        except ConfigError as exc:
            raise ConfigError(f"{label.capitalize()} override for {key} conflicts: {exc}") from exc
        if isinstance(existing, dict) and isinstance(value, dict):
            value = _deep_merge(existing, value)
        try:
            assign_nested(expanded, path, value)
        except ConfigError as exc:
            raise ConfigError(f"{label.capitalize()} override for {key} conflicts: {exc}") from exc
    return expanded


def _lookup(node: Mapping[str, Any], path: list[str]) -> Any:
    current: Any = node
    for segment in path:
        if not isinstance(current, MappingABC):
            raise ConfigError(f"'{segment}' is nested under a non-mapping value.")
        if segment not in current:
            return None
        current = current[segment]
    return current


def _deep_merge(base: Mapping[str, Any], overrides: Mapping[str, Any]) -> dict[str, Any]:
    merged = {key: deepcopy(value) for key, value in base.items()}
    for key, value in overrides.items():
        current = merged.get(key)
        if isinstance(value, MappingABC) and isinstance(current, MappingABC):
            merged[key] = _deep_merge(current, value)
        else:
            merged[key] = deepcopy(value)
    return merged


__all__ = [
    "ENV_PREFIX",
    "resolve_with_precedence",
    "flatten_for_env",
    "parse_env_overrides",
    "assign_nested",
]
