"""Blueprint persistence for the Bootstrapper CLI."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timezone
from pathlib import Path

from bootstrapper.config import CONFIG_DIR, StorageSettings

from .errors import (
    AmbiguousBlueprintError,
    InvalidBlueprintError,
    RepositoryError,
    StorageError,
    ValidationError,
)
from .models import (
    Blueprint,
    derive_folders,
    generate_blueprint_id,
    is_safe_identifier,
    parse_blueprint_document,
    parse_tags,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_BLUEPRINTS_DIR = CONFIG_DIR / "blueprints"
RECORD_SUFFIX = ".json"


def resolve_blueprints_root(settings: StorageSettings | None = None) -> Path:
    """Return the absolute directory that stores blueprint records.

    Args:
        settings: Storage settings; a blank or missing ``blueprints_path`` selects
            the default location under the user's home directory.

    Returns:
        Path: Absolute storage root with ``~`` expanded.
    """
    custom = (settings.blueprints_path or "").strip() if settings else ""
    if custom:
        return Path(custom).expanduser().resolve()
    return DEFAULT_BLUEPRINTS_DIR.expanduser().resolve()


class BlueprintRepository:
    """Store one JSON record per blueprint identifier inside a root directory.

    The root is fixed at construction and recreated on demand if it disappears.
    """

    def __init__(self, root: Path) -> None:
        """Initialize the repository.

        Args:
            root: Directory holding ``<id>.json`` records.
        """
        self._root = root

    @classmethod
    def from_settings(cls, settings: StorageSettings | None = None) -> "BlueprintRepository":
        """Build a repository rooted at the configured storage path."""
        return cls(resolve_blueprints_root(settings))

    @property
    def root(self) -> Path:
        """Return the storage root directory."""
        return self._root

    def initialize(self) -> Path:
        """Ensure the storage root exists.

        Returns:
            Path: The storage root.

        Raises:
            StorageError: If the directory cannot be created.
        """
        try:
            self._root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            message = f"Failed to create blueprints directory {self._root}: {exc}"
            raise StorageError(message) from exc
        return self._root

    def save(self, blueprint: Blueprint) -> Path:
        """Persist ``blueprint``, overwriting any record with the same identifier.

        Returns:
            Path: Location of the written record.

        Raises:
            ValidationError: If the identifier cannot be used as a file name.
            StorageError: If the record cannot be written.
        """
        path = self._record_path(blueprint.id)
        self.initialize()
        try:
            path.write_text(blueprint.to_json(), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to save blueprint {blueprint.name!r}: {exc}") from exc
        LOGGER.info("Saved blueprint %s (%s) to %s", blueprint.name, blueprint.id, path)
        return path

    def update(self, blueprint: Blueprint) -> Path:
        """Persist changes to an existing blueprint; identical to :meth:`save`."""
        return self.save(blueprint)

    def get(self, blueprint_id: str) -> Blueprint | None:
        """Return the blueprint stored under ``blueprint_id``.

        Missing and unreadable records both yield None; the latter is logged.
        """
        if not is_safe_identifier(blueprint_id):
            return None
        self.initialize()
        path = self._root / f"{blueprint_id}{RECORD_SUFFIX}"
        if not path.exists():
            return None
        return self._read_record(path)

    def list(self) -> list[Blueprint]:
        """Return every readable blueprint, newest first.

        Records that fail to parse are logged and skipped.
        """
        self.initialize()
        blueprints = []
        for path in sorted(self._root.glob(f"*{RECORD_SUFFIX}")):
            record = self._read_record(path)
            if record is not None:
                blueprints.append(record)
        blueprints.sort(key=lambda item: item.created_at, reverse=True)
        return blueprints

    def delete(self, blueprint_id: str) -> bool:
        """Remove the record for ``blueprint_id``.

        Returns:
            bool: True if a record was removed, False if none existed.

        Raises:
            ValidationError: If the identifier cannot be used as a file name.
            StorageError: If an existing record cannot be removed.
        """
        path = self._record_path(blueprint_id)
        self.initialize()
        try:
            path.unlink()
        except FileNotFoundError:
            LOGGER.debug("Blueprint %s already absent from %s", blueprint_id, self._root)
            return False
        except OSError as exc:
            raise StorageError(f"Failed to delete blueprint {blueprint_id}: {exc}") from exc
        LOGGER.info("Deleted blueprint %s", blueprint_id)
        return True

    def find(self, identifier: str) -> Blueprint | None:
        """Look up a blueprint by id, unique id prefix, or unique name.

        Raises:
            AmbiguousBlueprintError: If a prefix or name matches several records.
        """
        exact = self.get(identifier)
        if exact is not None:
            return exact

        records = self.list()
        for matches in (
            [item for item in records if item.id.startswith(identifier)],
            [item for item in records if item.name.casefold() == identifier.casefold()],
        ):
            if len(matches) == 1:
                return matches[0]
            if len(matches) > 1:
                ids = ", ".join(item.id for item in matches)
                raise AmbiguousBlueprintError(f"'{identifier}' matches several blueprints: {ids}")
        return None

    def export(self, blueprint: Blueprint, destination: Path) -> Path:
        """Write ``blueprint`` in wire format to ``destination``.

        Raises:
            StorageError: If the file cannot be written.
        """
        destination = destination.expanduser()
        try:
            destination.parent.mkdir(parents=True, exist_ok=True)
            destination.write_text(blueprint.to_json(), encoding="utf-8")
        except OSError as exc:
            raise StorageError(f"Failed to export blueprint to {destination}: {exc}") from exc
        return destination

    def import_file(self, source: Path) -> Blueprint:
        """Import an exported blueprint file as a new record.

        The imported record receives a fresh identifier and creation time.

        Raises:
            StorageError: If the file cannot be read.
            InvalidBlueprintError: If the content is not a valid blueprint document.
        """
        try:
            text = source.expanduser().read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise StorageError(f"Failed to read blueprint file {source}: {exc}") from exc

        parsed = parse_blueprint_document(text)
        if parsed is None:
            raise InvalidBlueprintError(f"Invalid blueprint format in {source}")
        blueprint = parsed.model_copy(
            update={"id": generate_blueprint_id(), "created_at": datetime.now(timezone.utc)}
        )
        self.save(blueprint)
        return blueprint

    def _record_path(self, blueprint_id: str) -> Path:
        if not is_safe_identifier(blueprint_id):
            raise ValidationError(f"Invalid blueprint identifier: {blueprint_id!r}")
        return self._root / f"{blueprint_id}{RECORD_SUFFIX}"

    def _read_record(self, path: Path) -> Blueprint | None:
        """Parse the record at ``path``; its identifier is always the file stem."""
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                raise ValueError("record is not a JSON object")
            if not is_safe_identifier(path.stem):
                raise ValueError("file name is not a usable blueprint identifier")
            if data.get("id") != path.stem:
                LOGGER.warning(
                    "Blueprint %s stores id %r; using the file name instead",
                    path.name,
                    data.get("id"),
                )
                data = {**data, "id": path.stem}
            return Blueprint.model_validate(data)
        except (OSError, UnicodeDecodeError, ValueError) as exc:
            LOGGER.warning("Failed to read blueprint %s: %s", path.name, exc)
            return None


__all__ = [
    "AmbiguousBlueprintError",
    "Blueprint",
    "BlueprintRepository",
    "DEFAULT_BLUEPRINTS_DIR",
    "InvalidBlueprintError",
    "RepositoryError",
    "StorageError",
    "ValidationError",
    "derive_folders",
    "generate_blueprint_id",
    "parse_blueprint_document",
    "parse_tags",
    "resolve_blueprints_root",
]
