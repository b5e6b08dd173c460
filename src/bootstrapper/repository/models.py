"""Blueprint record models and helpers shared by capture, storage, and import."""

from __future__ import annotations

import json
import secrets
import string
import time
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import ValidationError

_ID_ALPHABET = string.digits + string.ascii_lowercase


def generate_blueprint_id() -> str:
    """Return a new identifier: millisecond timestamp plus a random base-36 suffix."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{int(time.time() * 1000)}-{suffix}"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def derive_folders(files: Iterable[str], folders: Iterable[str] = ()) -> List[str]:
    """Return ``folders`` plus every ancestor directory of each file path, sorted.

    Args:
        files: Relative file paths using forward slashes.
        folders: Folder paths already known to exist.

    Returns:
        List[str]: Deduplicated, lexicographically sorted folder paths.
    """
    result = {folder.strip("/") for folder in folders if folder.strip("/")}
    for file_path in files:
        segments = [segment for segment in file_path.split("/") if segment]
        for depth in range(1, len(segments)):
            result.add("/".join(segments[:depth]))
    return sorted(result)


def parse_tags(text: str | Iterable[str] | None) -> List[str]:
    """Normalize user-entered tags.

    Accepts a comma-separated string or an iterable of strings. Surrounding
    whitespace is trimmed; empty and repeated tags are dropped.
    """
    if text is None:
        return []
    raw = text.split(",") if isinstance(text, str) else list(text)
    tags: List[str] = []
    for item in raw:
        tag = item.strip()
        if tag and tag not in tags:
            tags.append(tag)
    return tags


class Blueprint(BaseModel):
    """A captured directory tree: folder list plus text contents keyed by relative path.

    Attributes:
        name: Display name.
        description: Free-form description.
        id: Storage key, never reused.
        created_at: Creation timestamp (``createdAt`` on the wire).
        tags: Free-text labels.
        files: Mapping of relative file path to text content.
        folders: Relative folder paths, including every ancestor of every file.
    """

    model_config = ConfigDict(populate_by_name=True)

    name: str
    description: str = ""
    id: str = Field(default_factory=generate_blueprint_id)
    created_at: datetime = Field(default_factory=_utcnow, alias="createdAt")
    tags: List[str] = Field(default_factory=list)
    files: Dict[str, str] = Field(default_factory=dict)
    folders: List[str] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Blueprint name is required.")
        return value

    @field_validator("created_at")
    @classmethod
    def _ensure_timezone(cls, value: datetime) -> datetime:
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value

    def to_document(self) -> dict[str, Any]:
        """Return the JSON-compatible wire representation."""
        return self.model_dump(mode="json", by_alias=True)

    def to_json(self) -> str:
        """Return the wire representation as indented JSON text."""
        return json.dumps(self.to_document(), indent=2, ensure_ascii=False)

    def duplicate(self, name: str | None = None) -> "Blueprint":
        """Return a deep copy with a fresh identifier and creation time.

        Args:
            name: Name for the copy; defaults to ``"<name> (Copy)"``.
        """
        new_name = (name or "").strip() or f"{self.name} (Copy)"
        return self.model_copy(
            deep=True,
            update={"id": generate_blueprint_id(), "created_at": _utcnow(), "name": new_name},
        )

    def with_metadata(
        self,
        *,
        name: str | None = None,
        description: str | None = None,
        tags: Iterable[str] | str | None = None,
    ) -> "Blueprint":
        """Return a copy with updated metadata; contents, id and timestamp are kept.

        Raises:
            ValidationError: If the new name is blank.
        """
        update: dict[str, Any] = {}
        if name is not None:
            if not name.strip():
                raise ValidationError("Blueprint name is required.")
            update["name"] = name.strip()
        if description is not None:
            update["description"] = description
        if tags is not None:
            update["tags"] = parse_tags(tags)
        return self.model_copy(deep=True, update=update)


def parse_blueprint_document(payload: Any) -> Optional[Blueprint]:
    """Validate an externally supplied blueprint document.

    ``payload`` may be a decoded mapping or JSON text. A document is accepted when
    ``name`` is a non-empty string and ``files`` maps strings to strings. Optional
    fields fall back to empty values and folders are re-derived from file paths.

    Returns:
        Optional[Blueprint]: The parsed record, or None when the document is invalid.
    """
    if isinstance(payload, (str, bytes)):
        try:
            payload = json.loads(payload)
        except ValueError:
            return None
    if not isinstance(payload, Mapping):
        return None

    name = payload.get("name")
    files = payload.get("files")
    if not isinstance(name, str) or not name.strip():
        return None
    if not isinstance(files, Mapping):
        return None
    if not all(isinstance(key, str) and isinstance(value, str) for key, value in files.items()):
        return None

    description = payload.get("description")
    raw_tags = payload.get("tags")
    raw_folders = payload.get("folders")
    fields: dict[str, Any] = {
        "name": name,
        "description": description if isinstance(description, str) else "",
        "tags": parse_tags(t for t in raw_tags if isinstance(t, str))
        if isinstance(raw_tags, list)
        else [],
        "files": dict(files),
        "folders": derive_folders(
            files.keys(),
            [f for f in raw_folders if isinstance(f, str)] if isinstance(raw_folders, list) else [],
        ),
    }

    record_id = payload.get("id")
    if isinstance(record_id, str) and is_safe_identifier(record_id):
        fields["id"] = record_id
    created_at = payload.get("createdAt")
    if created_at is not None:
        try:
            return Blueprint.model_validate({**fields, "createdAt": created_at})
        except ValueError:
            pass
    return Blueprint.model_validate(fields)


def is_safe_identifier(identifier: str) -> bool:
    """Return True when ``identifier`` can be used as a record file name."""
    if not identifier or identifier.startswith("."):
        return False
    return not any(marker in identifier for marker in ("/", "\\", "\x00"))


__all__ = [
    "Blueprint",
    "derive_folders",
    "generate_blueprint_id",
    "is_safe_identifier",
    "parse_blueprint_document",
    "parse_tags",
]
