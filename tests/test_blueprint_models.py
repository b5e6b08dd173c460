"""Tests for blueprint record models and document parsing."""

from __future__ import annotations

import json
import re
from datetime import datetime, timezone

import pytest

from bootstrapper.repository import (
    Blueprint,
    ValidationError,
    derive_folders,
    generate_blueprint_id,
    parse_blueprint_document,
    parse_tags,
)


def test_generate_blueprint_id_format_and_uniqueness() -> None:
    ids = {generate_blueprint_id() for _ in range(50)}

    assert len(ids) == 50
    for identifier in ids:
        assert re.fullmatch(r"\d{13,}-[0-9a-z]{9}", identifier)


def test_derive_folders_includes_every_ancestor() -> None:
    folders = derive_folders(["a/b/c.txt", "d.txt", "a/e.md"], ["empty", "a"])

    assert folders == ["a", "a/b", "empty"]


def test_parse_tags_trims_and_deduplicates() -> None:
    assert parse_tags(" web, cli,,web , api ") == ["web", "cli", "api"]
    assert parse_tags(["x", " y ", ""]) == ["x", "y"]
    assert parse_tags(None) == []


def test_to_document_uses_wire_names_in_order() -> None:
    blueprint = Blueprint(
        name="Sample",
        description="demo",
        created_at=datetime(2024, 5, 1, 12, 0, tzinfo=timezone.utc),
        tags=["web"],
        files={"src/app.py": "print('hi')\n"},
        folders=["src"],
    )

    document = blueprint.to_document()

    assert list(document) == ["name", "description", "id", "createdAt", "tags", "files", "folders"]
    restored = Blueprint.model_validate(json.loads(blueprint.to_json()))
    assert restored == blueprint


def test_naive_timestamps_are_treated_as_utc() -> None:
    blueprint = Blueprint(name="x", createdAt="2024-01-02T03:04:05")

    assert blueprint.created_at.tzinfo is not None
    assert blueprint.created_at.utcoffset().total_seconds() == 0


def test_duplicate_assigns_new_identity_and_copies_contents() -> None:
    original = Blueprint(name="Sample", files={"a.txt": "one"}, folders=[], tags=["t"])

    copy = original.duplicate()
    copy.files["a.txt"] = "changed"

    assert copy.id != original.id
    assert copy.name == "Sample (Copy)"
    assert original.files["a.txt"] == "one"
    assert original.duplicate("Other").name == "Other"


def test_with_metadata_updates_only_given_fields() -> None:
    original = Blueprint(name="Sample", description="old", tags=["a"], files={"f": "x"})

    updated = original.with_metadata(description="new", tags="b, c")

    assert updated.name == "Sample"
    assert updated.description == "new"
    assert updated.tags == ["b", "c"]
    assert updated.id == original.id
    assert updated.files == original.files


def test_with_metadata_rejects_blank_name() -> None:
    with pytest.raises(ValidationError):
        Blueprint(name="Sample").with_metadata(name="   ")


def test_parse_blueprint_document_fills_defaults_and_rederives_folders() -> None:
    text = json.dumps(
        {
            "name": "Imported",
            "id": "1700000000000-abcdefghi",
            "files": {"pkg/mod/__init__.py": "", "README.md": "# hi"},
            "folders": ["docs"],
        }
    )

    parsed = parse_blueprint_document(text)

    assert parsed is not None
    assert parsed.id == "1700000000000-abcdefghi"
    assert parsed.description == ""
    assert parsed.tags == []
    assert parsed.folders == ["docs", "pkg", "pkg/mod"]


@pytest.mark.parametrize(
    "payload",
    [
        "not json",
        json.dumps(["a", "list"]),
        json.dumps({"files": {}}),
        json.dumps({"name": "", "files": {}}),
        json.dumps({"name": "x"}),
        json.dumps({"name": "x", "files": {"a.txt": 1}}),
        json.dumps({"name": "x", "files": ["a.txt"]}),
    ],
)
def test_parse_blueprint_document_rejects_invalid_payloads(payload: str) -> None:
    assert parse_blueprint_document(payload) is None


def test_parse_blueprint_document_replaces_unsafe_id_and_bad_timestamp() -> None:
    parsed = parse_blueprint_document(
        {"name": "x", "files": {}, "id": "../escape", "createdAt": "yesterday"}
    )

    assert parsed is not None
    assert "/" not in parsed.id
    assert parsed.created_at.tzinfo is not None


@pytest.mark.parametrize("name", ["", "   "])
def test_blank_names_are_rejected(name: str) -> None:
    with pytest.raises(ValueError):
        Blueprint(name=name)
