"""Tests for creating projects from blueprints."""

from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from bootstrapper.capture import capture_tree
from bootstrapper.materialize import (
    InvalidProjectNameError,
    ProjectExistsError,
    ProjectMaterializer,
    UnsafePathError,
    safe_relative_path,
    validate_project_name,
)
from bootstrapper.repository import Blueprint, derive_folders


def _blueprint(files: dict[str, str], folders: list[str] | None = None) -> Blueprint:
    return Blueprint(
        name="Sample",
        files=files,
        folders=derive_folders(files, folders or []),
    )


def test_materialize_creates_nested_files_with_substitution(tmp_path: Path) -> None:
    blueprint = _blueprint({"a/b/c.txt": "hi {{PROJECT_NAME}}"})

    project = ProjectMaterializer().materialize(blueprint, tmp_path, "demo")

    assert project == tmp_path.resolve() / "demo"
    assert (project / "a" / "b" / "c.txt").read_text(encoding="utf-8") == "hi demo"


def test_materialize_creates_empty_folders_and_keeps_line_endings(tmp_path: Path) -> None:
    blueprint = _blueprint(
        {"README.md": "# PROJECT_NAME_PASCAL\r\nCreated DATE\r\n"},
        ["docs/empty"],
    )

    project = ProjectMaterializer(today=date(2023, 12, 31)).materialize(
        blueprint, tmp_path, "my-app"
    )

    assert (project / "docs" / "empty").is_dir()
    assert (project / "README.md").read_bytes() == b"# MyApp\r\nCreated 2023-12-31\r\n"


@pytest.mark.parametrize("name", ["", "   ", "has space", "dots.not.allowed", "../up", "naïve"])
def test_invalid_project_names_are_rejected(tmp_path: Path, name: str) -> None:
    with pytest.raises(InvalidProjectNameError):
        ProjectMaterializer().materialize(_blueprint({"a.txt": "x"}), tmp_path, name)
    assert list(tmp_path.iterdir()) == []


def test_validate_project_name_accepts_common_names() -> None:
    for name in ("demo", "my-app", "my_app", "App2"):
        assert validate_project_name(name) == name


def test_existing_project_requires_overwrite(tmp_path: Path) -> None:
    existing = tmp_path / "demo"
    existing.mkdir()
    (existing / "stale.txt").write_text("old", encoding="utf-8")
    blueprint = _blueprint({"fresh.txt": "new"})

    with pytest.raises(ProjectExistsError):
        ProjectMaterializer().materialize(blueprint, tmp_path, "demo")
    assert (existing / "stale.txt").exists()

    ProjectMaterializer().materialize(blueprint, tmp_path, "demo", overwrite=True)

    assert not (existing / "stale.txt").exists()
    assert (existing / "fresh.txt").read_text(encoding="utf-8") == "new"


def test_unsafe_paths_abort_before_writing(tmp_path: Path) -> None:
    blueprint = Blueprint(name="Evil", files={"ok.txt": "x", "../escape.txt": "y"})

    with pytest.raises(UnsafePathError):
        ProjectMaterializer().materialize(blueprint, tmp_path, "demo")

    assert not (tmp_path / "demo").exists()
    assert not (tmp_path / "escape.txt").exists()


@pytest.mark.parametrize("value", ["", "/etc/passwd", "a/../../b", "..", "C:\\windows\\x"])
def test_safe_relative_path_rejects_escapes(value: str) -> None:
    with pytest.raises(UnsafePathError):
        safe_relative_path(value)


def test_safe_relative_path_normalizes_separators() -> None:
    assert safe_relative_path("src\\pkg\\mod.py").as_posix() == "src/pkg/mod.py"


def test_capture_then_materialize_round_trip(tmp_path: Path) -> None:
    source = tmp_path / "source"
    (source / "a" / "b").mkdir(parents=True)
    (source / "a" / "b" / "c.txt").write_text("hi {{PROJECT_NAME}}", encoding="utf-8")

    blueprint = capture_tree(source).blueprint

    assert blueprint.folders == ["a", "a/b"]
    assert blueprint.files == {"a/b/c.txt": "hi {{PROJECT_NAME}}"}

    destination = tmp_path / "D"
    destination.mkdir()
    project = ProjectMaterializer().materialize(blueprint, destination, "demo")

    assert (project / "a" / "b" / "c.txt").read_text(encoding="utf-8") == "hi demo"


def test_rematerializing_with_overwrite_is_idempotent(tmp_path: Path) -> None:
    blueprint = _blueprint({"src/app.py": "print('static')\n", "README.md": "# readme\n"}, ["docs"])
    materializer = ProjectMaterializer()

    first = materializer.materialize(blueprint, tmp_path, "same")
    snapshot = _tree(first)
    second = materializer.materialize(blueprint, tmp_path, "same", overwrite=True)

    assert second == first
    assert _tree(second) == snapshot


def _tree(root: Path) -> dict[str, str | None]:
    return {
        path.relative_to(root).as_posix(): (
            path.read_text(encoding="utf-8") if path.is_file() else None
        )
        for path in sorted(root.rglob("*"))
    }
