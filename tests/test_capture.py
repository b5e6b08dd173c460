"""Tests for source tree scanning and blueprint capture."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

from bootstrapper.capture import (
    BlueprintCapture,
    CaptureError,
    TreeScanner,
    build_exclusions,
    capture_tree,
    is_excluded,
)
from bootstrapper.config import DEFAULT_EXCLUDE_PATTERNS, CaptureSettings


def _make_tree(root: Path) -> Path:
    """Create a representative project tree under ``root``.

    Args:
        root: Parent directory provided by pytest.

    Returns:
        Path: The project directory.
    """
    project = root / "project"
    (project / "src" / "pkg").mkdir(parents=True)
    (project / "empty").mkdir()
    (project / "node_modules" / "left-pad").mkdir(parents=True)
    (project / ".git").mkdir()
    (project / "README.md").write_text("# PROJECT_NAME\n", encoding="utf-8")
    (project / "src" / "pkg" / "app.py").write_text("print('hi')\n", encoding="utf-8")
    (project / "node_modules" / "left-pad" / "index.js").write_text("x", encoding="utf-8")
    (project / ".git" / "HEAD").write_text("ref: main", encoding="utf-8")
    (project / ".gitignore").write_text("dist/\n", encoding="utf-8")
    return project


@pytest.mark.parametrize(
    ("relative_path", "pattern", "expected"),
    [
        ("node_modules", "node_modules", True),
        ("web/node_modules", "node_modules", True),
        ("web/node_modules_cache", "node_modules", False),
        ("src/generated/api", "generated/api", True),
        ("docs/build.md", "build", False),
        ("a/b/debug.log", "**/debug.log", True),
        ("a/b/other.txt", "**/debug.log", False),
    ],
)
def test_is_excluded(relative_path: str, pattern: str, expected: bool) -> None:
    assert is_excluded(relative_path, pattern) is expected


def test_capture_with_default_settings(tmp_path: Path) -> None:
    project = _make_tree(tmp_path)

    result = BlueprintCapture.from_settings(CaptureSettings()).capture(project)
    blueprint = result.blueprint

    assert blueprint.name == "project"
    assert sorted(blueprint.files) == [".gitignore", "README.md", "src/pkg/app.py"]
    assert blueprint.folders == ["empty", "src", "src/pkg"]
    assert blueprint.files["README.md"] == "# PROJECT_NAME\n"
    assert result.skipped == []


def test_capture_can_drop_gitignore(tmp_path: Path) -> None:
    project = _make_tree(tmp_path)
    settings = CaptureSettings(include_gitignore=False)

    result = BlueprintCapture.from_settings(settings, ["empty"]).capture(project, name="Custom")

    assert result.blueprint.name == "Custom"
    assert ".gitignore" not in result.blueprint.files
    assert "empty" not in result.blueprint.folders


def test_build_exclusions_appends_gitignore_once() -> None:
    patterns = build_exclusions(DEFAULT_EXCLUDE_PATTERNS, include_gitignore=False)

    assert patterns[-1] == ".gitignore"
    assert build_exclusions([".gitignore"], include_gitignore=False) == [".gitignore"]
    assert ".gitignore" not in build_exclusions(["dist"])


def test_unreadable_files_are_skipped_not_fatal(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / "ok.txt").write_text("fine", encoding="utf-8")
    (project / "image.bin").write_bytes(b"\x89PNG\x00\x01\x02")
    (project / "latin1.txt").write_bytes(b"caf\xe9")

    result = capture_tree(project)

    assert list(result.blueprint.files) == ["ok.txt"]
    assert sorted(item.relative_path for item in result.skipped) == ["image.bin", "latin1.txt"]


def test_line_endings_are_preserved(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / "windows.txt").write_bytes(b"one\r\ntwo\r\n")

    result = capture_tree(project)

    assert result.blueprint.files["windows.txt"] == "one\r\ntwo\r\n"


def test_oversized_files_are_skipped(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / "small.txt").write_text("tiny", encoding="utf-8")
    (project / "large.txt").write_text("x" * 64, encoding="utf-8")

    result = BlueprintCapture(TreeScanner(max_size_bytes=16)).capture(project)

    assert list(result.blueprint.files) == ["small.txt"]
    assert [item.relative_path for item in result.skipped] == ["large.txt"]


def test_symlinks_are_ignored_by_default(tmp_path: Path) -> None:
    project = tmp_path / "project"
    project.mkdir()
    (project / "real.txt").write_text("real", encoding="utf-8")
    try:
        os.symlink(project / "real.txt", project / "alias.txt")
    except (OSError, NotImplementedError):
        pytest.skip("symlinks are not supported here")

    assert list(capture_tree(project).blueprint.files) == ["real.txt"]

    followed = BlueprintCapture(TreeScanner(follow_symlinks=True)).capture(project)
    assert sorted(followed.blueprint.files) == ["alias.txt", "real.txt"]


def test_missing_source_raises_capture_error(tmp_path: Path) -> None:
    with pytest.raises(CaptureError):
        capture_tree(tmp_path / "absent")

    file_path = tmp_path / "file.txt"
    file_path.write_text("x", encoding="utf-8")
    with pytest.raises(CaptureError):
        capture_tree(file_path)


def test_unreadable_directory_drops_only_its_subtree(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    project = tmp_path / "project"
    (project / "locked" / "inner").mkdir(parents=True)
    (project / "locked" / "secret.txt").write_text("hidden", encoding="utf-8")
    (project / "locked" / "inner" / "deep.txt").write_text("hidden", encoding="utf-8")
    (project / "open").mkdir()
    (project / "open" / "visible.txt").write_text("shown", encoding="utf-8")
    (project / "top.txt").write_text("top", encoding="utf-8")

    original_iterdir = Path.iterdir
    locked = (project / "locked").resolve()

    def _iterdir(self: Path) -> Iterator[Path]:
        if self.resolve() == locked:
            raise PermissionError(13, "Permission denied", str(self))
        return original_iterdir(self)

    monkeypatch.setattr(Path, "iterdir", _iterdir)

    result = capture_tree(project)

    assert sorted(result.blueprint.files) == ["open/visible.txt", "top.txt"]
    assert not any(path.startswith("locked/") for path in result.blueprint.folders)
    assert [item.relative_path for item in result.skipped] == ["locked"]
    assert "unreadable directory" in result.skipped[0].reason


def test_capture_without_a_usable_name_raises(tmp_path: Path) -> None:
    capture = BlueprintCapture(TreeScanner())

    with pytest.raises(CaptureError):
        capture.capture(Path("/"))
    with pytest.raises(CaptureError):
        capture.capture(Path("/"), name="   ")
