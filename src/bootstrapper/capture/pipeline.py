"""Turn a scanned source tree into a blueprint record."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

from bootstrapper.config import CaptureSettings
from bootstrapper.repository import Blueprint, derive_folders, parse_tags

from .discovery import TreeScanner, build_exclusions
from .errors import CaptureError
from .models import CaptureResult, ScanEntry, SkippedPath

LOGGER = logging.getLogger(__name__)


class BinaryContentError(ValueError):
    """Raised when a file decodes as text but contains NUL bytes."""


def read_text_content(path: Path) -> str:
    """Read ``path`` as UTF-8 text with line endings preserved.

    Raises:
        OSError: If the file cannot be opened or read.
        UnicodeDecodeError: If the content is not valid UTF-8.
        BinaryContentError: If the content contains NUL bytes.
    """
    with path.open("r", encoding="utf-8", newline="") as handle:
        content = handle.read()
    if "\x00" in content:
        raise BinaryContentError("file contains NUL bytes")
    return content


class BlueprintCapture:
    """Capture a directory tree into a :class:`Blueprint`."""

    def __init__(self, scanner: TreeScanner) -> None:
        self.scanner = scanner

    @classmethod
    def from_settings(
        cls,
        settings: CaptureSettings,
        extra_patterns: Sequence[str] = (),
    ) -> "BlueprintCapture":
        """Build a capture configured from ``settings`` plus ad-hoc exclusions."""
        patterns = build_exclusions(
            [*settings.exclude_patterns, *extra_patterns],
            include_gitignore=settings.include_gitignore,
        )
        max_size = None
        if settings.max_file_size_mb > 0:
            max_size = settings.max_file_size_mb * 1024 * 1024
        scanner = TreeScanner(
            patterns,
            follow_symlinks=settings.follow_symlinks,
            max_size_bytes=max_size,
        )
        return cls(scanner)

    def capture(
        self,
        source_root: Path,
        *,
        name: str | None = None,
        description: str = "",
        tags: Iterable[str] | str | None = None,
    ) -> CaptureResult:
        """Scan ``source_root`` and read every retained file as text.

        Files that cannot be read as text are omitted and reported in
        ``CaptureResult.skipped``; they never abort the capture.

        Args:
            source_root: Directory to capture.
            name: Blueprint name; defaults to the directory name.
            description: Blueprint description.
            tags: Tags as an iterable or comma-separated string.

        Returns:
            CaptureResult: The new blueprint and the skipped paths.

        Raises:
            CaptureError: If ``source_root`` is not a readable directory, or no name
                is given and the directory has none (the filesystem root).
        """
        root = source_root.expanduser().resolve()
        blueprint_name = (name or "").strip() or root.name
        if not blueprint_name:
            raise CaptureError(f"A blueprint name is required to capture {root}")
        scan = self.scanner.scan(root)
        skipped = list(scan.skipped)

        files: dict[str, str] = {}
        for entry in scan.files:
            content = self._read(entry, skipped)
            if content is not None:
                files[entry.relative_path] = content

        folders = derive_folders(files, (entry.relative_path for entry in scan.folders))
        blueprint = Blueprint(
            name=blueprint_name,
            description=description,
            tags=parse_tags(tags),
            files=files,
            folders=folders,
        )
        LOGGER.info(
            "Captured %s: %d files, %d folders, %d skipped",
            root,
            len(files),
            len(folders),
            len(skipped),
        )
        return CaptureResult(blueprint=blueprint, skipped=skipped)

    def _read(self, entry: ScanEntry, skipped: list[SkippedPath]) -> str | None:
        try:
            return read_text_content(entry.path)
        except (OSError, ValueError) as exc:
            LOGGER.warning("Skipping file %s: %s", entry.relative_path, exc)
            skipped.append(SkippedPath(entry.relative_path, str(exc)))
            return None


def capture_tree(
    source_root: Path,
    exclude_patterns: Sequence[str] = (),
    *,
    name: str | None = None,
    description: str = "",
    tags: Iterable[str] | str | None = None,
) -> CaptureResult:
    """Capture ``source_root`` using only ``exclude_patterns`` as exclusions."""
    capture = BlueprintCapture(TreeScanner(exclude_patterns))
    return capture.capture(source_root, name=name, description=description, tags=tags)


__all__ = ["BinaryContentError", "BlueprintCapture", "capture_tree", "read_text_content"]
