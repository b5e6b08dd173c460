"""Directory traversal with exclusion rules."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, Sequence

from .errors import CaptureError
from .models import ScanEntry, ScanResult, SkippedPath

LOGGER = logging.getLogger(__name__)

ANY_DEPTH_PREFIX = "**/"


def is_excluded(relative_path: str, pattern: str) -> bool:
    """Return True when ``relative_path`` matches an exclusion ``pattern``.

    A ``**/`` pattern matches when its remainder occurs anywhere in the path.
    Any other pattern matches the whole relative path, a trailing ``/pattern``
    suffix, or the final path segment.
    """
    if pattern.startswith(ANY_DEPTH_PREFIX):
        return pattern[len(ANY_DEPTH_PREFIX) :] in relative_path
    name = relative_path.rsplit("/", 1)[-1]
    return relative_path == pattern or relative_path.endswith("/" + pattern) or name == pattern


class TreeScanner:
    """Walk a directory depth-first, skipping excluded entries and their subtrees."""

    def __init__(
        self,
        exclude_patterns: Sequence[str] = (),
        *,
        follow_symlinks: bool = False,
        max_size_bytes: int | None = None,
    ) -> None:
        self.exclude_patterns = [pattern for pattern in exclude_patterns if pattern]
        self.follow_symlinks = follow_symlinks
        self.max_size_bytes = max_size_bytes

    def excludes(self, relative_path: str) -> bool:
        """Return True when any configured pattern matches ``relative_path``."""
        return any(is_excluded(relative_path, pattern) for pattern in self.exclude_patterns)

    def scan(self, root: Path) -> ScanResult:
        """Return every retained entry below ``root``.

        Unreadable directories are logged and recorded in ``skipped``; their
        subtrees are absent from the result.

        Raises:
            CaptureError: If ``root`` is missing or not a directory.
        """
        root = root.expanduser().resolve()
        if not root.is_dir():
            raise CaptureError(f"Source directory does not exist: {root}")

        result = ScanResult()
        visited = {root}
        self._walk(root, "", result, visited)
        return result

    def _walk(self, directory: Path, prefix: str, result: ScanResult, visited: set[Path]) -> None:
        try:
            children = sorted(directory.iterdir(), key=lambda child: child.name)
        except OSError as exc:
            LOGGER.warning("Cannot read directory %s: %s", directory, exc)
            result.skipped.append(SkippedPath(prefix or ".", f"unreadable directory: {exc}"))
            return

        for child in children:
            relative = f"{prefix}/{child.name}" if prefix else child.name
            if self.excludes(relative):
                LOGGER.debug("Excluded %s", relative)
                continue
            if child.is_symlink() and not self.follow_symlinks:
                LOGGER.debug("Skipping symbolic link %s", relative)
                continue

            try:
                if child.is_dir():
                    self._enter(child, relative, result, visited)
                elif child.is_file():
                    self._record_file(child, relative, result)
            except OSError as exc:
                LOGGER.warning("Cannot inspect %s: %s", relative, exc)
                result.skipped.append(SkippedPath(relative, str(exc)))

    def _enter(self, child: Path, relative: str, result: ScanResult, visited: set[Path]) -> None:
        resolved = child.resolve()
        if resolved in visited:
            LOGGER.debug("Skipping already visited directory %s", relative)
            return
        visited.add(resolved)
        result.entries.append(ScanEntry(relative, "folder", child))
        self._walk(child, relative, result, visited)

    def _record_file(self, child: Path, relative: str, result: ScanResult) -> None:
        size = child.stat().st_size
        if self.max_size_bytes is not None and size > self.max_size_bytes:
            LOGGER.warning("Skipping file %s: %d bytes exceeds the size limit", relative, size)
            result.skipped.append(SkippedPath(relative, "file exceeds size limit"))
            return
        result.entries.append(ScanEntry(relative, "file", child, size))


def build_exclusions(patterns: Iterable[str], *, include_gitignore: bool = True) -> list[str]:
    """Return the effective exclusion list, adding ``.gitignore`` when it is not captured."""
    expanded = list(patterns)
    if not include_gitignore and ".gitignore" not in expanded:
        expanded.append(".gitignore")
    return expanded


__all__ = ["ANY_DEPTH_PREFIX", "TreeScanner", "build_exclusions", "is_excluded"]
