"""Data models produced while capturing a source tree."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Literal

from bootstrapper.repository import Blueprint


@dataclass(slots=True)
class ScanEntry:
    """A retained filesystem entry discovered during traversal.

    Attributes:
        relative_path: Path relative to the scan root, using forward slashes.
        kind: Whether the entry is a file or a folder.
        path: Absolute filesystem path.
        size_bytes: File size for file entries.
    """

    relative_path: str
    kind: Literal["file", "folder"]
    path: Path
    size_bytes: int = 0


@dataclass(slots=True)
class SkippedPath:
    """A path left out of the result because it could not be read."""

    relative_path: str
    reason: str


@dataclass(slots=True)
class ScanResult:
    """Entries discovered by a scan plus the paths skipped along the way."""

    entries: List[ScanEntry] = field(default_factory=list)
    skipped: List[SkippedPath] = field(default_factory=list)

    @property
    def files(self) -> List[ScanEntry]:
        return [entry for entry in self.entries if entry.kind == "file"]

    @property
    def folders(self) -> List[ScanEntry]:
        return [entry for entry in self.entries if entry.kind == "folder"]


@dataclass(slots=True)
class CaptureResult:
    """Outcome of capturing a tree: the blueprint and every skipped path."""

    blueprint: Blueprint
    skipped: List[SkippedPath] = field(default_factory=list)
