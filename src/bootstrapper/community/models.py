"""Community catalog data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from .errors import CatalogValidationError

DEFINITION_FILENAME = "blueprint.json"
IGNORED_JSON_FILES = frozenset({"package.json"})
README_FILENAMES = frozenset({"readme.md", "readme.txt"})


@dataclass(frozen=True, slots=True)
class RepositoryCoordinates:
    """A hosted repository addressed as ``owner/repo``."""

    owner: str
    repo: str

    @classmethod
    def parse(cls, value: str) -> "RepositoryCoordinates":
        """Parse ``owner/repo``.

        Raises:
            CatalogValidationError: Unless the value is exactly two non-empty segments.
        """
        segments = (value or "").strip().split("/")
        if len(segments) != 2 or not all(segment.strip() for segment in segments):
            raise CatalogValidationError(
                f"Invalid repository format {value!r}. Expected format: owner/repo"
            )
        return cls(segments[0].strip(), segments[1].strip())

    def __str__(self) -> str:
        return f"{self.owner}/{self.repo}"


class CatalogEntry(BaseModel):
    """One item returned by the content API's directory listing."""

    model_config = ConfigDict(extra="ignore")

    name: str
    path: str
    type: str
    size: int = 0
    sha: str = ""
    download_url: Optional[str] = None
    html_url: Optional[str] = None

    @property
    def is_flat_definition(self) -> bool:
        """Return True for a top-level ``.json`` blueprint definition file."""
        return (
            self.type == "file"
            and self.name.endswith(".json")
            and self.name not in IGNORED_JSON_FILES
        )

    @property
    def is_bundle_definition(self) -> bool:
        return self.type == "file" and self.name == DEFINITION_FILENAME

    @property
    def is_readme(self) -> bool:
        return self.type == "file" and self.name.lower() in README_FILENAMES


class CommunityBlueprint(BaseModel):
    """Read-only descriptor of a blueprint discovered in the community catalog.

    Attributes:
        name: Blueprint name taken from the definition.
        description: Blueprint description taken from the definition.
        path: Location of the definition inside the hosted repository.
        download_url: Raw-content locator used to download the full definition.
        html_url: Browser link to the definition.
        size: Size of the definition file in bytes.
        sha: Content hash reported by the API.
        readme_url: Browser link to the companion document, if any.
        readme_content: Raw text of the companion document, if fetched.
    """

    name: str
    description: str = ""
    path: str
    download_url: str
    html_url: Optional[str] = None
    size: int = 0
    sha: str = ""
    readme_url: Optional[str] = None
    readme_content: Optional[str] = None

    @property
    def has_readme(self) -> bool:
        return bool(self.readme_content)


@dataclass(slots=True)
class SkippedEntry:
    """A catalog entry that did not yield a candidate."""

    name: str
    reason: str


@dataclass(slots=True)
class CatalogListing:
    """Candidates discovered in a repository plus the entries that were dropped.

    ``error`` is set when the top-level listing itself failed; ``candidates`` is
    then empty.
    """

    repository: RepositoryCoordinates
    candidates: List[CommunityBlueprint] = field(default_factory=list)
    skipped: List[SkippedEntry] = field(default_factory=list)
    error: Optional[str] = None

    def find(self, key: str) -> Optional[CommunityBlueprint]:
        """Return the candidate whose name or path matches ``key`` (case-insensitive)."""
        wanted = key.strip().casefold()
        for candidate in self.candidates:
            if wanted in (candidate.name.casefold(), candidate.path.casefold()):
                return candidate
        return None


__all__ = [
    "DEFINITION_FILENAME",
    "CatalogEntry",
    "CatalogListing",
    "CommunityBlueprint",
    "RepositoryCoordinates",
    "SkippedEntry",
]
