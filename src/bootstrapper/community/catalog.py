"""Discover and import blueprints hosted in a community repository.

The catalog lives under ``blueprints/`` in the hosted repository and supports two
layouts:

- flat definitions: ``blueprints/<name>.json``
- bundles: ``blueprints/<name>/blueprint.json`` with an optional README
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from pydantic import ValidationError as PydanticValidationError

from bootstrapper.config import CommunitySettings
from bootstrapper.repository import (
    Blueprint,
    BlueprintRepository,
    InvalidBlueprintError,
    generate_blueprint_id,
    parse_blueprint_document,
)

from .client import CatalogHttpClient
from .errors import CatalogError
from .models import (
    CatalogEntry,
    CatalogListing,
    CommunityBlueprint,
    RepositoryCoordinates,
    SkippedEntry,
)

LOGGER = logging.getLogger(__name__)

DEFAULT_API_BASE = "https://api.github.com"
CATALOG_ROOT = "blueprints"
COMMUNITY_TAG = "community"


def ensure_community_tag(tags: list[str]) -> list[str]:
    """Return ``tags`` with exactly one ``community`` tag, other tags untouched."""
    others = [tag for tag in tags if tag != COMMUNITY_TAG]
    return [*others, COMMUNITY_TAG]


class CommunityCatalog:
    """List and download blueprint definitions from a hosted repository."""

    def __init__(self, client: CatalogHttpClient, api_base: str = DEFAULT_API_BASE) -> None:
        self.client = client
        self.api_base = api_base.rstrip("/")

    @classmethod
    def from_settings(cls, settings: CommunitySettings) -> "CommunityCatalog":
        client = CatalogHttpClient(timeout=settings.timeout_seconds, token=settings.token)
        return cls(client, api_base=settings.api_base)

    def contents_url(self, coordinates: RepositoryCoordinates, path: str) -> str:
        """Return the content-listing URL for ``path`` inside the repository."""
        return (
            f"{self.api_base}/repos/{coordinates.owner}/{coordinates.repo}"
            f"/contents/{path.strip('/')}"
        )

    def list_candidates(self, repository: RepositoryCoordinates | str) -> CatalogListing:
        """Discover every valid blueprint definition in ``repository``.

        Entries are processed one after another. A failure on a single entry is
        logged and recorded in ``skipped``; a failure of the top-level listing
        yields an empty listing with ``error`` set.

        Args:
            repository: Coordinates or an ``owner/repo`` string.

        Returns:
            CatalogListing: Candidates, skipped entries, and any listing error.

        Raises:
            CatalogValidationError: If ``repository`` is not ``owner/repo``.
        """
        coordinates = (
            repository
            if isinstance(repository, RepositoryCoordinates)
            else RepositoryCoordinates.parse(repository)
        )
        listing = CatalogListing(repository=coordinates)

        try:
            entries = self._list_directory(coordinates, CATALOG_ROOT)
        except CatalogError as exc:
            LOGGER.error("Failed to fetch community blueprints from %s: %s", coordinates, exc)
            listing.error = str(exc)
            return listing

        LOGGER.info("Received %d catalog entries from %s", len(entries), coordinates)
        for entry in entries:
            try:
                if entry.is_flat_definition:
                    candidate = self._describe(entry)
                    reason = "not a valid blueprint definition"
                elif entry.type == "dir":
                    candidate = self._describe_bundle(coordinates, entry)
                    reason = "no valid blueprint.json in directory"
                else:
                    LOGGER.debug("Skipping catalog entry %s (%s)", entry.name, entry.type)
                    continue
            except (CatalogError, ValueError) as exc:
                LOGGER.warning("Failed to process catalog entry %s: %s", entry.name, exc)
                listing.skipped.append(SkippedEntry(entry.name, str(exc)))
                continue

            if candidate is None:
                LOGGER.info("Discarding catalog entry %s: %s", entry.name, reason)
                listing.skipped.append(SkippedEntry(entry.name, reason))
                continue
            listing.candidates.append(candidate)

        LOGGER.info("Found %d community blueprints in %s", len(listing.candidates), coordinates)
        return listing

    def download(self, candidate: CommunityBlueprint) -> Blueprint:
        """Fetch the full definition for ``candidate`` as a new local record.

        The record gets a fresh identifier and creation time, and carries the
        ``community`` tag exactly once.

        Raises:
            CatalogError: If the definition cannot be fetched.
            InvalidBlueprintError: If the fetched content is not a valid blueprint.
        """
        payload = self.client.fetch(candidate.download_url)
        parsed = parse_blueprint_document(payload)
        if parsed is None:
            raise InvalidBlueprintError("Invalid blueprint format")

        return parsed.model_copy(
            update={
                "id": generate_blueprint_id(),
                "created_at": datetime.now(timezone.utc),
                "tags": ensure_community_tag(parsed.tags),
            }
        )

    def import_candidate(
        self, candidate: CommunityBlueprint, repository: BlueprintRepository
    ) -> Blueprint:
        """Download ``candidate`` and save it to ``repository``."""
        blueprint = self.download(candidate)
        repository.save(blueprint)
        LOGGER.info("Imported community blueprint %s as %s", blueprint.name, blueprint.id)
        return blueprint

    def _list_directory(self, coordinates: RepositoryCoordinates, path: str) -> list[CatalogEntry]:
        payload = self.client.fetch(self.contents_url(coordinates, path))
        if not isinstance(payload, list):
            raise CatalogError(f"Unexpected listing response for {path}: expected a directory")

        entries = []
        for item in payload:
            try:
                entries.append(CatalogEntry.model_validate(item))
            except PydanticValidationError as exc:
                LOGGER.debug("Ignoring malformed listing item in %s: %s", path, exc)
        return entries

    def _describe(self, entry: CatalogEntry) -> Optional[CommunityBlueprint]:
        if not entry.download_url:
            return None
        parsed = parse_blueprint_document(self.client.fetch(entry.download_url))
        if parsed is None:
            return None
        return CommunityBlueprint(
            name=parsed.name,
            description=parsed.description,
            path=entry.path,
            download_url=entry.download_url,
            html_url=entry.html_url,
            size=entry.size,
            sha=entry.sha,
        )

    def _describe_bundle(
        self, coordinates: RepositoryCoordinates, folder: CatalogEntry
    ) -> Optional[CommunityBlueprint]:
        contents = self._list_directory(coordinates, folder.path)
        definition = next((item for item in contents if item.is_bundle_definition), None)
        if definition is None:
            LOGGER.debug("No blueprint.json found in %s", folder.path)
            return None

        candidate = self._describe(definition)
        if candidate is None:
            return None

        readme = next((item for item in contents if item.is_readme), None)
        if readme is not None and readme.download_url:
            try:
                content = self.client.fetch_text(readme.download_url)
            except CatalogError as exc:
                LOGGER.warning("Failed to fetch README for %s: %s", folder.name, exc)
            else:
                candidate = candidate.model_copy(
                    update={"readme_url": readme.html_url, "readme_content": content}
                )
        return candidate


__all__ = [
    "CATALOG_ROOT",
    "COMMUNITY_TAG",
    "CommunityCatalog",
    "DEFAULT_API_BASE",
    "ensure_community_tag",
]
