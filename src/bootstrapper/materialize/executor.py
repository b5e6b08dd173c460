"""Create project directories from blueprint records."""

from __future__ import annotations

import logging
import re
import shutil
from datetime import date
from pathlib import Path, PurePosixPath, PureWindowsPath

from bootstrapper.repository import Blueprint

from .errors import (
    InvalidProjectNameError,
    MaterializeError,
    ProjectExistsError,
    UnsafePathError,
)
from .placeholders import replace_placeholders

LOGGER = logging.getLogger(__name__)

_PROJECT_NAME = re.compile(r"^[A-Za-z0-9_-]+$")


def validate_project_name(project_name: str) -> str:
    """Return ``project_name`` when it is usable as a directory name.

    Raises:
        InvalidProjectNameError: If the name is empty or has characters other than
            letters, digits, hyphens, and underscores.
    """
    if not project_name or not project_name.strip():
        raise InvalidProjectNameError("Project name is required.")
    if not _PROJECT_NAME.match(project_name):
        raise InvalidProjectNameError(
            "Project name can only contain letters, numbers, hyphens, and underscores."
        )
    return project_name


def safe_relative_path(value: str) -> PurePosixPath:
    """Return ``value`` as a relative path that stays inside its parent.

    Raises:
        UnsafePathError: If the path is empty, absolute, or walks upward.
    """
    normalized = value.replace("\\", "/")
    relative = PurePosixPath(normalized)
    if (
        not normalized.strip("/")
        or relative.is_absolute()
        or PureWindowsPath(value).drive
        or ".." in relative.parts
    ):
        raise UnsafePathError(f"Blueprint path escapes the project directory: {value!r}")
    return relative


class ProjectMaterializer:
    """Recreate a blueprint's folders and files under a new project directory."""

    def __init__(self, today: date | None = None) -> None:
        self._today = today

    def materialize(
        self,
        blueprint: Blueprint,
        destination_root: Path,
        project_name: str,
        *,
        overwrite: bool = False,
    ) -> Path:
        """Create ``destination_root/project_name`` from ``blueprint``.

        Args:
            blueprint: Record to reconstruct.
            destination_root: Directory that will contain the project.
            project_name: New project name; also the placeholder value.
            overwrite: Whether an existing project directory may be replaced.
                The existing tree is removed entirely before writing.

        Returns:
            Path: The project directory.

        Raises:
            InvalidProjectNameError: If ``project_name`` is unusable.
            UnsafePathError: If any blueprint path would escape the project.
            ProjectExistsError: If the project exists and ``overwrite`` is False.
            MaterializeError: If directories or files cannot be written.
        """
        validate_project_name(project_name)
        folders = [safe_relative_path(folder) for folder in blueprint.folders]
        files = [(safe_relative_path(path), content) for path, content in blueprint.files.items()]

        project_path = destination_root.expanduser().resolve() / project_name
        if project_path.exists() or project_path.is_symlink():
            if not overwrite:
                raise ProjectExistsError(f"Directory already exists: {project_path}")
            self._remove(project_path)

        today = self._today or date.today()
        try:
            project_path.mkdir(parents=True, exist_ok=True)
            for folder in folders:
                (project_path / folder).mkdir(parents=True, exist_ok=True)
            for relative, content in files:
                target = project_path / relative
                target.parent.mkdir(parents=True, exist_ok=True)
                rendered = replace_placeholders(content, project_name, today)
                with target.open("w", encoding="utf-8", newline="") as handle:
                    handle.write(rendered)
        except OSError as exc:
            raise MaterializeError(f"Failed to create project at {project_path}: {exc}") from exc

        LOGGER.info(
            "Materialized blueprint %s into %s (%d folders, %d files)",
            blueprint.name,
            project_path,
            len(folders),
            len(files),
        )
        return project_path

    def _remove(self, project_path: Path) -> None:
        LOGGER.info("Removing existing project directory %s", project_path)
        try:
            if project_path.is_dir() and not project_path.is_symlink():
                shutil.rmtree(project_path)
            else:
                project_path.unlink()
        except OSError as exc:
            raise MaterializeError(f"Failed to remove existing {project_path}: {exc}") from exc


__all__ = ["ProjectMaterializer", "safe_relative_path", "validate_project_name"]
