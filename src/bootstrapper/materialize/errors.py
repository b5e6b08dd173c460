"""Materialization errors."""


class MaterializeError(Exception):
    """Raised when a project directory cannot be created from a blueprint."""


class ProjectExistsError(MaterializeError):
    """Raised when the target project directory exists and overwrite was not confirmed."""


class InvalidProjectNameError(MaterializeError, ValueError):
    """Raised when a project name is empty or contains unsupported characters."""


class UnsafePathError(MaterializeError, ValueError):
    """Raised when a blueprint path would escape the project directory."""
