"""Blueprint repository errors."""


class RepositoryError(Exception):
    """Base exception for blueprint repository operations."""


class StorageError(RepositoryError):
    """Raised when the blueprint store cannot be created, written, or cleaned up."""


class ValidationError(RepositoryError, ValueError):
    """Raised when a blueprint record or identifier is rejected before persistence."""


class InvalidBlueprintError(ValidationError):
    """Raised when a blueprint document is missing required fields."""


class AmbiguousBlueprintError(RepositoryError):
    """Raised when a lookup matches more than one stored blueprint."""
