"""Blueprint materialization: recreate project trees with placeholder substitution."""

from .errors import (
    InvalidProjectNameError,
    MaterializeError,
    ProjectExistsError,
    UnsafePathError,
)
from .executor import ProjectMaterializer, safe_relative_path, validate_project_name
from .placeholders import (
    TOKEN_NAMES,
    build_replacements,
    replace_placeholders,
    to_camel_case,
    to_pascal_case,
)

__all__ = [
    "InvalidProjectNameError",
    "MaterializeError",
    "ProjectExistsError",
    "ProjectMaterializer",
    "TOKEN_NAMES",
    "UnsafePathError",
    "build_replacements",
    "replace_placeholders",
    "safe_relative_path",
    "to_camel_case",
    "to_pascal_case",
    "validate_project_name",
]
