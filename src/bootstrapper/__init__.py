"""Bootstrapper: capture project folders as blueprints and create projects from them.

Subpackages:
    capture: scan a source tree into a blueprint.
    repository: persist blueprints as JSON records.
    materialize: recreate a project from a blueprint.
    community: browse and download shared blueprints.
"""

from importlib.metadata import PackageNotFoundError, version

__all__ = ["__version__"]

try:
    __version__ = version("bootstrapper")
except PackageNotFoundError:  # running from a source checkout
    __version__ = "0.0.0"
