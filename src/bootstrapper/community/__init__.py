"""Community blueprint catalog client."""

from .catalog import (
    CATALOG_ROOT,
    COMMUNITY_TAG,
    DEFAULT_API_BASE,
    CommunityCatalog,
    ensure_community_tag,
)
from .client import CatalogHttpClient
from .errors import (
    CatalogError,
    CatalogHTTPError,
    CatalogTransportError,
    CatalogValidationError,
)
from .models import (
    CatalogEntry,
    CatalogListing,
    CommunityBlueprint,
    RepositoryCoordinates,
    SkippedEntry,
)

__all__ = [
    "CATALOG_ROOT",
    "COMMUNITY_TAG",
    "DEFAULT_API_BASE",
    "CatalogEntry",
    "CatalogError",
    "CatalogHTTPError",
    "CatalogHttpClient",
    "CatalogListing",
    "CatalogTransportError",
    "CatalogValidationError",
    "CommunityBlueprint",
    "CommunityCatalog",
    "RepositoryCoordinates",
    "SkippedEntry",
    "ensure_community_tag",
]
