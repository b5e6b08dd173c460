"""Community catalog errors."""

from __future__ import annotations


class CatalogError(Exception):
    """Base exception for community catalog operations."""


class CatalogValidationError(CatalogError, ValueError):
    """Raised when catalog input, such as repository coordinates, is malformed."""


class CatalogTransportError(CatalogError):
    """Raised when a request fails before a response arrives (timeouts, DNS, resets)."""


class CatalogHTTPError(CatalogError):
    """Raised when the content API answers with a non-success status code."""

    def __init__(self, status_code: int, reason: str, url: str) -> None:
        self.status_code = status_code
        self.reason = reason
        self.url = url
        super().__init__(f"Catalog request failed: {status_code} {reason} ({url})")
