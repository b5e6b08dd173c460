"""HTTP access to the hosted content API."""

from __future__ import annotations

import logging
from typing import Any, Optional

import requests

from .errors import CatalogHTTPError, CatalogTransportError

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 10.0
USER_AGENT = "Bootstrapper-Blueprints-CLI"


class CatalogHttpClient:
    """Issue GET requests against the content API with a fixed per-request timeout.

    Usage:
        client = CatalogHttpClient(timeout=5)
        listing = client.fetch("https://api.github.com/repos/o/r/contents/blueprints")
    """

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        token: Optional[str] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.timeout = timeout
        self.session = session or requests.Session()
        self.headers = {
            "User-Agent": USER_AGENT,
            "Accept": "application/vnd.github.v3+json",
        }
        if token:
            self.headers["Authorization"] = f"Bearer {token}"

    def fetch(self, url: str) -> Any:
        """Return the decoded JSON body of ``url``, or its raw text if it is not JSON.

        Raises:
            CatalogHTTPError: If the response status is not a success.
            CatalogTransportError: If the request times out or cannot be sent.
        """
        response = self._get(url)
        try:
            return response.json()
        except ValueError:
            LOGGER.debug("Returning raw text response for %s", url)
            return response.text

    def fetch_text(self, url: str) -> str:
        """Return the body of ``url`` as text."""
        return self._get(url).text

    def close(self) -> None:
        self.session.close()

    def _get(self, url: str) -> requests.Response:
        LOGGER.debug("GET %s", url)
        try:
            response = self.session.get(url, headers=self.headers, timeout=self.timeout)
        except requests.Timeout as exc:
            raise CatalogTransportError(f"Request timeout after {self.timeout}s: {url}") from exc
        except requests.RequestException as exc:
            raise CatalogTransportError(f"Request to {url} failed: {exc}") from exc

        if not response.ok:
            LOGGER.debug("GET %s returned %s", url, response.status_code)
            raise CatalogHTTPError(response.status_code, response.reason or "", url)
        return response


__all__ = ["CatalogHttpClient", "DEFAULT_TIMEOUT_SECONDS", "USER_AGENT"]
