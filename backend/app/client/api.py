"""Thin HTTP client for the portal REST API."""

from __future__ import annotations

import json
import logging
from typing import Any, Optional

import httpx

from ..config import read_portal_api_base

LOGGER = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0


class PortalApiError(RuntimeError):
    """Raised when the API answers with a non-2xx status or cannot be reached."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class PortalApiClient:
    """Issue GET requests against ``api_base`` and decode the JSON envelope."""

    def __init__(
        self,
        api_base: Optional[str] = None,
        *,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        self.api_base = (api_base or read_portal_api_base()).rstrip("/")
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def url_for(self, endpoint: str) -> str:
        if not endpoint.startswith("/"):
            endpoint = f"/{endpoint}"
        return f"{self.api_base}{endpoint}"

    @property
    def server_root(self) -> str:
        """Base URL without the ``/api`` prefix, where ``/health`` lives."""

        if self.api_base.endswith("/api"):
            return self.api_base[: -len("/api")]
        return self.api_base

    def fetch_api(self, endpoint: str) -> Any:
        return self._get_json(self.url_for(endpoint))

    def fetch_health(self) -> Any:
        return self._get_json(f"{self.server_root}/health")

    def _get_json(self, url: str) -> Any:
        try:
            response = self._client.get(url)
        except httpx.HTTPError as exc:
            raise PortalApiError(f"Request to {url} failed: {exc}") from exc

        if not response.is_success:
            raise PortalApiError(
                f"HTTP {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )

        try:
            return response.json()
        except json.JSONDecodeError as exc:
            raise PortalApiError(
                f"Invalid JSON from {url}", status_code=response.status_code
            ) from exc

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
