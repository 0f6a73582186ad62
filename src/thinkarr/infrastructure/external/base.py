"""Base HTTP client for the media services the tools talk to."""

from abc import ABC, abstractmethod
from typing import Any

import httpx
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from thinkarr.shared.exceptions import ExternalServiceError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

SUMMARY_LIMIT = 200  # Characters kept from overviews/summaries


def truncate(text: Any, limit: int = SUMMARY_LIMIT) -> str | None:
    """Shorten free-text fields so tool results stay small in model context."""
    if not isinstance(text, str):
        return None
    return text[:limit]


class MediaServiceClient(ABC):
    """Shared plumbing for Plex / Sonarr / Radarr / Overseerr clients.

    Subclasses provide the auth header and API prefix. Non-2xx responses and
    transport failures surface as ExternalServiceError; the tool registry turns
    those into ``{"error": ...}`` results for the model.
    """

    api_prefix: str = ""

    def __init__(
        self,
        base_url: str,
        credential: str,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.credential = credential
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    @abstractmethod
    def service_name(self) -> str:
        """Human-readable service name used in errors and logs."""

    @abstractmethod
    def _auth_headers(self) -> dict[str, str]:
        """Headers that authenticate against the service."""

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self.base_url}{self.api_prefix}",
                timeout=self.timeout,
                headers={"Accept": "application/json", **self._auth_headers()},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json_body: Any = None,
    ) -> Any:
        client = self._get_client()
        try:
            response = await client.request(method, path, params=params, json=json_body)
        except httpx.TimeoutException as e:
            logger.warning("service_timeout", service=self.service_name, path=path)
            raise ExternalServiceError(f"{self.service_name} request timed out") from e
        except httpx.TransportError:
            # Let the retry policy see transport errors on GETs
            raise

        if response.is_error:
            logger.warning(
                "service_http_error",
                service=self.service_name,
                path=path,
                status_code=response.status_code,
            )
            raise ExternalServiceError(
                f"{self.service_name} API error: HTTP {response.status_code}",
                details={"status_code": response.status_code},
            )

        if not response.content:
            return None
        return response.json()

    @retry(
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=0.5, min=0.5, max=4),
        retry=retry_if_exception_type(httpx.TransportError),
        reraise=True,
    )
    async def _get_with_retry(self, path: str, params: dict[str, Any] | None) -> Any:
        return await self._request("GET", path, params=params)

    async def get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        """GET a JSON document. Transport errors are retried; HTTP errors are not."""
        try:
            return await self._get_with_retry(path, params)
        except httpx.TransportError as e:
            logger.warning("service_unreachable", service=self.service_name, path=path)
            raise ExternalServiceError(f"{self.service_name} unreachable: {e}") from e

    async def post_json(self, path: str, body: Any) -> Any:
        """POST a JSON body. Never retried: requests have side effects."""
        try:
            return await self._request("POST", path, json_body=body)
        except httpx.TransportError as e:
            logger.warning("service_unreachable", service=self.service_name, path=path)
            raise ExternalServiceError(f"{self.service_name} unreachable: {e}") from e


class ArrServiceClient(MediaServiceClient):
    """Sonarr/Radarr/Overseerr style APIs authenticated with X-Api-Key."""

    def _auth_headers(self) -> dict[str, str]:
        return {"X-Api-Key": self.credential}
