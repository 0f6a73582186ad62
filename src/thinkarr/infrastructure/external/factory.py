"""Service hub: hands out media service clients built from current config.

Clients hold an httpx.AsyncClient, so they are cached and reused. A client is
rebuilt when its URL or credential changes in the config store.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TypeVar

import httpx

from thinkarr.infrastructure.database.repositories.app_config import ConfigStore
from thinkarr.infrastructure.external.base import MediaServiceClient
from thinkarr.infrastructure.external.overseerr import OverseerrClient
from thinkarr.infrastructure.external.plex import PlexClient
from thinkarr.infrastructure.external.radarr import RadarrClient
from thinkarr.infrastructure.external.sonarr import SonarrClient
from thinkarr.shared.exceptions import ServiceNotConfiguredError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

_C = TypeVar("_C", bound=MediaServiceClient)


@dataclass(frozen=True)
class ServiceSpec:
    """Where a service's URL and credential live in the config store."""

    key: str
    display_name: str
    url_key: str
    credential_key: str
    client_class: type[MediaServiceClient]


PLEX = ServiceSpec("plex", "Plex", "plex.url", "plex.token", PlexClient)
SONARR = ServiceSpec("sonarr", "Sonarr", "sonarr.url", "sonarr.apiKey", SonarrClient)
RADARR = ServiceSpec("radarr", "Radarr", "radarr.url", "radarr.apiKey", RadarrClient)
OVERSEERR = ServiceSpec(
    "overseerr", "Overseerr", "overseerr.url", "overseerr.apiKey", OverseerrClient
)

SERVICES: tuple[ServiceSpec, ...] = (PLEX, SONARR, RADARR, OVERSEERR)


async def configured_services(config_store: ConfigStore) -> list[str]:
    """Keys of the services whose URL is configured, in declaration order."""
    urls = await config_store.get_many(spec.url_key for spec in SERVICES)
    return [spec.key for spec in SERVICES if urls.get(spec.url_key)]


class ServiceHub:
    """Per-call access to configured media service clients."""

    def __init__(
        self,
        config_store: ConfigStore,
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._config_store = config_store
        self._timeout = timeout
        self._transport = transport
        self._clients: dict[str, tuple[tuple[str, str], MediaServiceClient]] = {}

    async def _client_for(self, spec: ServiceSpec, client_class: type[_C]) -> _C:
        values = await self._config_store.get_many([spec.url_key, spec.credential_key])
        url = values.get(spec.url_key)
        credential = values.get(spec.credential_key)
        if not url or not credential:
            raise ServiceNotConfiguredError(spec.display_name)

        fingerprint = (url, credential)
        cached = self._clients.get(spec.key)
        if cached is not None:
            cached_fingerprint, client = cached
            if cached_fingerprint == fingerprint:
                return client  # type: ignore[return-value]
            logger.info("service_client_rebuilt", service=spec.key)
            await client.close()

        new_client = client_class(
            url,
            credential,
            timeout=self._timeout,
            transport=self._transport,
        )
        self._clients[spec.key] = (fingerprint, new_client)
        return new_client

    async def plex(self) -> PlexClient:
        return await self._client_for(PLEX, PlexClient)

    async def sonarr(self) -> SonarrClient:
        return await self._client_for(SONARR, SonarrClient)

    async def radarr(self) -> RadarrClient:
        return await self._client_for(RADARR, RadarrClient)

    async def overseerr(self) -> OverseerrClient:
        return await self._client_for(OVERSEERR, OverseerrClient)

    async def close(self) -> None:
        for _, client in self._clients.values():
            await client.close()
        self._clients.clear()
