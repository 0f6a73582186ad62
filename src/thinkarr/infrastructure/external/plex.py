"""Plex Media Server client (library search, on deck, recently added)."""

from dataclasses import dataclass
from typing import Any

from thinkarr.infrastructure.external.base import MediaServiceClient, truncate


@dataclass
class PlexItem:
    """A library item as returned to the model."""

    title: str
    type: str | None
    key: str | None
    year: int | None = None
    summary: str | None = None
    rating: float | None = None


@dataclass
class AvailabilityResult:
    available: bool
    results: list[PlexItem]


class PlexClient(MediaServiceClient):
    """Plex API client authenticated with X-Plex-Token."""

    @property
    def service_name(self) -> str:
        return "Plex"

    def _auth_headers(self) -> dict[str, str]:
        return {"X-Plex-Token": self.credential}

    @staticmethod
    def _to_item(item: dict[str, Any], fallback_type: str | None = None) -> PlexItem:
        return PlexItem(
            title=item.get("title", ""),
            type=fallback_type or item.get("type"),
            key=item.get("key"),
            year=item.get("year"),
            summary=truncate(item.get("summary")),
            rating=item.get("rating"),
        )

    async def search_library(self, query: str) -> list[PlexItem]:
        data = await self.get_json("/hubs/search", params={"query": query, "limit": 10})
        container = (data or {}).get("MediaContainer") or {}
        results: list[PlexItem] = []
        for hub in container.get("Hub") or []:
            for item in hub.get("Metadata") or []:
                results.append(self._to_item(item, hub.get("type")))
        return results

    async def check_availability(self, title: str) -> AvailabilityResult:
        results = await self.search_library(title)
        return AvailabilityResult(available=bool(results), results=results[:5])

    async def _list_metadata(self, path: str) -> list[PlexItem]:
        data = await self.get_json(
            path,
            params={"X-Plex-Container-Start": 0, "X-Plex-Container-Size": 10},
        )
        container = (data or {}).get("MediaContainer") or {}
        return [self._to_item(item) for item in container.get("Metadata") or []]

    async def get_on_deck(self) -> list[PlexItem]:
        return await self._list_metadata("/library/onDeck")

    async def get_recently_added(self) -> list[PlexItem]:
        return await self._list_metadata("/library/recentlyAdded")
