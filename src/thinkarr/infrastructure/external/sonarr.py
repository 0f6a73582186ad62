"""Sonarr v3 API client (TV series, calendar, queue)."""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from thinkarr.infrastructure.external.base import ArrServiceClient, truncate


@dataclass
class SonarrSeries:
    title: str
    id: int | None = None
    year: int | None = None
    overview: str | None = None
    status: str | None = None
    season_count: int | None = None
    monitored: bool | None = None
    tvdb_id: int | None = None


@dataclass
class SonarrCalendarEntry:
    series_title: str
    episode_title: str | None
    season_number: int | None
    episode_number: int | None
    air_date_utc: str | None
    has_file: bool | None


@dataclass
class SonarrQueueItem:
    series_title: str
    episode_title: str
    status: str | None
    time_left: str
    size: float | None
    size_left: float | None


class SonarrClient(ArrServiceClient):
    api_prefix = "/api/v3"

    @property
    def service_name(self) -> str:
        return "Sonarr"

    async def search_series(self, term: str) -> list[SonarrSeries]:
        data = await self.get_json("/series/lookup", params={"term": term})
        return [
            SonarrSeries(
                id=s.get("id"),
                title=s.get("title", ""),
                year=s.get("year"),
                overview=truncate(s.get("overview")),
                status=s.get("status"),
                season_count=s.get("seasonCount"),
                monitored=s.get("monitored"),
                tvdb_id=s.get("tvdbId"),
            )
            for s in (data or [])[:10]
        ]

    async def list_series(self) -> list[SonarrSeries]:
        data = await self.get_json("/series")
        return [
            SonarrSeries(
                id=s.get("id"),
                title=s.get("title", ""),
                year=s.get("year"),
                status=s.get("status"),
                season_count=s.get("seasonCount"),
                monitored=s.get("monitored"),
            )
            for s in data or []
        ]

    async def get_calendar(self, days: int = 7) -> list[SonarrCalendarEntry]:
        today = datetime.now(UTC).date()
        end = today + timedelta(days=days)
        data = await self.get_json(
            "/calendar",
            params={"start": today.isoformat(), "end": end.isoformat(), "includeSeries": "true"},
        )
        entries: list[SonarrCalendarEntry] = []
        for e in data or []:
            series: dict[str, Any] = e.get("series") or {}
            entries.append(
                SonarrCalendarEntry(
                    series_title=series.get("title") or "Unknown",
                    episode_title=e.get("title"),
                    season_number=e.get("seasonNumber"),
                    episode_number=e.get("episodeNumber"),
                    air_date_utc=e.get("airDateUtc"),
                    has_file=e.get("hasFile"),
                )
            )
        return entries

    async def get_queue(self) -> list[SonarrQueueItem]:
        data = await self.get_json(
            "/queue",
            params={"pageSize": 20, "includeSeries": "true", "includeEpisode": "true"},
        )
        items: list[SonarrQueueItem] = []
        for q in (data or {}).get("records") or []:
            items.append(
                SonarrQueueItem(
                    series_title=(q.get("series") or {}).get("title") or "Unknown",
                    episode_title=(q.get("episode") or {}).get("title") or "Unknown",
                    status=q.get("status"),
                    time_left=q.get("timeleft") or "",
                    size=q.get("size"),
                    size_left=q.get("sizeleft"),
                )
            )
        return items
