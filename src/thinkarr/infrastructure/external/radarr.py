"""Radarr v3 API client (movies, queue)."""

from dataclasses import dataclass

from thinkarr.infrastructure.external.base import ArrServiceClient, truncate


@dataclass
class RadarrMovie:
    title: str
    id: int | None = None
    year: int | None = None
    overview: str | None = None
    status: str | None = None
    monitored: bool | None = None
    has_file: bool | None = None
    tmdb_id: int | None = None


@dataclass
class RadarrQueueItem:
    movie_title: str
    status: str | None
    time_left: str
    size: float | None
    size_left: float | None


class RadarrClient(ArrServiceClient):
    api_prefix = "/api/v3"

    @property
    def service_name(self) -> str:
        return "Radarr"

    async def search_movie(self, term: str) -> list[RadarrMovie]:
        data = await self.get_json("/movie/lookup", params={"term": term})
        return [
            RadarrMovie(
                id=m.get("id"),
                title=m.get("title", ""),
                year=m.get("year"),
                overview=truncate(m.get("overview")),
                status=m.get("status"),
                monitored=m.get("monitored"),
                has_file=m.get("hasFile"),
                tmdb_id=m.get("tmdbId"),
            )
            for m in (data or [])[:10]
        ]

    async def list_movies(self) -> list[RadarrMovie]:
        data = await self.get_json("/movie")
        return [
            RadarrMovie(
                id=m.get("id"),
                title=m.get("title", ""),
                year=m.get("year"),
                status=m.get("status"),
                monitored=m.get("monitored"),
                has_file=m.get("hasFile"),
            )
            for m in data or []
        ]

    async def get_queue(self) -> list[RadarrQueueItem]:
        data = await self.get_json("/queue", params={"pageSize": 20, "includeMovie": "true"})
        return [
            RadarrQueueItem(
                movie_title=(q.get("movie") or {}).get("title") or "Unknown",
                status=q.get("status"),
                time_left=q.get("timeleft") or "",
                size=q.get("size"),
                size_left=q.get("sizeleft"),
            )
            for q in (data or {}).get("records") or []
        ]
