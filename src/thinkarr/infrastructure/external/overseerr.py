"""Overseerr API client (search, requests)."""

from dataclasses import dataclass
from typing import Any

from thinkarr.infrastructure.external.base import ArrServiceClient, truncate
from thinkarr.shared.exceptions import ExternalServiceError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

MEDIA_STATUS_LABELS = {
    1: "Unknown",
    2: "Pending",
    3: "Processing",
    4: "Partially Available",
    5: "Available",
}
REQUEST_STATUS_LABELS = {
    1: "Pending Approval",
    2: "Approved",
    3: "Declined",
}


def media_status_label(media_info: dict[str, Any] | None) -> str:
    if not media_info:
        return "Unknown"
    status: Any = media_info.get("status")
    return MEDIA_STATUS_LABELS.get(status, "Not Requested")


@dataclass
class OverseerrSearchResult:
    id: int | None
    media_type: str | None
    title: str
    overview: str | None
    release_date: str | None
    media_status: str


@dataclass
class OverseerrRequest:
    id: int | None
    type: str | None
    title: str
    status: str
    requested_by: str
    created_at: str | None


@dataclass
class RequestOutcome:
    success: bool
    message: str


class OverseerrClient(ArrServiceClient):
    api_prefix = "/api/v1"

    @property
    def service_name(self) -> str:
        return "Overseerr"

    async def search(self, query: str) -> list[OverseerrSearchResult]:
        data = await self.get_json(
            "/search",
            params={"query": query, "page": 1, "language": "en"},
        )
        return [
            OverseerrSearchResult(
                id=r.get("id"),
                media_type=r.get("mediaType"),
                title=r.get("title") or r.get("name") or "",
                overview=truncate(r.get("overview")),
                release_date=r.get("releaseDate") or r.get("firstAirDate"),
                media_status=media_status_label(r.get("mediaInfo")),
            )
            for r in ((data or {}).get("results") or [])[:10]
        ]

    async def list_requests(self) -> list[OverseerrRequest]:
        data = await self.get_json("/request", params={"take": 20, "skip": 0, "sort": "added"})
        requests: list[OverseerrRequest] = []
        for r in (data or {}).get("results") or []:
            media: dict[str, Any] = r.get("media") or {}
            requests.append(
                OverseerrRequest(
                    id=r.get("id"),
                    type=r.get("type"),
                    title=media.get("title") or media.get("name") or "Unknown",
                    status=REQUEST_STATUS_LABELS.get(r.get("status", 0), "Unknown"),
                    requested_by=(r.get("requestedBy") or {}).get("displayName") or "Unknown",
                    created_at=r.get("createdAt"),
                )
            )
        return requests

    async def _submit(self, body: dict[str, Any], success_message: str) -> RequestOutcome:
        # A rejected request is a normal answer for the user, not a tool failure
        try:
            await self.post_json("/request", body)
        except ExternalServiceError as e:
            logger.info("overseerr_request_rejected", media_type=body["mediaType"], error=e.message)
            return RequestOutcome(success=False, message=e.message)
        return RequestOutcome(success=True, message=success_message)

    async def request_movie(self, tmdb_id: int) -> RequestOutcome:
        return await self._submit(
            {"mediaType": "movie", "mediaId": tmdb_id},
            "Movie request submitted successfully",
        )

    async def request_tv(self, tvdb_id: int, seasons: list[int] | None = None) -> RequestOutcome:
        body: dict[str, Any] = {"mediaType": "tv", "mediaId": tvdb_id}
        if seasons:
            body["seasons"] = seasons
        return await self._submit(body, "TV show request submitted successfully")
