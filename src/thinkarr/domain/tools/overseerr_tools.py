"""Overseerr search and request tools."""

from thinkarr.domain.tools.models import (
    NoInput,
    OverseerrSearchInput,
    RequestMovieInput,
    RequestTvInput,
)
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.infrastructure.external.factory import ServiceHub
from thinkarr.infrastructure.external.overseerr import (
    OverseerrRequest,
    OverseerrSearchResult,
    RequestOutcome,
)


def register_overseerr_tools(registry: ToolRegistry, services: ServiceHub) -> None:
    async def search(params: OverseerrSearchInput) -> list[OverseerrSearchResult]:
        overseerr = await services.overseerr()
        return await overseerr.search(params.query)

    async def request_movie(params: RequestMovieInput) -> RequestOutcome:
        overseerr = await services.overseerr()
        return await overseerr.request_movie(params.tmdbId)

    async def request_tv(params: RequestTvInput) -> RequestOutcome:
        overseerr = await services.overseerr()
        return await overseerr.request_tv(params.tvdbId, params.seasons)

    async def list_requests(params: NoInput) -> list[OverseerrRequest]:
        overseerr = await services.overseerr()
        return await overseerr.list_requests()

    registry.register(
        "overseerr_search",
        "Search for movies or TV shows on Overseerr. Shows availability and request status.",
        OverseerrSearchInput,
        search,
    )
    registry.register(
        "overseerr_request_movie",
        "Request a movie to be added via Overseerr. Use overseerr_search first to get the tmdbId.",
        RequestMovieInput,
        request_movie,
    )
    registry.register(
        "overseerr_request_tv",
        "Request a TV show to be added via Overseerr. "
        "Use overseerr_search first to get the tvdbId.",
        RequestTvInput,
        request_tv,
    )
    registry.register(
        "overseerr_list_requests",
        "List recent media requests from Overseerr.",
        NoInput,
        list_requests,
    )
