"""Plex library tools."""

from thinkarr.domain.tools.models import NoInput, PlexAvailabilityInput, PlexSearchInput
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.infrastructure.external.factory import ServiceHub
from thinkarr.infrastructure.external.plex import AvailabilityResult, PlexItem


def register_plex_tools(registry: ToolRegistry, services: ServiceHub) -> None:
    async def search_library(params: PlexSearchInput) -> list[PlexItem]:
        plex = await services.plex()
        return await plex.search_library(params.query)

    async def check_availability(params: PlexAvailabilityInput) -> AvailabilityResult:
        plex = await services.plex()
        return await plex.check_availability(params.title)

    async def get_on_deck(params: NoInput) -> list[PlexItem]:
        plex = await services.plex()
        return await plex.get_on_deck()

    async def get_recently_added(params: NoInput) -> list[PlexItem]:
        plex = await services.plex()
        return await plex.get_recently_added()

    registry.register(
        "plex_search_library",
        "Search the Plex media library for movies, TV shows, or other content "
        "by title or keyword.",
        PlexSearchInput,
        search_library,
    )
    registry.register(
        "plex_check_availability",
        "Check if a specific movie or TV show is available in the Plex library.",
        PlexAvailabilityInput,
        check_availability,
    )
    registry.register(
        "plex_get_on_deck",
        "Get the list of shows/movies currently on deck (in progress) in Plex.",
        NoInput,
        get_on_deck,
    )
    registry.register(
        "plex_get_recently_added",
        "Get recently added content in the Plex library.",
        NoInput,
        get_recently_added,
    )
