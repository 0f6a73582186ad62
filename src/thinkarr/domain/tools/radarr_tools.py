"""Radarr movie tools."""

from thinkarr.domain.tools.models import MovieSearchInput, NoInput
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.infrastructure.external.factory import ServiceHub
from thinkarr.infrastructure.external.radarr import RadarrMovie, RadarrQueueItem


def register_radarr_tools(registry: ToolRegistry, services: ServiceHub) -> None:
    async def search_movie(params: MovieSearchInput) -> list[RadarrMovie]:
        radarr = await services.radarr()
        return await radarr.search_movie(params.term)

    async def list_movies(params: NoInput) -> list[RadarrMovie]:
        radarr = await services.radarr()
        return await radarr.list_movies()

    async def get_queue(params: NoInput) -> list[RadarrQueueItem]:
        radarr = await services.radarr()
        return await radarr.get_queue()

    registry.register(
        "radarr_search_movie",
        "Search for movies by title. Returns results from Radarr's lookup.",
        MovieSearchInput,
        search_movie,
    )
    registry.register(
        "radarr_list_movies",
        "List all movies currently managed by Radarr.",
        NoInput,
        list_movies,
    )
    registry.register(
        "radarr_get_queue",
        "Get the current Radarr download queue showing movies being downloaded.",
        NoInput,
        get_queue,
    )
