"""Sonarr TV tools."""

from thinkarr.domain.tools.models import CalendarInput, NoInput, SeriesSearchInput
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.infrastructure.external.factory import ServiceHub
from thinkarr.infrastructure.external.sonarr import (
    SonarrCalendarEntry,
    SonarrQueueItem,
    SonarrSeries,
)


def register_sonarr_tools(registry: ToolRegistry, services: ServiceHub) -> None:
    async def search_series(params: SeriesSearchInput) -> list[SonarrSeries]:
        sonarr = await services.sonarr()
        return await sonarr.search_series(params.term)

    async def list_series(params: NoInput) -> list[SonarrSeries]:
        sonarr = await services.sonarr()
        return await sonarr.list_series()

    async def get_calendar(params: CalendarInput) -> list[SonarrCalendarEntry]:
        sonarr = await services.sonarr()
        return await sonarr.get_calendar(params.days)

    async def get_queue(params: NoInput) -> list[SonarrQueueItem]:
        sonarr = await services.sonarr()
        return await sonarr.get_queue()

    registry.register(
        "sonarr_search_series",
        "Search for TV series by title. Returns results from Sonarr's lookup "
        "(includes both monitored and unmonitored series).",
        SeriesSearchInput,
        search_series,
    )
    registry.register(
        "sonarr_list_series",
        "List all TV series currently managed by Sonarr.",
        NoInput,
        list_series,
    )
    registry.register(
        "sonarr_get_calendar",
        "Get upcoming TV episode air dates from Sonarr.",
        CalendarInput,
        get_calendar,
    )
    registry.register(
        "sonarr_get_queue",
        "Get the current Sonarr download queue showing episodes being downloaded.",
        NoInput,
        get_queue,
    )
