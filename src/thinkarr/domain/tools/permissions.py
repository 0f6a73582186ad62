"""Permission gate for the tool gateway.

Applied to external integrations calling tools over HTTP. The chat loop
itself runs tools without this gate.
"""

from enum import Enum
from typing import Any


class PermissionLevel(str, Enum):
    ELEVATED = "admin"
    SCOPED = "user"


# Tools any authenticated caller may run
READ_ONLY_TOOLS = frozenset(
    {
        "plex_search_library",
        "plex_get_watch_history",
        "plex_get_on_deck",
        "plex_check_availability",
        "sonarr_search_series",
        "sonarr_get_calendar",
        "sonarr_get_queue",
        "sonarr_list_series",
        "radarr_search_movie",
        "radarr_list_movies",
        "radarr_get_queue",
        "overseerr_search",
        "overseerr_list_requests",
    }
)

# Mutating tools a scoped user may still run on their own behalf
SELF_SERVICE_TOOLS = frozenset(
    {
        "overseerr_request_movie",
        "overseerr_request_tv",
        "sonarr_monitor_series",
        "radarr_monitor_movie",
    }
)

SCOPED_ALLOWED_TOOLS = READ_ONLY_TOOLS | SELF_SERVICE_TOOLS


def can_execute(tool_name: str, level: PermissionLevel) -> bool:
    if level is PermissionLevel.ELEVATED:
        return True
    return tool_name in SCOPED_ALLOWED_TOOLS


def filter_schemas(
    schemas: list[dict[str, Any]],
    level: PermissionLevel,
) -> list[dict[str, Any]]:
    """Keep only the tool schemas the caller may execute."""
    if level is PermissionLevel.ELEVATED:
        return schemas
    return [s for s in schemas if can_execute(s["function"]["name"], level)]
