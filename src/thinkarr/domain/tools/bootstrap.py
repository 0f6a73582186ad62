"""One-time tool registration based on which services are configured."""

from collections.abc import Callable

from thinkarr.domain.tools.overseerr_tools import register_overseerr_tools
from thinkarr.domain.tools.plex_tools import register_plex_tools
from thinkarr.domain.tools.radarr_tools import register_radarr_tools
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.domain.tools.sonarr_tools import register_sonarr_tools
from thinkarr.infrastructure.database.repositories.app_config import ConfigStore
from thinkarr.infrastructure.external.factory import ServiceHub, configured_services
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

# Strategy dict: service key -> tool group registration
TOOL_GROUPS: dict[str, Callable[[ToolRegistry, ServiceHub], None]] = {
    "plex": register_plex_tools,
    "sonarr": register_sonarr_tools,
    "radarr": register_radarr_tools,
    "overseerr": register_overseerr_tools,
}


async def initialize_tools(
    registry: ToolRegistry,
    config_store: ConfigStore,
    services: ServiceHub,
) -> None:
    """Register tool groups for configured services, once per registry.

    A service configured after the first call only gets its tools after a
    restart.
    """
    if registry.populated:
        return

    configured = await configured_services(config_store)

    # Another request may have finished bootstrapping while we awaited
    if registry.populated:
        return

    for service in configured:
        TOOL_GROUPS[service](registry, services)
    registry.mark_populated()

    logger.info("tools_initialized", services=configured, tool_count=len(registry.names()))
