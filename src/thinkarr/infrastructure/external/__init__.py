"""Media service clients used by the chat tools."""

from thinkarr.infrastructure.external.base import ArrServiceClient, MediaServiceClient
from thinkarr.infrastructure.external.factory import (
    SERVICES,
    ServiceHub,
    ServiceSpec,
    configured_services,
)
from thinkarr.infrastructure.external.overseerr import OverseerrClient
from thinkarr.infrastructure.external.plex import PlexClient
from thinkarr.infrastructure.external.radarr import RadarrClient
from thinkarr.infrastructure.external.sonarr import SonarrClient

__all__ = [
    # Base classes
    "MediaServiceClient",
    "ArrServiceClient",
    # Clients
    "PlexClient",
    "SonarrClient",
    "RadarrClient",
    "OverseerrClient",
    # Hub
    "SERVICES",
    "ServiceHub",
    "ServiceSpec",
    "configured_services",
]
