"""FastAPI dependencies for API routes.

Shared services are built once in the app lifespan and live on
``app.state``; these dependencies hand them to route handlers.
"""

from typing import Annotated

from fastapi import Depends, Request

from thinkarr.api.middleware.auth import (
    CurrentUser,
    RequireAdmin,
    get_auth_provider,
    get_current_user,
)
from thinkarr.domain.chat.orchestrator import ChatOrchestrator
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.infrastructure.auth.provider import AuthProvider
from thinkarr.infrastructure.database.connection import SessionDep, get_session
from thinkarr.infrastructure.database.repositories.app_config import ConfigStore
from thinkarr.infrastructure.external.factory import ServiceHub


def get_orchestrator(request: Request) -> ChatOrchestrator:
    orchestrator: ChatOrchestrator = request.app.state.orchestrator
    return orchestrator


def get_tool_registry(request: Request) -> ToolRegistry:
    registry: ToolRegistry = request.app.state.tool_registry
    return registry


def get_config_store(request: Request) -> ConfigStore:
    config_store: ConfigStore = request.app.state.config_store
    return config_store


def get_service_hub(request: Request) -> ServiceHub:
    services: ServiceHub = request.app.state.service_hub
    return services


OrchestratorDep = Annotated[ChatOrchestrator, Depends(get_orchestrator)]
ToolRegistryDep = Annotated[ToolRegistry, Depends(get_tool_registry)]
ConfigStoreDep = Annotated[ConfigStore, Depends(get_config_store)]
ServiceHubDep = Annotated[ServiceHub, Depends(get_service_hub)]
AuthProviderDep = Annotated[AuthProvider, Depends(get_auth_provider)]

__all__ = [
    "AuthProviderDep",
    "ConfigStoreDep",
    "CurrentUser",
    "OrchestratorDep",
    "RequireAdmin",
    "ServiceHubDep",
    "SessionDep",
    "ToolRegistryDep",
    "get_current_user",
    "get_session",
]
