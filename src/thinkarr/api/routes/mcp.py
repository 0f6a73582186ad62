"""Tool gateway for external integrations.

Lets other agents list and call the same tools the chat model uses.
Authenticated with the shared ``mcp.bearerToken``; an ``X-User-Id`` header
scopes the call to that user's permission level, without it the caller is
treated as admin.

GET  /api/mcp   list tools (OpenAI function format)
POST /api/mcp   {"method": "list"} or {"method": "execute", "tool": ..., "arguments": ...}
"""

import hmac
import json
from dataclasses import dataclass
from typing import Annotated, Any

from fastapi import APIRouter, Depends, Header, HTTPException
from fastapi.security import HTTPAuthorizationCredentials
from pydantic import BaseModel

from thinkarr.api.deps import AuthProviderDep, ConfigStoreDep, ServiceHubDep, ToolRegistryDep
from thinkarr.api.middleware.auth import security
from thinkarr.domain.tools.bootstrap import initialize_tools
from thinkarr.domain.tools.permissions import PermissionLevel, can_execute, filter_schemas
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/mcp", tags=["Tool Gateway"])

LIST_METHODS = {"list", "tools/list"}
EXECUTE_METHODS = {"execute", "tools/call"}


@dataclass(frozen=True)
class GatewayCaller:
    level: PermissionLevel
    user_id: int | None = None


class GatewayRequest(BaseModel):
    method: str | None = None
    tool: str | None = None
    arguments: dict[str, Any] | str | None = None


async def get_gateway_caller(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    config_store: ConfigStoreDep,
    auth_provider: AuthProviderDep,
    x_user_id: Annotated[str | None, Header()] = None,
) -> GatewayCaller:
    """Authenticate the bearer token and derive the permission level."""
    expected = await config_store.get("mcp.bearerToken")
    if (
        credentials is None
        or not expected
        or not hmac.compare_digest(credentials.credentials.encode(), expected.encode())
    ):
        raise HTTPException(
            status_code=401,
            detail="Unauthorized. Provide a valid Bearer token.",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if x_user_id and x_user_id.isdigit():
        user = await auth_provider.get_user(int(x_user_id))
        if user is not None:
            level = PermissionLevel.ELEVATED if user.is_admin else PermissionLevel.SCOPED
            return GatewayCaller(level=level, user_id=user.id)

    return GatewayCaller(level=PermissionLevel.ELEVATED)


GatewayCallerDep = Annotated[GatewayCaller, Depends(get_gateway_caller)]


async def _list_tools(
    caller: GatewayCaller,
    registry: ToolRegistryDep,
    config_store: ConfigStoreDep,
    services: ServiceHubDep,
) -> dict[str, Any]:
    await initialize_tools(registry, config_store, services)
    return {"tools": filter_schemas(registry.list_schemas(), caller.level)}


@router.get("")
async def list_tools(
    caller: GatewayCallerDep,
    registry: ToolRegistryDep,
    config_store: ConfigStoreDep,
    services: ServiceHubDep,
) -> dict[str, Any]:
    return await _list_tools(caller, registry, config_store, services)


@router.post("")
async def call_gateway(
    body: GatewayRequest,
    caller: GatewayCallerDep,
    registry: ToolRegistryDep,
    config_store: ConfigStoreDep,
    services: ServiceHubDep,
) -> dict[str, Any]:
    if body.method in LIST_METHODS:
        return await _list_tools(caller, registry, config_store, services)

    if body.method not in EXECUTE_METHODS and not body.tool:
        raise HTTPException(
            status_code=400,
            detail="Unknown method. Use 'list', 'execute', or provide a 'tool' field.",
        )

    if not body.tool:
        raise HTTPException(status_code=400, detail="tool name is required")

    if not can_execute(body.tool, caller.level):
        logger.info(
            "tool_gateway_denied",
            tool=body.tool,
            level=caller.level.value,
            user_id=caller.user_id,
        )
        raise HTTPException(
            status_code=403,
            detail=f"Permission denied: {caller.level.value} cannot execute {body.tool}",
        )

    await initialize_tools(registry, config_store, services)

    arguments = (
        body.arguments if isinstance(body.arguments, str) else json.dumps(body.arguments or {})
    )
    result = await registry.execute(body.tool, arguments)
    logger.info("tool_gateway_executed", tool=body.tool, user_id=caller.user_id)
    return {"tool": body.tool, "result": json.loads(result)}
