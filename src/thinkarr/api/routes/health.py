"""Liveness and readiness checks."""

from fastapi import APIRouter
from pydantic import BaseModel
from sqlalchemy import literal, select
from sqlalchemy.exc import SQLAlchemyError

from thinkarr import __version__
from thinkarr.api.deps import ConfigStoreDep
from thinkarr.infrastructure.ai.endpoints import enabled_endpoints, load_endpoints
from thinkarr.infrastructure.database.connection import SessionDep
from thinkarr.infrastructure.external.factory import configured_services
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["Health"])


class HealthResponse(BaseModel):
    status: str
    version: str


class ReadyResponse(BaseModel):
    """``ready`` only depends on the database; the rest is informational."""

    ready: bool
    checks: dict[str, bool]
    llm_configured: bool
    services: list[str]


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    return HealthResponse(status="healthy", version=__version__)


@router.get("/ready", response_model=ReadyResponse)
async def readiness_check(session: SessionDep, config_store: ConfigStoreDep) -> ReadyResponse:
    """Database reachability plus what the assistant can currently use."""
    try:
        await session.execute(select(literal(1)))
    except SQLAlchemyError as e:
        logger.warning("database_health_check_failed", error=str(e))
        return ReadyResponse(
            ready=False, checks={"database": False}, llm_configured=False, services=[]
        )

    endpoints = await load_endpoints(config_store)
    return ReadyResponse(
        ready=True,
        checks={"database": True},
        llm_configured=bool(enabled_endpoints(endpoints)),
        services=await configured_services(config_store),
    )
