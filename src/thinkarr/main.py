"""FastAPI application entry point."""

from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from thinkarr import __version__
from thinkarr.api.middleware.auth import build_auth_provider
from thinkarr.api.ratelimit import limiter, rate_limit_exceeded_handler
from thinkarr.api.router import api_router
from thinkarr.config import get_settings
from thinkarr.domain.chat.orchestrator import ChatOrchestrator
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.infrastructure.ai.endpoints import LlmClientPool
from thinkarr.infrastructure.auth.dev import DevAuthProvider
from thinkarr.infrastructure.database.connection import (
    build_engine,
    build_session_factory,
    init_db,
)
from thinkarr.infrastructure.database.repositories.app_config import ConfigStore
from thinkarr.infrastructure.database.repositories.conversation import HistoryStore
from thinkarr.infrastructure.external.factory import ServiceHub
from thinkarr.observability.metrics import setup_metrics
from thinkarr.shared.exceptions import (
    AuthenticationError,
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    NotFoundError,
    ThinkarrError,
    UnauthorizedError,
    ValidationError,
)
from thinkarr.shared.logging import get_logger, setup_logging

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan - startup and shutdown events.

    Anything already placed on ``app.state`` (tests do this) is kept.
    """
    # Startup
    setup_logging()
    logger.info("thinkarr_starting", version=__version__)
    settings = get_settings()

    engine = None
    if getattr(app.state, "session_factory", None) is None:
        engine = build_engine(settings.database_url, echo=settings.database_echo)
        await init_db(engine)
        app.state.session_factory = build_session_factory(engine)
    session_factory = app.state.session_factory

    # Shared resources (avoid per-request client creation)
    app.state.config_store = getattr(app.state, "config_store", None) or ConfigStore(
        session_factory
    )
    app.state.history_store = getattr(app.state, "history_store", None) or HistoryStore(
        session_factory
    )
    app.state.tool_registry = getattr(app.state, "tool_registry", None) or ToolRegistry()
    app.state.service_hub = getattr(app.state, "service_hub", None) or ServiceHub(
        app.state.config_store,
        timeout=settings.service_timeout_seconds,
    )
    app.state.llm_clients = getattr(app.state, "llm_clients", None) or LlmClientPool()
    app.state.orchestrator = getattr(app.state, "orchestrator", None) or ChatOrchestrator(
        history=app.state.history_store,
        registry=app.state.tool_registry,
        clients=app.state.llm_clients,
        config_store=app.state.config_store,
        services=app.state.service_hub,
        title_max_tokens=settings.title_max_tokens,
    )

    app.state.auth_provider = getattr(app.state, "auth_provider", None) or build_auth_provider(
        settings, session_factory
    )
    if isinstance(app.state.auth_provider, DevAuthProvider):
        await app.state.auth_provider.ensure_dev_user()

    yield

    # Shutdown
    logger.info("thinkarr_stopping")
    await app.state.orchestrator.wait_for_background_tasks()
    await app.state.service_hub.close()
    await app.state.llm_clients.close()
    await app.state.auth_provider.close()
    if engine is not None:
        await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()

    app = FastAPI(
        title="Thinkarr API",
        description="Conversational media assistant with LLM tool calling",
        version=__version__,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # Rate limiting
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)

    # CORS middleware
    # In production, be more restrictive; in development, allow all for convenience
    if settings.is_production:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["GET", "POST", "PATCH", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type", "Authorization", "X-User-Id"],
        )
    else:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=settings.cors_origins,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # Exception handlers
    register_exception_handlers(app)

    # Include routers
    app.include_router(api_router)

    # Observability
    setup_metrics(app)

    return app


def _error_response(
    status_code: int,
    error: str,
    exc: ThinkarrError,
) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={
            "error": error,
            "message": exc.message,
            "details": exc.details,
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Register custom exception handlers."""

    @app.exception_handler(ValidationError)
    async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
        _ = request
        return _error_response(422, "validation_error", exc)

    @app.exception_handler(RequestValidationError)
    async def request_validation_error_handler(
        request: Request, exc: RequestValidationError
    ) -> JSONResponse:
        _ = request
        return JSONResponse(
            status_code=422,
            content={
                "error": "validation_error",
                "message": "Request validation failed",
                "details": {"errors": exc.errors()},
            },
        )

    @app.exception_handler(AuthenticationError)
    async def auth_error_handler(request: Request, exc: AuthenticationError) -> JSONResponse:
        _ = request
        return _error_response(401, "authentication_error", exc)

    @app.exception_handler(UnauthorizedError)
    async def unauthorized_handler(request: Request, exc: UnauthorizedError) -> JSONResponse:
        _ = request
        return _error_response(403, "unauthorized", exc)

    @app.exception_handler(NotFoundError)
    async def not_found_handler(request: Request, exc: NotFoundError) -> JSONResponse:
        _ = request
        return _error_response(404, "not_found", exc)

    @app.exception_handler(ConflictError)
    async def conflict_handler(request: Request, exc: ConflictError) -> JSONResponse:
        _ = request
        return _error_response(409, "conflict", exc)

    @app.exception_handler(ConfigurationError)
    async def configuration_error_handler(
        request: Request, exc: ConfigurationError
    ) -> JSONResponse:
        logger.warning("configuration_error", error=exc.message, path=request.url.path)
        return _error_response(503, "not_configured", exc)

    @app.exception_handler(ExternalServiceError)
    async def external_service_error_handler(
        request: Request, exc: ExternalServiceError
    ) -> JSONResponse:
        _ = request
        logger.warning("external_service_error", error=exc.message)
        return _error_response(503, "service_unavailable", exc)

    @app.exception_handler(ThinkarrError)
    async def thinkarr_error_handler(request: Request, exc: ThinkarrError) -> JSONResponse:
        _ = request
        logger.error("unhandled_error", error=exc.message, details=exc.details)
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "An internal error occurred",
            },
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        _ = request
        logger.exception("unexpected_error", error=str(exc))
        return JSONResponse(
            status_code=500,
            content={
                "error": "internal_error",
                "message": "An unexpected error occurred",
            },
        )


# Create app instance
app = create_app()
