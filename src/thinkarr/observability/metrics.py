"""Prometheus metrics for the HTTP layer and the chat loop.

Latency for ``/api/chat`` is time to response headers; the streamed body is
covered by the turn and round metrics instead.
"""

import time
from collections.abc import Awaitable, Callable

from fastapi import FastAPI, Request
from prometheus_client import CONTENT_TYPE_LATEST, Counter, Gauge, Histogram, generate_latest
from starlette.responses import Response

# Scrapes and health checks would drown out real traffic
UNINSTRUMENTED_PATHS = frozenset({"/metrics", "/health", "/ready"})

HTTP_REQUESTS = Counter(
    "thinkarr_http_requests_total",
    "HTTP requests by route template and status",
    ["method", "route", "status"],
)
HTTP_LATENCY = Histogram(
    "thinkarr_http_request_duration_seconds",
    "Time until response headers are sent",
    ["method", "route"],
)
HTTP_IN_FLIGHT = Gauge(
    "thinkarr_http_requests_in_flight",
    "Requests currently being handled",
)

CHAT_TURNS = Counter(
    "thinkarr_chat_turns_total",
    "Chat turns by outcome",
    ["outcome"],  # completed | error | tool_limit | cancelled
)
CHAT_MODEL_ROUNDS = Histogram(
    "thinkarr_chat_model_rounds",
    "Model rounds used per chat turn",
    buckets=(1, 2, 3, 4, 5),
)
TOOL_EXECUTIONS = Counter(
    "thinkarr_tool_executions_total",
    "Tool executions by tool and outcome",
    ["tool", "outcome"],  # ok | error
)


def route_template(request: Request) -> str:
    """``/api/conversations/{conversation_id}`` rather than the concrete URL."""
    route = request.scope.get("route")
    return getattr(route, "path", None) or "unmatched"


def setup_metrics(app: FastAPI) -> None:
    """Instrument the app and expose ``GET /metrics``."""

    @app.middleware("http")
    async def metrics_middleware(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        if request.url.path in UNINSTRUMENTED_PATHS:
            return await call_next(request)

        status = "500"
        started = time.perf_counter()
        HTTP_IN_FLIGHT.inc()
        try:
            response = await call_next(request)
            status = str(response.status_code)
            return response
        finally:
            HTTP_IN_FLIGHT.dec()
            route = route_template(request)
            HTTP_LATENCY.labels(request.method, route).observe(time.perf_counter() - started)
            HTTP_REQUESTS.labels(request.method, route, status).inc()

    @app.get("/metrics", include_in_schema=False)
    async def metrics() -> Response:
        return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)
