"""Rate limiting configuration for API endpoints.

Uses slowapi with in-memory storage by default; point
RATE_LIMIT_STORAGE_URI at Redis when running more than one worker.
"""

from fastapi import Request, Response
from pydantic import ValidationError
from slowapi import Limiter
from slowapi.errors import RateLimitExceeded
from slowapi.util import get_remote_address
from starlette.responses import JSONResponse

from thinkarr.config import get_settings
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)


def _get_rate_limit_key(request: Request) -> str:
    """Get rate limit key based on user or IP.

    For authenticated requests, use user_id.
    For unauthenticated requests, use IP address.
    """
    user = getattr(request.state, "user", None)
    if user is not None:
        return f"user:{user.id}"
    return get_remote_address(request)


def _storage_uri() -> str:
    try:
        return get_settings().rate_limit_storage_uri
    except ValidationError:
        # Settings incomplete (e.g. imported by tooling)
        return "memory://"


def _create_limiter(storage_uri: str = "memory://") -> Limiter:
    """Create rate limiter with appropriate storage backend."""
    return Limiter(
        key_func=_get_rate_limit_key,
        storage_uri=storage_uri,
        strategy="fixed-window",
    )


limiter = _create_limiter(_storage_uri())


def chat_rate_limit() -> str:
    return get_settings().rate_limit_chat


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """Custom handler for rate limit exceeded errors."""
    logger.warning(
        "rate_limit_exceeded",
        path=request.url.path,
        method=request.method,
        key=_get_rate_limit_key(request),
        limit=str(exc.detail),
    )

    return JSONResponse(
        status_code=429,
        content={
            "error": "too_many_requests",
            "message": "Too many requests. Please wait a moment.",
            "details": {"limit": str(exc.detail)},
        },
        headers={"Retry-After": "60"},
    )
