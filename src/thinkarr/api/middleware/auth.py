"""Authentication dependencies for FastAPI."""

from typing import Annotated

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thinkarr.config import Settings, get_settings
from thinkarr.infrastructure.auth.provider import AuthProvider, AuthUser
from thinkarr.shared.exceptions import AuthenticationError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

# HTTP Bearer scheme
security = HTTPBearer(auto_error=False)


def build_auth_provider(
    settings: Settings,
    session_factory: async_sessionmaker[AsyncSession],
) -> AuthProvider:
    """Build the configured auth provider.

    Set AUTH_PROVIDER env var to "dev" for local testing without a Plex login.
    """
    if settings.auth_provider == "dev":
        from thinkarr.infrastructure.auth.dev import DevAuthProvider

        return DevAuthProvider(session_factory)

    from thinkarr.infrastructure.auth.session import SessionAuthProvider

    return SessionAuthProvider(session_factory)


def get_auth_provider(request: Request) -> AuthProvider:
    """The auth provider built in the app lifespan."""
    provider: AuthProvider = request.app.state.auth_provider
    return provider


def _unauthorized(detail: str = "Not authenticated") -> HTTPException:
    return HTTPException(
        status_code=401,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    auth_provider: Annotated[AuthProvider, Depends(get_auth_provider)],
) -> AuthUser:
    """Dependency to get the current authenticated user.

    Accepts a bearer token or the session cookie set at login.

    Usage:
        @router.get("/me")
        async def get_me(user: CurrentUser):
            return {"username": user.username}
    """
    token = credentials.credentials if credentials else None
    if token is None:
        token = request.cookies.get(get_settings().session_cookie_name)
    if not token:
        raise _unauthorized()

    try:
        user = await auth_provider.verify_token(token)
    except AuthenticationError as e:
        logger.info("auth_failed", error=e.message)
        raise _unauthorized(e.message) from e

    # Rate limiter keys on the user
    request.state.user = user
    logger.debug("user_authenticated", user_id=user.id, username=user.username)
    return user


def require_admin(
    user: Annotated[AuthUser, Depends(get_current_user)],
) -> AuthUser:
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Admin access required")
    return user


# Type aliases for authenticated users
CurrentUser = Annotated[AuthUser, Depends(get_current_user)]
RequireAdmin = Annotated[AuthUser, Depends(require_admin)]
