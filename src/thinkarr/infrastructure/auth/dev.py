"""Development authentication provider for local testing.

This provider accepts any token and acts as a fixed local admin.
NEVER use in production!
"""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thinkarr.infrastructure.auth.provider import AuthUser
from thinkarr.infrastructure.auth.session import SessionAuthProvider
from thinkarr.infrastructure.database.repositories.user import UserRepository
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

DEV_PLEX_ID = "dev"
DEV_USERNAME = "dev"


class DevAuthProvider(SessionAuthProvider):
    """Accepts any token and returns the local dev admin.

    ``ensure_dev_user()`` must run once at startup so the user row exists for
    conversations to reference.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        super().__init__(session_factory)
        self._dev_user: AuthUser | None = None

    async def ensure_dev_user(self) -> AuthUser:
        async with self._session_factory() as session:
            user = await UserRepository(session).ensure_user(
                DEV_PLEX_ID,
                DEV_USERNAME,
                is_admin=True,
                email="dev@thinkarr.local",
            )
            await session.commit()
            self._dev_user = AuthUser(id=user.id, username=user.username, is_admin=True)
        logger.warning(
            "dev_auth_enabled",
            message="Using development auth - DO NOT USE IN PRODUCTION",
            user_id=self._dev_user.id,
        )
        return self._dev_user

    async def verify_token(self, token: str) -> AuthUser:
        """Accept any token and return the dev user."""
        if self._dev_user is None:
            return await self.ensure_dev_user()
        return self._dev_user
