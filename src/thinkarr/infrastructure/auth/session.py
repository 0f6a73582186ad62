"""Session-token authentication backed by the ``sessions`` table."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thinkarr.infrastructure.auth.provider import AuthProvider, AuthUser
from thinkarr.infrastructure.database.models.user import User
from thinkarr.infrastructure.database.repositories.user import UserRepository
from thinkarr.shared.exceptions import AuthenticationError


def _to_auth_user(user: User) -> AuthUser:
    return AuthUser(id=user.id, username=user.username, is_admin=user.is_admin)


class SessionAuthProvider(AuthProvider):
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def verify_token(self, token: str) -> AuthUser:
        async with self._session_factory() as session:
            user = await UserRepository(session).get_by_session_token(token)
        if user is None:
            raise AuthenticationError("Invalid or expired session")
        return _to_auth_user(user)

    async def get_user(self, user_id: int) -> AuthUser | None:
        async with self._session_factory() as session:
            user = await UserRepository(session).get_by_id(user_id)
        return _to_auth_user(user) if user is not None else None
