"""User and session lookups."""

from datetime import UTC, datetime

from sqlalchemy import select

from thinkarr.infrastructure.database.models.user import User, UserSession
from thinkarr.infrastructure.database.repositories.base import BaseRepository


class UserRepository(BaseRepository[User]):
    model_class = User

    async def get_by_plex_id(self, plex_id: str) -> User | None:
        result = await self.session.execute(select(User).where(User.plex_id == plex_id))
        return result.scalar_one_or_none()

    async def get_by_session_token(self, token: str) -> User | None:
        """Resolve an unexpired session token to its user."""
        session_row = await self.session.get(UserSession, token)
        if session_row is None:
            return None

        expires_at = session_row.expires_at
        # SQLite hands back naive datetimes
        if expires_at.tzinfo is None:
            expires_at = expires_at.replace(tzinfo=UTC)
        if expires_at <= datetime.now(UTC):
            return None

        return await self.get_by_id(session_row.user_id)

    async def ensure_user(
        self,
        plex_id: str,
        username: str,
        *,
        is_admin: bool = False,
        email: str | None = None,
    ) -> User:
        """Get a user by Plex id, creating it when missing."""
        user = await self.get_by_plex_id(plex_id)
        if user is not None:
            return user
        return await self.create(
            User(plex_id=plex_id, username=username, email=email, is_admin=is_admin)
        )
