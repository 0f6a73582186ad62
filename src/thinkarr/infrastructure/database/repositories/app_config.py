"""Config store over the ``app_config`` table.

Values are read at call time on purpose: changing a service URL or API key in
the settings screen takes effect on the next tool call without a restart.
"""

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thinkarr.infrastructure.database.models.app_config import AppConfig
from thinkarr.infrastructure.database.models.base import utcnow
from thinkarr.shared.crypto import decrypt_secret, encrypt_secret
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)


class ConfigStore:
    """Read and write application config entries."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @staticmethod
    def _decode(entry: AppConfig) -> str | None:
        if not entry.encrypted:
            return entry.value
        try:
            return decrypt_secret(entry.value)
        except ValueError:
            logger.warning("config_decrypt_failed", key=entry.key)
            return None

    async def get(self, key: str) -> str | None:
        async with self._session_factory() as session:
            entry = await session.get(AppConfig, key)
            if entry is None:
                return None
            return self._decode(entry)

    async def get_many(self, keys: Iterable[str]) -> dict[str, str | None]:
        """Get several keys at once; missing keys map to None."""
        wanted = list(keys)
        async with self._session_factory() as session:
            result = await session.execute(select(AppConfig).where(AppConfig.key.in_(wanted)))
            found = {entry.key: self._decode(entry) for entry in result.scalars()}
        return {key: found.get(key) for key in wanted}

    async def set(self, key: str, value: str, encrypted: bool = False) -> None:
        stored = encrypt_secret(value) if encrypted else value
        async with self._session_factory() as session:
            entry = await session.get(AppConfig, key)
            if entry is None:
                session.add(AppConfig(key=key, value=stored, encrypted=encrypted))
            else:
                entry.value = stored
                entry.encrypted = encrypted
                entry.updated_at = utcnow()
            await session.commit()
