"""
Pytest configuration and fixtures for Thinkarr tests.
"""
import os

# Settings are cached on first use; set the environment before any app import
os.environ.setdefault("APP_SECRET_KEY", "test-secret-key-for-encryption-32chars")
os.environ.setdefault("APP_ENV", "development")
os.environ.setdefault("AUTH_PROVIDER", "session")
os.environ.setdefault("RATE_LIMIT_CHAT", "1000/minute")

from collections.abc import AsyncGenerator  # noqa: E402
from datetime import timedelta  # noqa: E402

import pytest  # noqa: E402
from fastapi import FastAPI  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from thinkarr.infrastructure.database.connection import (  # noqa: E402
    build_engine,
    build_session_factory,
    init_db,
)
from thinkarr.infrastructure.database.models.base import utcnow  # noqa: E402
from thinkarr.infrastructure.database.models.conversation import Conversation  # noqa: E402
from thinkarr.infrastructure.database.models.user import User, UserSession  # noqa: E402
from thinkarr.infrastructure.database.repositories.app_config import ConfigStore  # noqa: E402
from thinkarr.infrastructure.database.repositories.conversation import (  # noqa: E402
    ConversationRepository,
    HistoryStore,
)
from thinkarr.infrastructure.database.repositories.user import UserRepository  # noqa: E402
from thinkarr.main import create_app  # noqa: E402

TEST_DATABASE_URL = "sqlite+aiosqlite://"


# ----- Database -----


@pytest.fixture
async def async_engine() -> AsyncGenerator[AsyncEngine, None]:
    """In-memory SQLite shared by every session of one test."""
    engine = build_engine(
        TEST_DATABASE_URL,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    await init_db(engine)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(async_engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    return build_session_factory(async_engine)


@pytest.fixture
async def db_session(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def config_store(session_factory: async_sessionmaker[AsyncSession]) -> ConfigStore:
    return ConfigStore(session_factory)


@pytest.fixture
def history_store(session_factory: async_sessionmaker[AsyncSession]) -> HistoryStore:
    return HistoryStore(session_factory)


# ----- Users and conversations -----


async def _create_user(
    session_factory: async_sessionmaker[AsyncSession],
    plex_id: str,
    username: str,
    *,
    is_admin: bool = False,
) -> User:
    async with session_factory() as session:
        user = await UserRepository(session).ensure_user(plex_id, username, is_admin=is_admin)
        session.add(
            UserSession(
                id=f"token-{username}",
                user_id=user.id,
                expires_at=utcnow() + timedelta(days=1),
            )
        )
        await session.commit()
        return user


@pytest.fixture
async def test_user(session_factory: async_sessionmaker[AsyncSession]) -> User:
    """Regular user with session token ``token-alice``."""
    return await _create_user(session_factory, "plex-alice", "alice")


@pytest.fixture
async def other_user(session_factory: async_sessionmaker[AsyncSession]) -> User:
    """Second regular user with session token ``token-bob``."""
    return await _create_user(session_factory, "plex-bob", "bob")


@pytest.fixture
async def admin_user(session_factory: async_sessionmaker[AsyncSession]) -> User:
    """Admin with session token ``token-root``."""
    return await _create_user(session_factory, "plex-root", "root", is_admin=True)


@pytest.fixture
async def conversation(
    session_factory: async_sessionmaker[AsyncSession],
    test_user: User,
) -> Conversation:
    async with session_factory() as session:
        conversation = await ConversationRepository(session).create_conversation(test_user.id)
        await session.commit()
        return conversation


@pytest.fixture
async def llm_configured(config_store: ConfigStore) -> None:
    """Legacy single-endpoint LLM config."""
    await config_store.set("llm.baseUrl", "http://llm.test/v1")
    await config_store.set("llm.apiKey", "sk-test", encrypted=True)
    await config_store.set("llm.model", "test-model")


# ----- Application -----


@pytest.fixture
async def app(
    session_factory: async_sessionmaker[AsyncSession],
) -> AsyncGenerator[FastAPI, None]:
    """App with its lifespan running against the test database."""
    application = create_app()
    application.state.session_factory = session_factory
    async with application.router.lifespan_context(application):
        yield application


@pytest.fixture
async def async_client(app: FastAPI) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing."""
    async with AsyncClient(
        transport=ASGITransport(app=app),
        base_url="http://test",
    ) as client:
        yield client


@pytest.fixture
def auth_headers(test_user: User) -> dict[str, str]:
    return {"Authorization": "Bearer token-alice"}


@pytest.fixture
def admin_headers(admin_user: User) -> dict[str, str]:
    return {"Authorization": "Bearer token-root"}
