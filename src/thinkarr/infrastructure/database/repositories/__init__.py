"""Database repositories."""

from thinkarr.infrastructure.database.repositories.app_config import ConfigStore
from thinkarr.infrastructure.database.repositories.base import BaseRepository
from thinkarr.infrastructure.database.repositories.conversation import (
    ConversationRepository,
    HistoryStore,
)
from thinkarr.infrastructure.database.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "ConfigStore",
    "ConversationRepository",
    "HistoryStore",
    "UserRepository",
]
