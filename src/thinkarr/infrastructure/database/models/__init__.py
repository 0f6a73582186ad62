"""SQLAlchemy ORM models."""

from thinkarr.infrastructure.database.models.app_config import AppConfig
from thinkarr.infrastructure.database.models.base import Base, TimestampMixin
from thinkarr.infrastructure.database.models.conversation import (
    DEFAULT_CONVERSATION_TITLE,
    Conversation,
    Message,
    MessageRole,
)
from thinkarr.infrastructure.database.models.user import User, UserSession

__all__ = [
    "Base",
    "TimestampMixin",
    "AppConfig",
    "Conversation",
    "Message",
    "MessageRole",
    "DEFAULT_CONVERSATION_TITLE",
    "User",
    "UserSession",
]
