"""Conversation repository and the history store used by the chat loop."""

from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from thinkarr.infrastructure.database.models.base import utcnow
from thinkarr.infrastructure.database.models.conversation import (
    DEFAULT_CONVERSATION_TITLE,
    Conversation,
    Message,
    MessageRole,
)
from thinkarr.infrastructure.database.repositories.base import BaseRepository
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)


class ConversationRepository(BaseRepository[Conversation]):
    """Repository for conversations and their messages."""

    model_class = Conversation

    async def create_conversation(
        self,
        user_id: int,
        title: str | None = None,
    ) -> Conversation:
        conversation = Conversation(
            user_id=user_id,
            title=title or DEFAULT_CONVERSATION_TITLE,
        )
        return await self.create(conversation)

    async def get(
        self,
        conversation_id: str,
        user_id: int | None = None,
    ) -> Conversation | None:
        """Get a conversation, optionally restricted to one owner."""
        query = self._base_query().where(Conversation.id == conversation_id)
        if user_id is not None:
            query = query.where(Conversation.user_id == user_id)
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def list_for_user(self, user_id: int) -> Sequence[Conversation]:
        """List a user's conversations, most recently active first."""
        query = (
            self._base_query()
            .where(Conversation.user_id == user_id)
            .order_by(Conversation.updated_at.desc())
        )
        result = await self.session.execute(query)
        return result.scalars().all()

    async def rename(self, conversation: Conversation, title: str) -> Conversation:
        conversation.title = title
        conversation.updated_at = utcnow()
        return await self.update(conversation)

    async def append_message(
        self,
        conversation_id: str,
        role: MessageRole | str,
        content: str | None,
        *,
        tool_calls: str | None = None,
        tool_call_id: str | None = None,
        tool_name: str | None = None,
    ) -> Message:
        """Append a message and bump the conversation's updated_at."""
        result = await self.session.execute(
            select(func.coalesce(func.max(Message.position), 0)).where(
                Message.conversation_id == conversation_id
            )
        )
        position = int(result.scalar_one()) + 1

        message = Message(
            conversation_id=conversation_id,
            position=position,
            role=MessageRole(role).value,
            content=content,
            tool_calls=tool_calls,
            tool_call_id=tool_call_id,
            tool_name=tool_name,
        )
        self.session.add(message)
        await self.session.execute(
            update(Conversation)
            .where(Conversation.id == conversation_id)
            .values(updated_at=utcnow())
        )
        await self.session.flush()
        return message

    async def read_ordered_history(self, conversation_id: str) -> Sequence[Message]:
        """Get all messages of a conversation in replay order."""
        result = await self.session.execute(
            select(Message)
            .where(Message.conversation_id == conversation_id)
            .order_by(Message.position)
        )
        return result.scalars().all()


class HistoryStore:
    """Durable per-conversation message log consumed by the chat loop.

    Every call runs in its own session and commits before returning, so a
    message is durable as soon as the loop moves on. Calls issued in sequence
    from one loop are therefore observed in that order.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def append_message(
        self,
        conversation_id: str,
        role: MessageRole | str,
        content: str | None,
        *,
        tool_calls: str | None = None,
        tool_call_id: str | None = None,
        tool_name: str | None = None,
    ) -> str:
        async with self._session_factory() as session:
            repo = ConversationRepository(session)
            message = await repo.append_message(
                conversation_id,
                role,
                content,
                tool_calls=tool_calls,
                tool_call_id=tool_call_id,
                tool_name=tool_name,
            )
            await session.commit()
            logger.debug(
                "message_appended",
                conversation_id=conversation_id,
                message_id=message.id,
                role=message.role,
            )
            return message.id

    async def read_ordered_history(self, conversation_id: str) -> list[Message]:
        async with self._session_factory() as session:
            messages = await ConversationRepository(session).read_ordered_history(
                conversation_id
            )
            return list(messages)

    async def get_conversation(self, conversation_id: str) -> Conversation | None:
        async with self._session_factory() as session:
            return await ConversationRepository(session).get(conversation_id)

    async def update_title(self, conversation_id: str, title: str) -> None:
        async with self._session_factory() as session:
            values: dict[str, Any] = {"title": title, "updated_at": utcnow()}
            await session.execute(
                update(Conversation).where(Conversation.id == conversation_id).values(**values)
            )
            await session.commit()
