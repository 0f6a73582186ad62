"""Conversation management routes."""

from datetime import datetime

from fastapi import APIRouter
from pydantic import BaseModel, ConfigDict, Field

from thinkarr.api.deps import CurrentUser, SessionDep
from thinkarr.infrastructure.database.models.conversation import Conversation, Message
from thinkarr.infrastructure.database.repositories.conversation import ConversationRepository
from thinkarr.shared.exceptions import NotFoundError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/conversations", tags=["Conversations"])


# ----- Schemas -----


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, from_attributes=True)


class ConversationResponse(_CamelModel):
    id: str
    title: str
    created_at: datetime = Field(serialization_alias="createdAt")
    updated_at: datetime = Field(serialization_alias="updatedAt")


class MessageResponse(_CamelModel):
    id: str
    role: str
    content: str | None
    tool_calls: str | None = Field(serialization_alias="toolCalls")
    tool_call_id: str | None = Field(serialization_alias="toolCallId")
    tool_name: str | None = Field(serialization_alias="toolName")
    created_at: datetime = Field(serialization_alias="createdAt")


class ConversationDetailResponse(ConversationResponse):
    messages: list[MessageResponse] = []


class CreateConversationRequest(BaseModel):
    title: str | None = Field(None, max_length=255)


class RenameConversationRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)


def _to_response(conversation: Conversation) -> ConversationResponse:
    return ConversationResponse.model_validate(conversation)


def _message_response(message: Message) -> MessageResponse:
    return MessageResponse.model_validate(message)


# ----- Routes -----


@router.get("", response_model=list[ConversationResponse], response_model_by_alias=True)
async def list_conversations(user: CurrentUser, session: SessionDep) -> list[ConversationResponse]:
    """The caller's conversations, most recently active first."""
    conversations = await ConversationRepository(session).list_for_user(user.id)
    return [_to_response(c) for c in conversations]


@router.post(
    "",
    response_model=ConversationResponse,
    response_model_by_alias=True,
    status_code=201,
)
async def create_conversation(
    user: CurrentUser,
    session: SessionDep,
    body: CreateConversationRequest | None = None,
) -> ConversationResponse:
    title = body.title if body else None
    conversation = await ConversationRepository(session).create_conversation(user.id, title)
    logger.info("conversation_created", conversation_id=conversation.id, user_id=user.id)
    return _to_response(conversation)


@router.get(
    "/{conversation_id}",
    response_model=ConversationDetailResponse,
    response_model_by_alias=True,
)
async def get_conversation(
    conversation_id: str,
    user: CurrentUser,
    session: SessionDep,
) -> ConversationDetailResponse:
    """A conversation with its messages in order. Admins may read any."""
    repo = ConversationRepository(session)
    conversation = await repo.get(conversation_id, None if user.is_admin else user.id)
    if conversation is None:
        raise NotFoundError("Conversation", conversation_id)

    messages = await repo.read_ordered_history(conversation.id)
    return ConversationDetailResponse(
        id=conversation.id,
        title=conversation.title,
        created_at=conversation.created_at,
        updated_at=conversation.updated_at,
        messages=[_message_response(m) for m in messages],
    )


@router.delete("/{conversation_id}", status_code=204)
async def delete_conversation(
    conversation_id: str,
    user: CurrentUser,
    session: SessionDep,
) -> None:
    """Delete one of the caller's conversations and its messages."""
    repo = ConversationRepository(session)
    conversation = await repo.get(conversation_id, user.id)
    if conversation is None:
        raise NotFoundError("Conversation", conversation_id)
    await repo.delete(conversation)
    logger.info("conversation_deleted", conversation_id=conversation_id, user_id=user.id)


@router.patch(
    "/{conversation_id}/title",
    response_model=ConversationResponse,
    response_model_by_alias=True,
)
async def rename_conversation(
    conversation_id: str,
    body: RenameConversationRequest,
    user: CurrentUser,
    session: SessionDep,
) -> ConversationResponse:
    repo = ConversationRepository(session)
    conversation = await repo.get(conversation_id, user.id)
    if conversation is None:
        raise NotFoundError("Conversation", conversation_id)
    conversation = await repo.rename(conversation, body.title.strip())
    return _to_response(conversation)
