"""Chat streaming endpoint.

A turn is validated first (conversation, LLM configuration) so those
failures come back as plain HTTP errors. Everything after that is streamed
as server-sent events, ending with ``data: [DONE]``.
"""

from fastapi import APIRouter, HTTPException, Request
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from thinkarr.api.deps import CurrentUser, OrchestratorDep
from thinkarr.api.ratelimit import chat_rate_limit, limiter
from thinkarr.domain.chat.orchestrator import TurnRequest
from thinkarr.domain.chat.stream import sse_stream
from thinkarr.shared.logging import bind_request_context, get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/chat", tags=["Chat"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


class ChatRequest(BaseModel):
    """Turn-start body. ``userMessage`` and ``modelSelector`` are accepted aliases."""

    model_config = ConfigDict(populate_by_name=True)

    conversation_id: str = Field("", alias="conversationId")
    message: str | None = None
    user_message: str | None = Field(None, alias="userMessage")
    model_id: str | None = Field(None, alias="modelId")
    model_selector: str | None = Field(None, alias="modelSelector")

    @property
    def text(self) -> str:
        return self.message or self.user_message or ""

    @property
    def selector(self) -> str | None:
        return self.model_id or self.model_selector or None


@router.post("")
@limiter.limit(chat_rate_limit)
async def chat(
    request: Request,
    body: ChatRequest,
    user: CurrentUser,
    orchestrator: OrchestratorDep,
) -> StreamingResponse:
    """Send a message and stream the assistant's turn.

    Events: ``text_delta``, ``tool_call_start``, ``tool_result``, then either
    ``done`` or ``error``.
    """
    if not body.conversation_id or not body.text.strip():
        raise HTTPException(status_code=400, detail="conversationId and message are required")

    bind_request_context(user_id=user.id, conversation_id=body.conversation_id)

    turn = await orchestrator.start_turn(
        TurnRequest(
            conversation_id=body.conversation_id,
            message=body.text,
            model_selector=body.selector,
            user_id=user.id,
        )
    )

    return StreamingResponse(
        sse_stream(orchestrator.stream(turn)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
