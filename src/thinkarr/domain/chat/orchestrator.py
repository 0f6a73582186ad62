"""Chat orchestrator: streaming LLM turns with tool calling.

A turn runs in two phases:

1. ``start_turn`` checks everything that can fail before a response is
   streamed (conversation exists, LLM endpoint configured) and raises.
2. ``stream`` persists the user message, replays history into model context
   and runs up to ``MAX_TOOL_ROUNDS`` streaming completions. Text is emitted
   as it arrives; tool calls are executed one at a time, persisted, and fed
   back to the model for the next round.

Tool failures are data (the registry encodes them as ``{"error": ...}``).
Model failures end the turn with a single error event and are not retried.
"""

import asyncio
import json
from collections.abc import AsyncIterator, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

from openai import AsyncOpenAI

from thinkarr.domain.chat.events import (
    ChatEvent,
    Done,
    ErrorEvent,
    TextDelta,
    ToolCallStart,
    ToolResult,
)
from thinkarr.domain.chat.system_prompt import build_system_prompt
from thinkarr.domain.tools.bootstrap import initialize_tools
from thinkarr.domain.tools.registry import ToolRegistry
from thinkarr.infrastructure.ai.endpoints import LlmClientPool, load_endpoints, resolve_model
from thinkarr.infrastructure.database.models.conversation import Message, MessageRole
from thinkarr.infrastructure.database.repositories.app_config import ConfigStore
from thinkarr.infrastructure.database.repositories.conversation import HistoryStore
from thinkarr.infrastructure.external.factory import ServiceHub, configured_services
from thinkarr.observability.metrics import CHAT_MODEL_ROUNDS, CHAT_TURNS
from thinkarr.shared.exceptions import NotFoundError
from thinkarr.shared.logging import get_logger

logger = get_logger(__name__)

MAX_TOOL_ROUNDS = 5
TOOL_LIMIT_MESSAGE = "Tool call limit reached"
TITLE_MAX_LENGTH = 100
CANCELLED_TOOL_RESULT = json.dumps({"error": "Cancelled"})

TITLE_INSTRUCTION = (
    "Generate a very short summary (3-6 words, no quotes) summarizing this chat message. "
    "Most conversations will be about TV and Movies and/or their availability in a Media "
    "Library so assume this is the case. If the chat was about a specific title, reply with "
    "ONLY the title and the year e.g. Ghostbusters (1984), nothing else. If the chat was about "
    "multiple titles or something else, reply with ONLY the short summary, nothing else."
)


# ============================================================================
# Tool call accumulation
# ============================================================================


@dataclass(frozen=True, slots=True)
class ToolCallRequest:
    id: str
    name: str
    arguments: str

    def to_openai(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": "function",
            "function": {"name": self.name, "arguments": self.arguments},
        }


@dataclass
class _PendingToolCall:
    id: str = ""
    name: str = ""
    arguments: str = ""


class ToolCallAccumulator:
    """Assembles streamed tool-call fragments, keyed by stream index.

    Providers split a call across chunks; name and argument fragments are
    concatenated. Most providers send the id once, some repeat it on every
    chunk, a few split it; a fragment equal to the id seen so far is a repeat.
    """

    def __init__(self) -> None:
        self._calls: dict[int, _PendingToolCall] = {}

    def add(self, fragments: Iterable[Any]) -> None:
        for fragment in fragments:
            call = self._calls.setdefault(fragment.index, _PendingToolCall())
            if fragment.id and fragment.id != call.id:
                call.id += fragment.id
            function = getattr(fragment, "function", None)
            if function is None:
                continue
            if function.name:
                call.name += function.name
            if function.arguments:
                call.arguments += function.arguments

    def finalize(self) -> list[ToolCallRequest]:
        """Completed calls in stream-index order; incomplete ones are dropped."""
        requests: list[ToolCallRequest] = []
        for index in sorted(self._calls):
            call = self._calls[index]
            if not call.id or not call.name:
                logger.warning("tool_call_incomplete", index=index, tool=call.name or None)
                continue
            requests.append(
                ToolCallRequest(id=call.id, name=call.name, arguments=call.arguments or "{}")
            )
        return requests


# ============================================================================
# History replay
# ============================================================================


def build_model_context(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Translate persisted messages into chat-completion messages.

    Pure: the same rows always give the same context.
    """
    context: list[dict[str, Any]] = []
    for message in messages:
        role = message.role
        if role in (MessageRole.USER.value, MessageRole.SYSTEM.value):
            if message.content:
                context.append({"role": role, "content": message.content})

        elif role == MessageRole.ASSISTANT.value:
            entry: dict[str, Any] = {"role": "assistant"}
            if message.content:
                entry["content"] = message.content
            if message.tool_calls:
                try:
                    tool_calls = json.loads(message.tool_calls)
                except json.JSONDecodeError:
                    logger.warning("history_tool_calls_corrupt", message_id=message.id)
                else:
                    if isinstance(tool_calls, list) and tool_calls:
                        entry["tool_calls"] = tool_calls
                    else:
                        logger.warning("history_tool_calls_corrupt", message_id=message.id)
            if "content" not in entry and "tool_calls" not in entry:
                entry["content"] = ""
            context.append(entry)

        elif role == MessageRole.TOOL.value:
            if message.tool_call_id and message.content:
                context.append(
                    {
                        "role": "tool",
                        "tool_call_id": message.tool_call_id,
                        "content": message.content,
                    }
                )
    return context


# ============================================================================
# Title generation
# ============================================================================


def _clean_title(raw: str | None) -> str | None:
    if not raw:
        return None
    title = raw.strip().strip("\"'").strip()
    return title[:TITLE_MAX_LENGTH] or None


async def generate_title(
    client: AsyncOpenAI,
    model: str,
    first_message: str,
    max_tokens: int = 20,
) -> str | None:
    """Ask the model for a short conversation title."""
    response = await client.chat.completions.create(
        model=model,
        messages=[
            {"role": "system", "content": TITLE_INSTRUCTION},
            {"role": "user", "content": first_message},
        ],
        max_tokens=max_tokens,
    )
    if not response.choices:
        return None
    return _clean_title(response.choices[0].message.content)


# ============================================================================
# Orchestrator
# ============================================================================


@dataclass(frozen=True)
class TurnRequest:
    conversation_id: str
    message: str
    model_selector: str | None = None
    user_id: int | None = None  # None skips the ownership check (admin)


@dataclass
class Turn:
    """A validated turn, ready to stream."""

    conversation_id: str
    user_message: str
    client: AsyncOpenAI
    model: str
    endpoint_id: str
    first_turn: bool
    tools: list[dict[str, Any]] | None = field(default=None)


class ChatOrchestrator:
    def __init__(
        self,
        history: HistoryStore,
        registry: ToolRegistry,
        clients: LlmClientPool,
        config_store: ConfigStore,
        services: ServiceHub,
        title_max_tokens: int = 20,
    ) -> None:
        self.history = history
        self.registry = registry
        self.clients = clients
        self.config_store = config_store
        self.services = services
        self.title_max_tokens = title_max_tokens
        self._background_tasks: set[asyncio.Task[None]] = set()

    async def start_turn(self, request: TurnRequest) -> Turn:
        """Validate a turn before streaming.

        Raises:
            NotFoundError: Conversation missing or owned by someone else
            LlmNotConfiguredError: No usable LLM endpoint
        """
        conversation = await self.history.get_conversation(request.conversation_id)
        if conversation is None or (
            request.user_id is not None and conversation.user_id != request.user_id
        ):
            raise NotFoundError("Conversation", request.conversation_id)

        await initialize_tools(self.registry, self.config_store, self.services)

        endpoints = await load_endpoints(self.config_store)
        resolved = resolve_model(request.model_selector, endpoints)

        return Turn(
            conversation_id=conversation.id,
            user_message=request.message,
            client=self.clients.get(resolved.endpoint),
            model=resolved.model,
            endpoint_id=resolved.endpoint.id,
            first_turn=conversation.has_default_title,
            tools=self.registry.list_schemas() if self.registry.has_any() else None,
        )

    async def stream(self, turn: Turn) -> AsyncIterator[ChatEvent]:
        """Run the turn, yielding events as they happen."""
        log = logger.bind(
            conversation_id=turn.conversation_id,
            endpoint_id=turn.endpoint_id,
            model=turn.model,
        )
        log.info("turn_started", first_turn=turn.first_turn, tool_count=len(turn.tools or []))

        await self.history.append_message(turn.conversation_id, MessageRole.USER, turn.user_message)

        history = await self.history.read_ordered_history(turn.conversation_id)
        system_prompt = build_system_prompt(await configured_services(self.config_store))
        context: list[dict[str, Any]] = [
            {"role": "system", "content": system_prompt},
            *build_model_context(history),
        ]

        rounds = 0
        unanswered: list[ToolCallRequest] = []
        try:
            for round_number in range(1, MAX_TOOL_ROUNDS + 1):
                rounds = round_number
                log.debug("model_round_started", round=round_number)

                text_parts: list[str] = []
                accumulator = ToolCallAccumulator()
                try:
                    async with await self._open_stream(turn, context) as completion:
                        async for chunk in completion:
                            if not chunk.choices:
                                continue
                            delta = chunk.choices[0].delta
                            if delta is None:
                                continue
                            if delta.content:
                                text_parts.append(delta.content)
                                yield TextDelta(content=delta.content)
                            if delta.tool_calls:
                                accumulator.add(delta.tool_calls)
                except Exception as e:
                    log.warning("turn_failed", round=round_number, error=str(e))
                    CHAT_TURNS.labels(outcome="error").inc()
                    yield ErrorEvent(message=str(e) or "LLM request failed")
                    return

                text = "".join(text_parts)
                tool_calls = accumulator.finalize()

                if not tool_calls:
                    message_id = await self.history.append_message(
                        turn.conversation_id, MessageRole.ASSISTANT, text
                    )
                    log.info("turn_completed", rounds=round_number, message_id=message_id)
                    CHAT_TURNS.labels(outcome="completed").inc()
                    if turn.first_turn:
                        self._schedule_title(turn)
                    yield Done(message_id=message_id)
                    return

                serialized = [call.to_openai() for call in tool_calls]
                await self.history.append_message(
                    turn.conversation_id,
                    MessageRole.ASSISTANT,
                    text or None,
                    tool_calls=json.dumps(serialized),
                )
                context.append(
                    {"role": "assistant", "content": text or None, "tool_calls": serialized}
                )
                log.info("tool_round", round=round_number, tools=[c.name for c in tool_calls])
                unanswered = list(tool_calls)

                for call in tool_calls:
                    yield ToolCallStart(
                        tool_call_id=call.id,
                        tool_name=call.name,
                        arguments=call.arguments,
                    )
                    result = await self.registry.execute(call.name, call.arguments)
                    await self.history.append_message(
                        turn.conversation_id,
                        MessageRole.TOOL,
                        result,
                        tool_call_id=call.id,
                        tool_name=call.name,
                    )
                    unanswered.remove(call)
                    context.append({"role": "tool", "tool_call_id": call.id, "content": result})
                    yield ToolResult(tool_call_id=call.id, tool_name=call.name, result=result)

            log.warning("tool_round_limit_reached", rounds=MAX_TOOL_ROUNDS)
            CHAT_TURNS.labels(outcome="tool_limit").inc()
            yield ErrorEvent(message=TOOL_LIMIT_MESSAGE)
        except (asyncio.CancelledError, GeneratorExit):
            # Text streamed in the unfinished round is never persisted
            log.info("turn_cancelled", round=rounds)
            if unanswered:
                # Every persisted tool call needs a result or the history cannot be replayed
                await asyncio.shield(self._record_cancelled_calls(turn, unanswered))
            CHAT_TURNS.labels(outcome="cancelled").inc()
            raise
        finally:
            CHAT_MODEL_ROUNDS.observe(rounds)

    async def _record_cancelled_calls(
        self, turn: Turn, calls: Sequence[ToolCallRequest]
    ) -> None:
        for call in calls:
            await self.history.append_message(
                turn.conversation_id,
                MessageRole.TOOL,
                CANCELLED_TOOL_RESULT,
                tool_call_id=call.id,
                tool_name=call.name,
            )

    async def _open_stream(self, turn: Turn, context: list[dict[str, Any]]) -> Any:
        kwargs: dict[str, Any] = {
            "model": turn.model,
            "messages": context,
            "stream": True,
        }
        if turn.tools:
            kwargs["tools"] = turn.tools
        return await turn.client.chat.completions.create(**kwargs)

    def _schedule_title(self, turn: Turn) -> None:
        task = asyncio.create_task(self._update_title(turn))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _update_title(self, turn: Turn) -> None:
        try:
            title = await generate_title(
                turn.client,
                turn.model,
                turn.user_message,
                max_tokens=self.title_max_tokens,
            )
            if title:
                await self.history.update_title(turn.conversation_id, title)
                logger.info("title_generated", conversation_id=turn.conversation_id)
        except Exception:
            logger.warning(
                "title_generation_failed",
                conversation_id=turn.conversation_id,
                exc_info=True,
            )

    async def wait_for_background_tasks(self) -> None:
        """Wait for pending title generation (shutdown and tests)."""
        if self._background_tasks:
            await asyncio.gather(*self._background_tasks, return_exceptions=True)
