"""Conversation turn engine.

Drives one user message through the model/tool loop:

    AwaitingModel -> {ToolRequested -> AwaitingModel} -> Done

Each round sends the whole history plus the full tool schema set to the
model. A tool call is dispatched and its result fed back as the next turn;
final text ends the loop. All turns produced while handling a message are
staged and committed to the session store in one atomic append only when
the loop finishes, so a failed attempt leaves the history untouched.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any

from toolchat_server.errors import (
    EmptyModelResponse,
    ModelFailure,
    ModelTimeout,
    ToolLoopExceeded,
)
from toolchat_server.ollama import ModelReply, OllamaClient
from toolchat_server.sessions import SessionStore, ToolCallPart, Turn
from toolchat_server.tools import ToolDispatchBridge, ToolRegistry

logger = logging.getLogger(__name__)


@dataclass
class ToolCallRecord:
    """A tool invocation made while answering a message."""

    name: str
    args: Any

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "args": self.args}


@dataclass
class ConversationResult:
    """Outcome of a successfully processed user message."""

    reply: str
    tool_calls: list[ToolCallRecord] = field(default_factory=list)
    history: list[Turn] = field(default_factory=list)


def turns_to_ollama_messages(turns: list[Turn]) -> list[dict[str, Any]]:
    """Convert session turns to Ollama API message format.

    Model turns map to the "assistant" role. A model turn holding a tool call
    keeps the structured call next to its text note so it can be replayed.

    Args:
        turns: Turns in history order

    Returns:
        List of message dicts: [{"role": "...", "content": "..."}, ...]
    """
    messages = []

    for turn in turns:
        message: dict[str, Any] = {
            "role": "assistant" if turn.role == "model" else "user",
            "content": turn.text,
        }

        tool_calls = [
            {"function": {"name": part.name, "arguments": dict(part.args)}}
            for part in turn.parts
            if isinstance(part, ToolCallPart)
        ]
        if tool_calls:
            message["tool_calls"] = tool_calls

        messages.append(message)

    return messages


class ConversationEngine:
    """Runs the model/tool loop for messages sent to a session.

    Messages sent to the same session are processed one after another;
    messages for different sessions run concurrently.
    """

    def __init__(
        self,
        store: SessionStore,
        ollama_client: OllamaClient,
        bridge: ToolDispatchBridge,
        registry: ToolRegistry,
        model: str,
        max_tool_rounds: int = 10,
        model_timeout: float = 120.0,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Session store holding the committed histories
            ollama_client: Client used for model inference
            bridge: Bridge used to dispatch tool calls
            registry: Tool registry snapshot offered to the model
            model: Model name passed to the inference call
            max_tool_rounds: Upper bound on inference rounds per message
            model_timeout: Upper bound in seconds for one inference call
        """
        self.store = store
        self.ollama_client = ollama_client
        self.bridge = bridge
        self.registry = registry
        self.model = model
        self.max_tool_rounds = max_tool_rounds
        self.model_timeout = model_timeout
        self._tool_schemas = registry.model_schemas()
        self._turn_locks: dict[str, asyncio.Lock] = {}

    def _turn_lock(self, session_id: str) -> asyncio.Lock:
        lock = self._turn_locks.get(session_id)
        if lock is None:
            lock = self._turn_locks[session_id] = asyncio.Lock()
        return lock

    async def _ask_model(self, turns: list[Turn]) -> ModelReply:
        """Run one inference round and collect the streamed reply.

        Raises:
            ModelTimeout: If the call exceeds the timeout
            ModelFailure: If the call raises
            EmptyModelResponse: If the reply has neither a tool call nor text
        """
        messages = turns_to_ollama_messages(turns)

        async def _collect() -> ModelReply:
            chunks = []
            async for chunk in self.ollama_client.chat_stream(
                model=self.model,
                messages=messages,
                tools=self._tool_schemas or None,
            ):
                chunks.append(chunk)
            return ModelReply.from_chunks(chunks)

        try:
            reply = await asyncio.wait_for(_collect(), timeout=self.model_timeout)
        except asyncio.TimeoutError as e:
            raise ModelTimeout(
                f"Model did not answer within {self.model_timeout}s"
            ) from e
        except Exception as e:
            raise ModelFailure(f"Model call failed: {e}") from e

        if reply.is_empty:
            raise EmptyModelResponse("Model returned neither a tool call nor text")
        return reply

    async def send_message(self, session_id: str, message: str) -> ConversationResult:
        """Process a user message and return the model's final answer.

        Args:
            session_id: The session to converse in
            message: The user's message text

        Returns:
            ConversationResult with the final text, the tool calls made while
            producing it, and the updated history

        Raises:
            SessionNotFound: If the session doesn't exist
            ProcessingError: If the model, the dispatch bridge or the loop
                             bound fails; nothing is committed in that case
        """
        # Fail fast for unknown sessions before taking a lock for them
        self.store.get_session(session_id)

        async with self._turn_lock(session_id):
            history = await self.store.get_history(session_id)
            staged = [Turn.user_text(message)]
            tool_calls: list[ToolCallRecord] = []

            for round_number in range(1, self.max_tool_rounds + 1):
                reply = await self._ask_model(history + staged)
                tool_call = reply.tool_call

                if tool_call is None:
                    staged.append(Turn.model_text(reply.content))
                    await self.store.append_turns(session_id, staged)
                    logger.info(
                        f"Session {session_id} answered after {round_number} round(s) "
                        f"with {len(tool_calls)} tool call(s)"
                    )
                    return ConversationResult(
                        reply=reply.content,
                        tool_calls=tool_calls,
                        history=await self.store.get_history(session_id),
                    )

                if len(reply.tool_calls) > 1:
                    logger.warning(
                        f"Model requested {len(reply.tool_calls)} tool calls; "
                        f"only {tool_call.name} is handled this round"
                    )

                logger.info(f"Calling tool: {tool_call.name}")
                tool_calls.append(
                    ToolCallRecord(name=tool_call.name, args=tool_call.arguments)
                )
                args = tool_call.arguments if isinstance(tool_call.arguments, dict) else {}
                staged.append(Turn.tool_call(tool_call.name, args))

                result = await self.bridge.invoke(tool_call.name, tool_call.arguments)
                staged.append(Turn.tool_result(tool_call.name, result))

            raise ToolLoopExceeded(
                f"Model kept requesting tools after {self.max_tool_rounds} rounds"
            )
