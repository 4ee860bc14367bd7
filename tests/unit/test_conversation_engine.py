"""Unit tests for the conversation turn engine.

Tests the model/tool loop, message conversion, and the guarantee that a
failed attempt leaves the session history unchanged.
"""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from toolchat_server.errors import (
    EmptyModelResponse,
    ModelFailure,
    ModelTimeout,
    SessionNotFound,
    ToolLoopExceeded,
    UnknownTool,
)
from toolchat_server.services import ConversationEngine, turns_to_ollama_messages
from toolchat_server.sessions import SessionStore, Turn
from toolchat_server.tools import ToolDescriptor, ToolRegistry


@pytest.fixture
def registry() -> ToolRegistry:
    return ToolRegistry(
        [
            ToolDescriptor.from_remote(
                {
                    "name": "addTwoNumbers",
                    "description": "Add two numbers",
                    "inputSchema": {
                        "type": "object",
                        "properties": {"a": {"type": "number"}, "b": {"type": "number"}},
                        "required": ["a", "b"],
                    },
                }
            )
        ]
    )


@pytest.fixture
def store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def bridge():
    bridge = AsyncMock()
    bridge.invoke.return_value = "The sum of 2 and 3 is 5"
    return bridge


@pytest.fixture
def ollama_client():
    return MagicMock()


@pytest.fixture
def engine(store, ollama_client, bridge, registry) -> ConversationEngine:
    return ConversationEngine(
        store=store,
        ollama_client=ollama_client,
        bridge=bridge,
        registry=registry,
        model="llama3.2:latest",
        max_tool_rounds=3,
        model_timeout=1.0,
    )


class TestMessageConversion:
    """Tests for converting turns to Ollama format."""

    def test_convert_empty_list(self):
        assert turns_to_ollama_messages([]) == []

    def test_convert_text_turns(self):
        result = turns_to_ollama_messages(
            [Turn.user_text("Hello!"), Turn.model_text("Hi there!")]
        )

        assert result == [
            {"role": "user", "content": "Hello!"},
            {"role": "assistant", "content": "Hi there!"},
        ]

    def test_convert_tool_call_turn(self):
        result = turns_to_ollama_messages([Turn.tool_call("addTwoNumbers", {"a": 2, "b": 3})])

        assert result == [
            {
                "role": "assistant",
                "content": "Calling tool: addTwoNumbers",
                "tool_calls": [
                    {"function": {"name": "addTwoNumbers", "arguments": {"a": 2, "b": 3}}}
                ],
            }
        ]

    def test_convert_tool_result_turn(self):
        result = turns_to_ollama_messages(
            [Turn.tool_result("addTwoNumbers", "The sum of 2 and 3 is 5")]
        )

        assert result == [
            {"role": "user", "content": "Tool result: The sum of 2 and 3 is 5"}
        ]


@pytest.mark.asyncio
async def test_direct_answer(engine, store, ollama_client, bridge, model_stream, model_reply):
    """Test a reply without tool calls ends the loop after one round."""
    session = store.create_session()
    ollama_client.chat_stream = model_stream(model_reply("Hello!"))

    result = await engine.send_message(session.session_id, "Hi")

    assert result.reply == "Hello!"
    assert result.tool_calls == []
    assert [turn.role for turn in result.history] == ["user", "model"]
    bridge.invoke.assert_not_awaited()


@pytest.mark.asyncio
async def test_tool_call_then_answer(
    engine, store, ollama_client, bridge, registry, model_stream, model_reply
):
    """Test the add-two-numbers exchange produces four turns and one call."""
    session = store.create_session()
    ollama_client.chat_stream = model_stream(
        model_reply(tool_calls=[("addTwoNumbers", {"a": 2, "b": 3})]),
        model_reply("2 plus 3 is 5."),
    )

    result = await engine.send_message(session.session_id, "add 2 and 3")

    assert "5" in result.reply
    assert [call.to_dict() for call in result.tool_calls] == [
        {"name": "addTwoNumbers", "args": {"a": 2, "b": 3}}
    ]
    bridge.invoke.assert_awaited_once_with("addTwoNumbers", {"a": 2, "b": 3})

    history = await store.get_history(session.session_id)
    assert history == result.history
    assert [turn.role for turn in history] == ["user", "model", "user", "model"]
    assert history[0].text == "add 2 and 3"
    assert history[1].text == "Calling tool: addTwoNumbers"
    assert history[2].text == "Tool result: The sum of 2 and 3 is 5"
    assert history[3].text == "2 plus 3 is 5."

    # Both rounds offer the full tool set; the second one sees the tool result
    first_call, second_call = ollama_client.chat_stream.call_args_list
    assert first_call.kwargs["tools"] == registry.model_schemas()
    assert first_call.kwargs["model"] == "llama3.2:latest"
    assert len(first_call.kwargs["messages"]) == 1
    assert second_call.kwargs["messages"][-1] == {
        "role": "user",
        "content": "Tool result: The sum of 2 and 3 is 5",
    }


@pytest.mark.asyncio
async def test_history_accumulates_across_messages(
    engine, store, ollama_client, model_stream, model_reply
):
    """Test that later messages see the committed history of earlier ones."""
    session = store.create_session()
    ollama_client.chat_stream = model_stream(model_reply("first"), model_reply("second"))

    await engine.send_message(session.session_id, "one")
    result = await engine.send_message(session.session_id, "two")

    assert [turn.text for turn in result.history] == ["one", "first", "two", "second"]
    assert len(ollama_client.chat_stream.call_args_list[1].kwargs["messages"]) == 3


@pytest.mark.asyncio
async def test_only_first_tool_call_is_handled(
    engine, store, ollama_client, bridge, model_stream, model_reply
):
    """Test that extra tool calls in one reply are ignored."""
    session = store.create_session()
    ollama_client.chat_stream = model_stream(
        model_reply(
            tool_calls=[
                ("addTwoNumbers", {"a": 2, "b": 3}),
                ("addTwoNumbers", {"a": 4, "b": 5}),
            ]
        ),
        model_reply("5"),
    )

    result = await engine.send_message(session.session_id, "add")

    assert len(result.tool_calls) == 1
    bridge.invoke.assert_awaited_once_with("addTwoNumbers", {"a": 2, "b": 3})


@pytest.mark.asyncio
async def test_round_cap(engine, store, ollama_client, bridge, model_stream, model_reply):
    """Test that a model that never stops calling tools is cut off."""
    session = store.create_session()
    ollama_client.chat_stream = model_stream(
        *[model_reply(tool_calls=[("addTwoNumbers", {"a": 2, "b": 3})]) for _ in range(3)]
    )

    with pytest.raises(ToolLoopExceeded):
        await engine.send_message(session.session_id, "loop forever")

    assert bridge.invoke.await_count == 3
    assert await store.get_history(session.session_id) == []


@pytest.mark.asyncio
async def test_empty_model_response(engine, store, ollama_client, model_stream, model_reply):
    """Test a reply with neither text nor tool call."""
    session = store.create_session()
    ollama_client.chat_stream = model_stream(model_reply("   "))

    with pytest.raises(EmptyModelResponse):
        await engine.send_message(session.session_id, "Hi")

    assert await store.get_history(session.session_id) == []


@pytest.mark.asyncio
async def test_model_failure(engine, store, ollama_client):
    """Test that an inference error aborts without touching history."""
    session = store.create_session()

    async def failing_stream(**kwargs):
        raise RuntimeError("model crashed")
        yield  # pragma: no cover

    ollama_client.chat_stream = MagicMock(side_effect=failing_stream)

    with pytest.raises(ModelFailure, match="model crashed"):
        await engine.send_message(session.session_id, "Hi")

    assert await store.get_history(session.session_id) == []


@pytest.mark.asyncio
async def test_model_timeout(engine, store, ollama_client):
    """Test that a stalled inference call raises ModelTimeout."""
    session = store.create_session()
    engine.model_timeout = 0.05

    async def stalled_stream(**kwargs):
        await asyncio.sleep(1.0)
        yield {"message": {"content": "too late"}, "done": True}

    ollama_client.chat_stream = MagicMock(side_effect=stalled_stream)

    with pytest.raises(ModelTimeout):
        await engine.send_message(session.session_id, "Hi")


@pytest.mark.asyncio
async def test_dispatch_error_leaves_history_unchanged(
    engine, store, ollama_client, bridge, model_stream, model_reply
):
    """Test that a failed tool call commits nothing, including the user turn."""
    session = store.create_session()
    await store.append_turns(
        session.session_id, [Turn.user_text("earlier"), Turn.model_text("answer")]
    )
    bridge.invoke.side_effect = UnknownTool("deleteEverything")
    ollama_client.chat_stream = model_stream(
        model_reply(tool_calls=[("deleteEverything", {})])
    )

    with pytest.raises(UnknownTool):
        await engine.send_message(session.session_id, "delete it all")

    history = await store.get_history(session.session_id)
    assert [turn.text for turn in history] == ["earlier", "answer"]


@pytest.mark.asyncio
async def test_unknown_session(engine, ollama_client):
    """Test that an unknown session fails before the model is called."""
    ollama_client.chat_stream = MagicMock()

    with pytest.raises(SessionNotFound):
        await engine.send_message("missing", "Hi")

    ollama_client.chat_stream.assert_not_called()


@pytest.mark.asyncio
async def test_messages_to_one_session_are_serialized(
    engine, store, ollama_client, model_reply
):
    """Test that concurrent messages to a session don't interleave their turns."""
    session = store.create_session()

    async def slow_stream(**kwargs):
        await asyncio.sleep(0.01)
        for chunk in model_reply(f"echo: {kwargs['messages'][-1]['content']}"):
            yield chunk

    ollama_client.chat_stream = MagicMock(side_effect=slow_stream)

    await asyncio.gather(
        engine.send_message(session.session_id, "a"),
        engine.send_message(session.session_id, "b"),
    )

    texts = [turn.text for turn in await store.get_history(session.session_id)]
    assert len(texts) == 4
    for user_text, model_text in zip(texts[0::2], texts[1::2]):
        assert model_text == f"echo: {user_text}"
