"""Pytest configuration and shared fixtures for toolchat-server tests.

This module provides common fixtures used across all test modules,
including test app creation, the mocked model and provider connections,
and async client setup.
"""

import asyncio
import socket
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
import uvicorn
from httpx import ASGITransport, AsyncClient
from mcp.types import CallToolResult, TextContent, Tool

from toolchat_server import create_app
from toolchat_server.config import ToolchatSettings
from toolchat_server.provider.app import create_provider_app

ADD_TWO_NUMBERS = Tool(
    name="addTwoNumbers",
    description="Add two numbers",
    inputSchema={
        "type": "object",
        "properties": {
            "a": {"type": "number", "description": "First number"},
            "b": {"type": "number", "description": "Second number"},
        },
        "required": ["a", "b"],
    },
)

GET_SYSTEM_INFO = Tool(
    name="getSystemInfo",
    description="Get information about the system",
    inputSchema={"type": "object", "properties": {}},
)


def reply_chunks(content: str = "", tool_calls: list | None = None) -> list[dict]:
    """Build the streamed chunks of one model reply.

    Args:
        content: Final text of the reply
        tool_calls: (name, arguments) pairs requested by the model
    """
    message: dict = {"role": "assistant", "content": content}
    if tool_calls:
        message["tool_calls"] = [
            {"function": {"name": name, "arguments": arguments}}
            for name, arguments in tool_calls
        ]
    return [
        {"model": "llama3.2:latest", "message": message, "done": False},
        {
            "model": "llama3.2:latest",
            "message": {"role": "assistant", "content": ""},
            "done": True,
            "eval_count": 12,
            "prompt_eval_count": 40,
        },
    ]


def scripted_stream(*replies: list[dict]) -> MagicMock:
    """A chat_stream replacement that plays back one reply per call."""
    pending = list(replies)

    async def _stream(**kwargs):
        for chunk in pending.pop(0):
            yield chunk

    return MagicMock(side_effect=_stream)


@pytest.fixture
def test_settings():
    """Create test settings.

    Returns:
        ToolchatSettings: Settings instance configured for testing.
    """
    return ToolchatSettings(
        host="127.0.0.1",
        port=3002,
        ollama_host="http://localhost:11434",
        provider_url="http://provider.test/sse",
        model="llama3.2:latest",
        model_timeout=5.0,
        tool_timeout=5.0,
        registry_timeout=5.0,
        max_tool_rounds=4,
        log_level="DEBUG",
        cors_origins=["*"],
    )


@pytest.fixture
def mock_ollama_client():
    """Mock OllamaClient so the lifespan never reaches a real Ollama server."""
    with patch("toolchat_server.app.OllamaClient") as mock_client_class:
        mock_instance = AsyncMock()
        mock_instance.host = "http://localhost:11434"
        mock_instance.check_connection.return_value = True
        mock_instance.chat_stream = scripted_stream()
        mock_instance.close = AsyncMock()

        mock_client_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture
def mock_provider_channel():
    """Mock ProviderChannel offering addTwoNumbers and getSystemInfo."""
    with patch("toolchat_server.app.ProviderChannel") as mock_channel_class:
        mock_instance = AsyncMock()
        mock_instance.connected = True
        mock_instance.list_tools.return_value = [ADD_TWO_NUMBERS, GET_SYSTEM_INFO]
        mock_instance.call_tool.return_value = CallToolResult(
            content=[TextContent(type="text", text="The sum of 2 and 3 is 5")]
        )

        mock_channel_class.return_value = mock_instance

        yield mock_instance


@pytest.fixture
def test_app(test_settings):
    """Create a FastAPI test application instance.

    Args:
        test_settings: Test settings fixture.

    Returns:
        FastAPI: Configured test application.
    """
    return create_app(settings=test_settings)


@pytest_asyncio.fixture
async def async_client(test_app, mock_ollama_client, mock_provider_channel):
    """Create an async HTTP client for testing FastAPI endpoints.

    Args:
        test_app: Test application fixture.
        mock_ollama_client: Mocked model client used by the lifespan.
        mock_provider_channel: Mocked provider channel used by the lifespan.

    Yields:
        AsyncClient: Async HTTP client for making test requests.
    """
    # Trigger the lifespan startup manually for tests
    async with test_app.router.lifespan_context(test_app):
        transport = ASGITransport(app=test_app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            yield client


@pytest.fixture
def model_reply():
    """Factory for the streamed chunks of one model reply."""
    return reply_chunks


@pytest.fixture
def model_stream():
    """Factory for a chat_stream replacement playing back scripted replies."""
    return scripted_stream


@pytest.fixture
def script_model(mock_ollama_client):
    """Script the replies the mocked model gives, one per inference round."""

    def _script(*replies: list[dict]) -> MagicMock:
        mock_ollama_client.chat_stream = scripted_stream(*replies)
        return mock_ollama_client.chat_stream

    return _script


def _free_port() -> int:
    with socket.socket() as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest_asyncio.fixture
async def live_provider(test_settings):
    """Serve the capability provider with its built-in tools on a local port.

    Clients opened against it must be closed inside the test, before the
    server is stopped.

    Yields:
        str: Base URL of the running provider, e.g. "http://127.0.0.1:53211"
    """
    port = _free_port()
    config = uvicorn.Config(
        create_provider_app(settings=test_settings),
        host="127.0.0.1",
        port=port,
        log_level="warning",
        lifespan="off",
        timeout_graceful_shutdown=1,
    )
    server = uvicorn.Server(config)
    task = asyncio.create_task(server.serve())

    while not server.started:
        if task.done():
            task.result()
        await asyncio.sleep(0.01)

    yield f"http://127.0.0.1:{port}"

    server.should_exit = True
    await task
