"""Integration tests for the tool registry endpoint and startup behaviour."""

from unittest.mock import AsyncMock, patch

import pytest
from mcp.types import Tool

from toolchat_server.errors import RegistryUnavailable


@pytest.mark.asyncio
async def test_list_tools(async_client):
    """Test that the registry snapshot is listed with translated schemas."""
    response = await async_client.get("/api/v1/tools")

    assert response.status_code == 200
    tools = response.json()["tools"]
    assert [tool["name"] for tool in tools] == ["addTwoNumbers", "getSystemInfo"]
    assert tools[0]["parameters"] == {
        "type": "object",
        "properties": {
            "a": {"type": "number", "description": "First number"},
            "b": {"type": "number", "description": "Second number"},
        },
        "required": ["a", "b"],
    }
    assert tools[1]["parameters"]["required"] == []


@pytest.mark.asyncio
async def test_lifespan_stores_shared_objects(async_client, test_app, test_settings):
    """Test that the lifespan wires the engine with the configured limits."""
    engine = test_app.state.conversation_engine

    assert engine.model == test_settings.model
    assert engine.max_tool_rounds == test_settings.max_tool_rounds
    assert engine.registry is test_app.state.tool_registry
    assert test_app.state.tool_dispatch.timeout == test_settings.tool_timeout


@pytest.mark.asyncio
async def test_lifespan_passes_provider_settings(test_app, test_settings, mock_ollama_client):
    """Test that the provider channel is built from settings."""
    channel = AsyncMock()
    channel.connected = True
    channel.list_tools.return_value = []

    with patch("toolchat_server.app.ProviderChannel", return_value=channel) as channel_class:
        async with test_app.router.lifespan_context(test_app):
            pass

    channel_class.assert_called_once_with(
        test_settings.provider_url, timeout=test_settings.registry_timeout
    )
    channel.close.assert_awaited_once()


@pytest.mark.asyncio
async def test_startup_fails_when_provider_unreachable(
    test_app, mock_ollama_client, mock_provider_channel
):
    """Test that the API refuses to start without a tool registry."""
    mock_provider_channel.list_tools.side_effect = ConnectionRefusedError("refused")

    with pytest.raises(RegistryUnavailable):
        async with test_app.router.lifespan_context(test_app):
            pytest.fail("application started without a tool registry")

    mock_provider_channel.close.assert_awaited_once()
    mock_ollama_client.close.assert_awaited_once()
    assert not hasattr(test_app.state, "conversation_engine")


@pytest.mark.asyncio
async def test_startup_fails_on_malformed_descriptors(
    test_app, mock_ollama_client, mock_provider_channel
):
    """Test that duplicate tool names abort startup."""
    duplicate = Tool(name="addTwoNumbers", inputSchema={"type": "object"})
    mock_provider_channel.list_tools.return_value = [duplicate, duplicate]

    with pytest.raises(RegistryUnavailable):
        async with test_app.router.lifespan_context(test_app):
            pass
