"""Integration tests for the health check endpoint."""

import pytest


@pytest.mark.asyncio
async def test_health_check_returns_ok(async_client):
    """Test that health check returns status ok."""
    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == "0.1.0"


@pytest.mark.asyncio
async def test_health_check_reports_dependencies(async_client):
    """Test that health reports the model server, provider and tool count."""
    response = await async_client.get("/api/v1/health")

    data = response.json()
    assert data["ollama_connected"] is True
    assert data["ollama_host"] == "http://localhost:11434"
    assert data["provider_connected"] is True
    assert data["tool_count"] == 2


@pytest.mark.asyncio
async def test_health_check_with_ollama_disconnected(async_client, mock_ollama_client):
    """Test health check when Ollama stops answering."""
    mock_ollama_client.check_connection.return_value = False

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["ollama_connected"] is False


@pytest.mark.asyncio
async def test_health_check_when_ollama_check_raises(async_client, mock_ollama_client):
    """Test that a failing connectivity check is reported, not raised."""
    mock_ollama_client.check_connection.side_effect = RuntimeError("boom")

    response = await async_client.get("/api/v1/health")

    assert response.status_code == 200
    assert response.json()["ollama_connected"] is False


@pytest.mark.asyncio
async def test_health_check_content_type(async_client):
    """Test that health check returns JSON content type."""
    response = await async_client.get("/api/v1/health")

    assert "application/json" in response.headers["content-type"]
