"""Liveness and dependency status of the session API."""

import logging

from fastapi import APIRouter, Request

from toolchat_server import __version__
from toolchat_server.models.health import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["health"])


async def _ollama_status(request: Request) -> tuple[bool | None, str | None]:
    client = getattr(request.app.state, "ollama_client", None)
    if client is None:
        return None, None
    try:
        return await client.check_connection(), client.host
    except Exception as e:
        logger.warning(f"Ollama status check raised: {e}")
        return False, client.host


@router.get("/health", response_model=HealthResponse)
async def health_check(request: Request) -> HealthResponse:
    """Report the server version and the state of its collaborators.

    The API is always "ok" once it serves requests; the model server and the
    capability provider are reported separately so clients can tell which
    side is down.
    """
    ollama_connected, ollama_host = await _ollama_status(request)

    channel = getattr(request.app.state, "provider_channel", None)
    registry = getattr(request.app.state, "tool_registry", None)

    return HealthResponse(
        status="ok",
        version=__version__,
        ollama_connected=ollama_connected,
        ollama_host=ollama_host,
        provider_connected=channel.connected if channel is not None else None,
        tool_count=len(registry) if registry is not None else 0,
    )
