"""SSE channel endpoints of the capability provider.

GET /sse opens a stream whose first event names the URL to POST requests to.
POST /messages/?session_id=... submits one JSON-RPC message; the response is
pushed on the stream that owns that session ID. Routing between the two, and
dropping a session's entry when its stream closes, is done by the SDK's
SseServerTransport.
"""

import logging

from fastapi import FastAPI, Request, Response
from mcp.server.sse import SseServerTransport

from toolchat_server.provider.server import CapabilityServer

logger = logging.getLogger(__name__)

SSE_PATH = "/sse"
MESSAGES_PATH = "/messages/"


def mount_channel(app: FastAPI, server: CapabilityServer) -> SseServerTransport:
    """Register the SSE stream and message endpoints on the provider app.

    Args:
        app: The provider FastAPI application
        server: Capability server every connection is served by

    Returns:
        SseServerTransport: The transport owning the per-session routing table
    """
    transport = SseServerTransport(MESSAGES_PATH)

    async def open_stream(request: Request) -> Response:
        client = request.client.host if request.client else "unknown"
        logger.info(f"Opening provider stream for {client}")
        async with transport.connect_sse(
            request.scope, request.receive, request._send  # type: ignore[attr-defined]
        ) as (read_stream, write_stream):
            await server.run(read_stream, write_stream)
        logger.info(f"Provider stream for {client} closed")
        return Response()

    app.add_route(SSE_PATH, open_stream, methods=["GET"])
    app.mount(MESSAGES_PATH, app=transport.handle_post_message)
    return transport
