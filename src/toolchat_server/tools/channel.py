"""Client side of the tool-provider channel.

The API process holds one long-lived connection to the capability provider.
It is an MCP client session running over the provider's SSE endpoint: tool
discovery and tool invocation both travel over it, and every response is
routed back to this connection only.
"""

import logging
from contextlib import AsyncExitStack
from typing import Any

import anyio
from mcp import ClientSession
from mcp.client.sse import sse_client
from mcp.types import CallToolResult, Tool

logger = logging.getLogger(__name__)


class ProviderChannel:
    """A single MCP-over-SSE connection to the capability provider.

    Attributes:
        url: SSE endpoint of the provider (e.g. "http://localhost:3001/sse")
        timeout: Bound in seconds for the HTTP connect and the handshake
    """

    def __init__(self, url: str, timeout: float = 10.0) -> None:
        self.url = url
        self.timeout = timeout
        self._stack: AsyncExitStack | None = None
        self._session: ClientSession | None = None

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> None:
        """Open the SSE stream and run the MCP initialize handshake.

        The SSE client keeps a task group open until close(), so this must be
        called outside any cancel scope that ends before the connection does,
        and closed from the same task. The handshake itself is bounded by
        the channel timeout.

        Raises:
            Exception: If the provider cannot be reached or rejects the handshake
        """
        if self._session is not None:
            return

        stack = AsyncExitStack()
        try:
            read_stream, write_stream = await stack.enter_async_context(
                sse_client(self.url, timeout=self.timeout)
            )
            session = await stack.enter_async_context(
                ClientSession(read_stream, write_stream)
            )
            with anyio.fail_after(self.timeout):
                await session.initialize()
        except BaseException:
            await stack.aclose()
            raise

        self._stack = stack
        self._session = session
        logger.info(f"Connected to capability provider at {self.url}")

    def _require_session(self) -> ClientSession:
        if self._session is None:
            raise ConnectionError(f"Not connected to capability provider at {self.url}")
        return self._session

    async def list_tools(self) -> list[Tool]:
        """Ask the provider for its full tool descriptor set."""
        result = await self._require_session().list_tools()
        logger.debug(f"Provider listed {len(result.tools)} tools")
        return list(result.tools)

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> CallToolResult:
        """Submit one tool invocation and wait for its response."""
        logger.debug(f"Calling provider tool {name}")
        return await self._require_session().call_tool(name, arguments)

    async def close(self) -> None:
        """Close the connection and clean up resources."""
        stack, self._stack, self._session = self._stack, None, None
        if stack is not None:
            await stack.aclose()
            logger.info("Capability provider connection closed")
