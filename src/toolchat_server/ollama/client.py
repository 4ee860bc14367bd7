"""Inference client for the conversation engine.

Wraps ollama.AsyncClient. One instance is built in the application lifespan
and shared by every request; it is safe to use from concurrent tasks.
"""

import logging
from typing import Any, AsyncIterator

import ollama

logger = logging.getLogger(__name__)


def _chunk_to_dict(chunk: Any) -> dict[str, Any]:
    """Normalize a streamed chat chunk (pydantic model or mapping) to a dict."""
    if isinstance(chunk, dict):
        return chunk
    if hasattr(chunk, "model_dump"):
        return chunk.model_dump()
    return dict(vars(chunk))


class OllamaClient:
    """Streams chat completions, with tool schemas, from an Ollama server.

    Attributes:
        host: Base URL of the Ollama server, e.g. "http://localhost:11434"
    """

    def __init__(self, host: str, headers: dict[str, str] | None = None) -> None:
        """Create the client.

        Args:
            host: Base URL of the Ollama server
            headers: Extra HTTP headers sent with every request, e.g. an
                     Authorization header for a hosted endpoint
        """
        self.host = host
        self._client = ollama.AsyncClient(host=host, headers=headers)
        logger.info(f"Ollama client created for {host}")

    async def check_connection(self) -> bool:
        """Return True if the server answers a model listing request."""
        try:
            await self._client.list()
        except Exception as e:
            logger.warning(f"Ollama at {self.host} is unreachable: {e}")
            return False
        logger.debug(f"Ollama at {self.host} is reachable")
        return True

    async def chat_stream(
        self,
        model: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
        options: dict[str, Any] | None = None,
    ) -> AsyncIterator[dict[str, Any]]:
        """Run one streamed chat request.

        Args:
            model: Model name
            messages: Conversation in Ollama message format
            tools: Function-tool schemas the model may call
            options: Model parameters such as temperature

        Yields:
            Chunk dicts with "message" (role, content, tool_calls) and "done";
            the final chunk also carries the token counts.

        Raises:
            Exception: Whatever the Ollama library raises for the request
        """
        logger.debug(
            f"Chat request to {model}: {len(messages)} messages, {len(tools or [])} tools"
        )
        try:
            stream = await self._client.chat(
                model=model,
                messages=messages,
                tools=tools,
                stream=True,
                options=options,
            )
            async for chunk in stream:
                yield _chunk_to_dict(chunk)
        except Exception as e:
            logger.error(f"Chat request to {model} failed: {e}")
            raise

    async def close(self) -> None:
        """Release the client. The underlying HTTP pool is closed with the process."""
        logger.debug(f"Ollama client for {self.host} released")
