"""Tool dispatch bridge.

Forwards a model-issued tool invocation to the capability provider and
returns the textual result. The bridge does no business logic: it checks the
invocation against the registry snapshot, forwards it, and translates
failures into the dispatch error types.
"""

import asyncio
import logging
from collections.abc import Mapping
from typing import Any, Protocol

from toolchat_server.errors import (
    DispatchFailure,
    InvalidToolArguments,
    ToolTimeout,
    UnknownTool,
)
from toolchat_server.tools.registry import ToolRegistry

logger = logging.getLogger(__name__)


class ToolCaller(Protocol):
    """What the bridge needs from a provider connection."""

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> Any: ...


def result_text(result: Any) -> str:
    """Extract the text of a tool result envelope.

    Text content blocks are joined with newlines; non-text blocks are skipped.
    """
    if isinstance(result, Mapping):
        blocks = result.get("content") or []
    else:
        blocks = getattr(result, "content", None) or []

    texts = []
    for block in blocks:
        if isinstance(block, Mapping):
            block_type, text = block.get("type"), block.get("text")
        else:
            block_type, text = getattr(block, "type", None), getattr(block, "text", None)
        if block_type == "text" and text is not None:
            texts.append(text)
    return "\n".join(texts)


def is_error_result(result: Any) -> bool:
    """True if the provider answered with an error result instead of output."""
    if isinstance(result, Mapping):
        return bool(result.get("isError"))
    return bool(getattr(result, "isError", False))


class ToolDispatchBridge:
    """Forwards tool invocations to the provider connection.

    Attributes:
        registry: The tool registry snapshot invocations are checked against
        timeout: Upper bound in seconds for a single tool call
    """

    def __init__(self, caller: ToolCaller, registry: ToolRegistry, timeout: float) -> None:
        self._caller = caller
        self.registry = registry
        self.timeout = timeout

    async def invoke(self, name: str, arguments: Any) -> str:
        """Invoke a tool by name and return its textual result.

        Args:
            name: Tool name as returned by the model
            arguments: Arguments as returned by the model

        Returns:
            str: The tool's text output

        Raises:
            UnknownTool: If the tool is not in the registry snapshot
            InvalidToolArguments: If arguments are not a mapping or miss a
                                  required property
            ToolTimeout: If the call exceeds the timeout
            DispatchFailure: If the provider rejects the call with an error
                             result or the channel is down
        """
        descriptor = self.registry.get(name)
        if descriptor is None:
            raise UnknownTool(name)

        if not isinstance(arguments, Mapping):
            raise InvalidToolArguments(
                f"Arguments for {name} must be an object, got {type(arguments).__name__}"
            )
        missing = [key for key in descriptor.required if key not in arguments]
        if missing:
            raise InvalidToolArguments(
                f"Missing required arguments for {name}: {', '.join(missing)}"
            )

        logger.info(f"Dispatching tool call: {name}")
        try:
            result = await asyncio.wait_for(
                self._caller.call_tool(name, dict(arguments)),
                timeout=self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.warning(f"Tool {name} timed out after {self.timeout}s")
            raise ToolTimeout(f"Tool {name} did not finish within {self.timeout}s") from e
        except Exception as e:
            logger.error(f"Tool {name} dispatch failed: {e}")
            raise DispatchFailure(f"Tool {name} could not be dispatched: {e}") from e

        text = result_text(result)
        if is_error_result(result):
            logger.error(f"Provider rejected tool {name}: {text}")
            raise DispatchFailure(f"Provider rejected tool {name}: {text}")
        logger.debug(f"Tool {name} returned {len(text)} characters")
        return text
