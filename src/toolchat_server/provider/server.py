"""Capability server: tool handler registration on top of the MCP SDK.

Handlers are registered with a pydantic model describing their arguments.
Every handler returns the same envelope, ``{"content": [{"type": "text",
"text": ...}]}``, and any exception raised inside a handler is turned into an
envelope whose text starts with ``Error``. Problems the handler never sees
(unknown tool, arguments that fail validation) are raised as ToolCallError,
which the SDK reports to the client as an error result.

The MCP protocol itself (JSON-RPC framing, initialize negotiation, ping) is
handled by ``mcp.server.lowlevel.Server``.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

import mcp.types as types
from anyio.streams.memory import MemoryObjectReceiveStream, MemoryObjectSendStream
from mcp.server.lowlevel import Server
from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

HANDLER_ERROR_PREFIX = "Error"

ToolEnvelope = dict[str, list[dict[str, str]]]
ToolHandler = Callable[[Any], Awaitable[ToolEnvelope]]


def text_content(text: str) -> ToolEnvelope:
    """Wrap text in the uniform tool result envelope."""
    return {"content": [{"type": "text", "text": text}]}


def compact_schema(model: type[BaseModel]) -> dict[str, Any]:
    """Build a ``{type, properties, required}`` schema from a pydantic model.

    Titles are dropped and optional fields (``X | None``) are collapsed to
    their non-null type so the schema stays in the plain shape models expect.
    """
    schema = model.model_json_schema()
    properties: dict[str, Any] = {}

    for name, prop in schema.get("properties", {}).items():
        prop = {key: value for key, value in prop.items() if key != "title"}
        any_of = prop.pop("anyOf", None)
        if any_of:
            non_null = [option for option in any_of if option.get("type") != "null"]
            if len(non_null) == 1:
                prop.update(non_null[0])
            else:
                prop["anyOf"] = any_of
        if prop.get("default", ...) is None:
            del prop["default"]
        properties[name] = prop

    return {
        "type": "object",
        "properties": properties,
        "required": list(schema.get("required", [])),
    }


class ToolCallError(Exception):
    """A tool call rejected before its handler ran."""


@dataclass
class RegisteredTool:
    """A tool handler together with its argument model."""

    name: str
    description: str
    arguments: type[BaseModel]
    handler: ToolHandler

    def descriptor(self) -> types.Tool:
        return types.Tool(
            name=self.name,
            description=self.description,
            inputSchema=compact_schema(self.arguments),
        )


class EmptyArguments(BaseModel):
    """Argument model for tools that take no arguments."""


class CapabilityServer:
    """Registry of tool handlers served through an MCP server.

    Attributes:
        name: Server name reported during the initialize handshake
        version: Server version reported during the initialize handshake
        mcp: The SDK server the handlers are bound to
    """

    def __init__(self, name: str, version: str) -> None:
        self.name = name
        self.version = version
        self._tools: dict[str, RegisteredTool] = {}

        self.mcp = Server(name, version=version)
        self.mcp.list_tools()(self.list_tools)
        self.mcp.call_tool()(self._call_tool_content)

    @property
    def tool_names(self) -> list[str]:
        return list(self._tools)

    def tool(
        self,
        name: str,
        description: str,
        arguments: type[BaseModel] = EmptyArguments,
    ) -> Callable[[ToolHandler], ToolHandler]:
        """Decorator registering an async tool handler.

        Args:
            name: Tool name, unique within this server
            description: Human-readable description for the model
            arguments: Pydantic model the raw arguments are validated into

        Raises:
            ValueError: If a tool with the same name is already registered
        """

        def decorator(handler: ToolHandler) -> ToolHandler:
            if name in self._tools:
                raise ValueError(f"Tool {name} is already registered")
            self._tools[name] = RegisteredTool(
                name=name,
                description=description,
                arguments=arguments,
                handler=handler,
            )
            logger.debug(f"Registered tool {name}")
            return handler

        return decorator

    async def list_tools(self) -> list[types.Tool]:
        """Descriptors of all registered tools in registration order."""
        return [tool.descriptor() for tool in self._tools.values()]

    async def call_tool(self, name: str, arguments: dict[str, Any] | None) -> ToolEnvelope:
        """Validate arguments and run a tool handler.

        Raises:
            ToolCallError: If the tool is unknown or the arguments are invalid
        """
        tool = self._tools.get(name)
        if tool is None:
            raise ToolCallError(f"Unknown tool: {name}")

        try:
            args = tool.arguments.model_validate(arguments or {})
        except ValidationError as e:
            raise ToolCallError(f"Invalid arguments for tool {name}: {e}") from e

        try:
            return await tool.handler(args)
        except Exception as e:
            logger.exception(f"Tool {name} failed")
            return text_content(f"{HANDLER_ERROR_PREFIX} executing {name}: {e}")

    async def _call_tool_content(
        self, name: str, arguments: dict[str, Any]
    ) -> list[types.TextContent]:
        envelope = await self.call_tool(name, arguments)
        return [
            types.TextContent(type="text", text=block["text"])
            for block in envelope["content"]
        ]

    async def run(
        self,
        read_stream: MemoryObjectReceiveStream[Any],
        write_stream: MemoryObjectSendStream[Any],
    ) -> None:
        """Serve one client connection until its streams close."""
        await self.mcp.run(
            read_stream, write_stream, self.mcp.create_initialization_options()
        )
