"""Arithmetic tools."""

from pydantic import BaseModel, Field

from toolchat_server.provider.server import CapabilityServer, ToolEnvelope, text_content


class AddTwoNumbersArgs(BaseModel):
    a: float = Field(..., description="First number")
    b: float = Field(..., description="Second number")


def _format_number(value: float) -> str:
    return str(int(value)) if value.is_integer() else str(value)


def register(server: CapabilityServer) -> None:
    @server.tool("addTwoNumbers", "Add two numbers", AddTwoNumbersArgs)
    async def add_two_numbers(args: AddTwoNumbersArgs) -> ToolEnvelope:
        total = args.a + args.b
        return text_content(
            f"The sum of {_format_number(args.a)} and {_format_number(args.b)} "
            f"is {_format_number(total)}"
        )
