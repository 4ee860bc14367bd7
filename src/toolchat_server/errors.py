"""Error taxonomy for toolchat-server.

Every error raised across a component boundary derives from ToolchatError and
carries a stable ``code`` that the routers put into structured error
responses. Handler-level failures inside tool handlers never appear here:
they are rendered as text by the capability server.
"""


class ToolchatError(Exception):
    """Base class for all toolchat-server errors."""

    code = "internal_error"


class RegistryUnavailable(ToolchatError):
    """The capability provider could not be reached or sent bad descriptors.

    Raised at startup only. The API process must not serve traffic after it.
    """

    code = "registry_unavailable"


class SessionNotFound(ToolchatError, LookupError):
    """No session exists with the given identifier."""

    code = "session_not_found"

    def __init__(self, session_id: str) -> None:
        super().__init__(f"Session {session_id} not found")
        self.session_id = session_id


class InvalidRequestError(ToolchatError, ValueError):
    """A client request is missing required fields."""

    code = "validation_error"


class ProcessingError(ToolchatError):
    """Base class for failures that abort a message-processing attempt."""

    code = "processing_failed"


class EmptyModelResponse(ProcessingError):
    """The model returned neither a tool call nor any text."""

    code = "empty_model_response"


class ModelTimeout(ProcessingError):
    """The inference call did not finish within the configured timeout."""

    code = "model_timeout"


class ModelFailure(ProcessingError):
    """The inference call raised."""

    code = "model_failure"


class ToolLoopExceeded(ProcessingError):
    """The model kept requesting tools past the configured round cap."""

    code = "tool_loop_exceeded"


class DispatchError(ProcessingError):
    """Base class for errors at the tool dispatch boundary."""

    code = "dispatch_error"


class UnknownTool(DispatchError):
    """The requested tool is not part of the registry snapshot."""

    code = "unknown_tool"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name


class DispatchFailure(DispatchError):
    """The remote handler could not be reached or rejected the request."""

    code = "dispatch_failure"


class InvalidToolArguments(DispatchFailure):
    """The model produced arguments that do not fit the tool's schema."""

    code = "invalid_tool_arguments"


class ToolTimeout(DispatchError):
    """The tool call did not finish within the configured timeout."""

    code = "tool_timeout"
