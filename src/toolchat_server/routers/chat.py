"""Chat API endpoint.

This module provides the endpoint that sends a user message to a session
and runs the model/tool loop until the model gives a final answer.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends

from toolchat_server.dependencies import get_conversation_engine
from toolchat_server.errors import ProcessingError, SessionNotFound
from toolchat_server.models.chat import ChatRequest, ChatResponse, ToolCallResponse
from toolchat_server.models.sessions import TurnResponse
from toolchat_server.routers.errors import bad_request, not_found, server_error
from toolchat_server.services import ConversationEngine

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/chat", tags=["chat"])

PROCESSING_FAILED_MESSAGE = "Failed to process message"


@router.post("", response_model=ChatResponse)
async def send_message(
    request_body: ChatRequest,
    engine: Annotated[ConversationEngine, Depends(get_conversation_engine)],
) -> ChatResponse:
    """Send a message to a session and receive the model's final answer.

    The model may call tools any number of times (up to the configured round
    cap) before answering; every call made is listed in the response.

    Args:
        request_body: Session ID and message text
        engine: Injected ConversationEngine

    Returns:
        ChatResponse with the reply, the tool calls and the updated history

    Raises:
        HTTPException: 400 if a field is missing, 404 if session not found,
                       500 if processing fails
    """
    session_id = request_body.session_id
    message = request_body.message

    if not session_id or not message:
        raise bad_request(
            "validation_error",
            "Session ID and message are required",
            missing=[
                field
                for field, value in (("session_id", session_id), ("message", message))
                if not value
            ],
        )

    try:
        result = await engine.send_message(session_id, message)
    except SessionNotFound as e:
        raise not_found(e.code, str(e), session_id=session_id)
    except ProcessingError as e:
        logger.error(f"Error processing message for session {session_id}: {e}")
        raise server_error("processing_failed", PROCESSING_FAILED_MESSAGE, reason=e.code)
    except Exception:
        logger.exception(f"Unexpected error processing message for session {session_id}")
        raise server_error("processing_failed", PROCESSING_FAILED_MESSAGE)

    return ChatResponse(
        session_id=session_id,
        reply=result.reply,
        tool_calls=[
            ToolCallResponse(name=call.name, args=call.args) for call in result.tool_calls
        ],
        history=[TurnResponse.model_validate(turn.to_dict()) for turn in result.history],
    )
