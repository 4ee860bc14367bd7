"""Sessions router for chat session operations.

This module provides REST API endpoints for:
- Creating new sessions
- Listing all sessions
- Retrieving a session's turn history
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from toolchat_server.dependencies import get_session_store
from toolchat_server.errors import SessionNotFound
from toolchat_server.models.sessions import (
    SessionHistoryResponse,
    SessionListResponse,
    SessionResponse,
    TurnResponse,
)
from toolchat_server.routers.errors import not_found
from toolchat_server.sessions import SessionStore

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/sessions", tags=["sessions"])


@router.post(
    "",
    response_model=SessionResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new session",
)
async def create_session(
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionResponse:
    """Create a new, empty chat session.

    Args:
        store: Injected SessionStore

    Returns:
        Created session metadata
    """
    session = store.create_session()
    return SessionResponse(
        session_id=session.session_id,
        created_at=session.created_at,
        turn_count=session.turn_count,
    )


@router.get(
    "",
    response_model=SessionListResponse,
    summary="List all sessions",
)
async def list_sessions(
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionListResponse:
    """List all chat sessions in creation order.

    Args:
        store: Injected SessionStore

    Returns:
        Identifier, creation time and turn count of every session
    """
    return SessionListResponse(
        sessions=[
            SessionResponse(
                session_id=summary.session_id,
                created_at=summary.created_at,
                turn_count=summary.turn_count,
            )
            for summary in store.list_sessions()
        ]
    )


@router.get(
    "/{session_id}",
    response_model=SessionHistoryResponse,
    summary="Get session history",
)
async def get_session_history(
    session_id: str,
    store: Annotated[SessionStore, Depends(get_session_store)],
) -> SessionHistoryResponse:
    """Get a session with its full ordered turn history.

    Args:
        session_id: The session ID
        store: Injected SessionStore

    Returns:
        Session metadata and history

    Raises:
        HTTPException: 404 if session not found
    """
    try:
        session = store.get_session(session_id)
        history = await store.get_history(session_id)
    except SessionNotFound as e:
        logger.info(f"History requested for unknown session {session_id}")
        raise not_found(e.code, str(e), session_id=session_id)

    return SessionHistoryResponse(
        session_id=session.session_id,
        created_at=session.created_at,
        turn_count=len(history),
        history=[TurnResponse.model_validate(turn.to_dict()) for turn in history],
    )
