"""Translation of toolchat errors into structured HTTP errors."""

from typing import Any

from fastapi import HTTPException, status


def error_detail(code: str, message: str, **details: Any) -> dict[str, Any]:
    """Build the error body used by all API error responses."""
    return {"error": {"code": code, "message": message, "details": details}}


def not_found(code: str, message: str, **details: Any) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=error_detail(code, message, **details),
    )


def bad_request(code: str, message: str, **details: Any) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail=error_detail(code, message, **details),
    )


def server_error(code: str, message: str, **details: Any) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=error_detail(code, message, **details),
    )
