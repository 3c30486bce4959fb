# =============================================================================
# app/responses.py - Response Envelope Helpers
# =============================================================================
# Every JSON body the API returns uses the same envelope:
#
#   success: {"success": true, "data": ..., "message": ..., "timestamp": ...}
#   failure: {"success": false, "error": ..., "code": ..., "details": ..., "timestamp": ...}
#
# Route handlers build successes with create_success_response(); the error
# classifier and the rate limiter build failures with create_error_response().
# =============================================================================

import math
from datetime import datetime, timezone
from typing import Any

from fastapi.responses import JSONResponse


def utc_timestamp() -> str:
    """Current UTC time as an ISO-8601 string."""
    return datetime.now(timezone.utc).isoformat()


def create_success_response(
    data: Any,
    status_code: int = 200,
    message: str | None = None,
) -> JSONResponse:
    """
    Wrap a payload in the success envelope.

    Args:
        data: JSON-serializable payload
        status_code: HTTP status (default 200)
        message: Optional human-readable message

    Returns:
        JSONResponse with the success envelope
    """
    content: dict[str, Any] = {
        "success": True,
        "data": data,
        "timestamp": utc_timestamp(),
    }
    if message:
        content["message"] = message
    return JSONResponse(status_code=status_code, content=content)


def create_error_response(
    error: str,
    status_code: int = 400,
    code: str | None = None,
    details: Any = None,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    """
    Wrap an error message in the failure envelope.

    `code` and `details` are only included when set, so clients can branch
    on the presence of a stable code.
    """
    content: dict[str, Any] = {
        "success": False,
        "error": error,
        "timestamp": utc_timestamp(),
    }
    if code:
        content["code"] = code
    if details is not None:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=content, headers=headers)


def create_paginated_response(
    data: list[Any],
    page: int,
    limit: int,
    total: int,
) -> JSONResponse:
    """Success envelope with a pagination block for list endpoints."""
    return JSONResponse(
        status_code=200,
        content={
            "success": True,
            "data": data,
            "pagination": {
                "page": page,
                "limit": limit,
                "total": total,
                "total_pages": math.ceil(total / limit) if limit else 0,
                "has_next": page * limit < total,
                "has_prev": page > 1,
            },
            "timestamp": utc_timestamp(),
        },
    )
