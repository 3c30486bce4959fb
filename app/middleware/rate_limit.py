# =============================================================================
# app/middleware/rate_limit.py - Rate Limit HTTP Glue
# =============================================================================
# Connects lib.rate_limiter to HTTP requests:
# - get_client_key(): derive the client identity from proxy headers
# - rate_limit_response(): the 429 response for a rejected request
# =============================================================================

from starlette.datastructures import Headers
from starlette.responses import JSONResponse

from app.exceptions import ErrorKind
from app.responses import create_error_response
from lib.rate_limiter import RateLimitDecision


# All clients without forwarding headers share this bucket
UNKNOWN_CLIENT_KEY = "unknown"


def get_client_key(headers: Headers) -> str:
    """
    Derive the rate-limit key for a request.

    Prefers the first address of X-Forwarded-For, then X-Real-IP, then the
    shared "unknown" bucket.
    """
    forwarded_for = headers.get("x-forwarded-for")
    if forwarded_for:
        first_hop = forwarded_for.split(",")[0].strip()
        if first_hop:
            return first_hop

    real_ip = headers.get("x-real-ip")
    if real_ip and real_ip.strip():
        return real_ip.strip()

    return UNKNOWN_CLIENT_KEY


def rate_limit_response(decision: RateLimitDecision) -> JSONResponse:
    """Build the 429 response for a rejected decision."""
    return create_error_response(
        f"Rate limit exceeded. Try again in {decision.retry_after} seconds.",
        status_code=ErrorKind.RATE_LIMIT.status_code,
        code=ErrorKind.RATE_LIMIT.code,
        details={"retry_after": decision.retry_after, "limit": decision.limit},
        headers={"Retry-After": str(decision.retry_after)},
    )
