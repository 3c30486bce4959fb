# =============================================================================
# app/middleware/cors.py - CORS Gate
# =============================================================================
# Admission check that runs before any route handler:
#
#   OPTIONS                          -> 200 "ok" with the CORS headers
#   Origin set and not allowed       -> 403 "CORS: Origin not allowed"
#   anything else                    -> continue to the handler
#
# Every response leaving the API then gets the fixed CORS header set via
# add_cors_headers(). Access-Control-Allow-Origin is always "*": the origin
# allow-list is an admission check only and is not reflected in the header.
# =============================================================================

import logging
from typing import Iterable

from starlette.datastructures import MutableHeaders
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response, StreamingResponse

logger = logging.getLogger(__name__)


WILDCARD_ORIGIN = "*"

CORS_HEADERS: dict[str, str] = {
    "Access-Control-Allow-Origin": WILDCARD_ORIGIN,
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "GET, POST, PUT, DELETE, OPTIONS",
    # 24 hours
    "Access-Control-Max-Age": "86400",
}


def add_cors_headers(response: Response) -> Response:
    """
    Return a copy of `response` carrying the CORS header set.

    The original response is left untouched. Status, body (or body iterator),
    background task and existing headers are carried over; CORS headers
    replace any existing value for the same key instead of being appended.
    """
    headers = MutableHeaders(raw=list(response.raw_headers))
    for key, value in CORS_HEADERS.items():
        headers[key] = value

    body_iterator = getattr(response, "body_iterator", None)
    if body_iterator is not None:
        decorated: Response = StreamingResponse(
            body_iterator,
            status_code=response.status_code,
            background=response.background,
        )
    else:
        decorated = Response(
            content=response.body,
            status_code=response.status_code,
            background=response.background,
        )

    decorated.raw_headers = headers.raw
    return decorated


class CorsGate:
    """
    Decide whether a request may reach the route handlers.

    The allowed origins are frozen at construction. A "*" entry admits
    every origin.

    Example:
        gate = CorsGate(["http://localhost:3000"])
        rejection = gate.admit(request)
        if rejection is not None:
            return rejection
    """

    def __init__(self, allowed_origins: Iterable[str]):
        self._allowed_origins = frozenset(allowed_origins)

    @property
    def allowed_origins(self) -> frozenset[str]:
        return self._allowed_origins

    @property
    def allows_any_origin(self) -> bool:
        return WILDCARD_ORIGIN in self._allowed_origins

    def is_origin_allowed(self, origin: str) -> bool:
        return self.allows_any_origin or origin in self._allowed_origins

    def admit(self, request: Request) -> Response | None:
        """
        Run the admission check for one request.

        Args:
            request: The incoming request

        Returns:
            A response to send immediately, or None to let the request continue
        """
        # Preflight only announces capabilities; no origin check
        if request.method == "OPTIONS":
            return PlainTextResponse("ok", status_code=200, headers=CORS_HEADERS)

        origin = request.headers.get("origin")
        if origin and not self.is_origin_allowed(origin):
            logger.warning(f"CORS rejected origin {origin} for {request.method} {request.url.path}")
            return PlainTextResponse(
                "CORS: Origin not allowed",
                status_code=403,
                headers=CORS_HEADERS,
            )

        return None
