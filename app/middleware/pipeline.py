# =============================================================================
# app/middleware/pipeline.py - Request Pipeline Middleware
# =============================================================================
# Wraps every route handler:
#
#   CORS gate -> rate limiter -> handler -> error classifier -> CORS headers
#
# The gate and the limiter may answer on their own (preflight, 403, 429).
# Exceptions that escape the handler and were not already translated by a
# registered exception handler are classified here, so every response,
# including unexpected 500s, leaves with the CORS header set.
#
# Usage:
#   app.add_middleware(RequestPipelineMiddleware, cors_gate=gate, rate_limiter=limiter)
# =============================================================================

import logging
from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.exceptions import error_response
from app.middleware.cors import CorsGate, add_cors_headers
from app.middleware.rate_limit import get_client_key, rate_limit_response
from lib.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class RequestPipelineMiddleware(BaseHTTPMiddleware):
    """
    Admission, rate limiting and error translation around every request.

    Holds one CorsGate and one RateLimiter for the lifetime of the app.
    """

    def __init__(
        self,
        app: ASGIApp,
        cors_gate: CorsGate,
        rate_limiter: RateLimiter,
    ):
        super().__init__(app)
        self.cors_gate = cors_gate
        self.rate_limiter = rate_limiter

    async def dispatch(
        self, request: Request, call_next: Callable
    ) -> Response:
        """
        Run one request through the pipeline.

        Args:
            request: Incoming HTTP request
            call_next: Next middleware or route handler

        Returns:
            Response with the CORS header set
        """
        rejection = self.cors_gate.admit(request)
        if rejection is not None:
            return add_cors_headers(rejection)

        client_key = get_client_key(request.headers)
        decision = self.rate_limiter.check_and_consume(client_key)
        if not decision.allowed:
            logger.warning(
                f"Rate limit exceeded for {client_key} on {request.method} {request.url.path} "
                f"(retry after {decision.retry_after}s)"
            )
            return add_cors_headers(rate_limit_response(decision))

        try:
            response = await call_next(request)
        except Exception as exc:
            response = error_response(exc)

        return add_cors_headers(response)
