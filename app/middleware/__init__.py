# =============================================================================
# app/middleware/ - Cross-Cutting HTTP Middleware
# =============================================================================
# - cors.py: CORS admission gate and response header decoration
# - rate_limit.py: client key derivation and 429 responses
# - pipeline.py: the middleware that wires gate, limiter and error handling
# =============================================================================

from app.middleware.cors import CORS_HEADERS, CorsGate, add_cors_headers
from app.middleware.pipeline import RequestPipelineMiddleware
from app.middleware.rate_limit import UNKNOWN_CLIENT_KEY, get_client_key, rate_limit_response

__all__ = [
    "CORS_HEADERS",
    "CorsGate",
    "add_cors_headers",
    "RequestPipelineMiddleware",
    "UNKNOWN_CLIENT_KEY",
    "get_client_key",
    "rate_limit_response",
]
