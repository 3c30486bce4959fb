# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - rate_limiter.py: In-memory fixed-window rate limiter with eviction sweep
# - supabase_client.py: Shared Supabase client (import it directly; it loads
#   settings on import)
# - validation.py: Email and password checks
# =============================================================================

from lib.rate_limiter import RateLimitDecision, RateLimitEntry, RateLimiter
from lib.validation import validate_email, validate_password

__all__ = [
    # Rate limiting
    "RateLimiter",
    "RateLimitEntry",
    "RateLimitDecision",
    # Validation
    "validate_email",
    "validate_password",
]
