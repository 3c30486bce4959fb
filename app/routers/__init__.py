# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - auth.py: Signup, login, token refresh and logout
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import auth

__all__ = [
    "auth",
]
