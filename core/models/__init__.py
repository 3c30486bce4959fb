# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - signup.py: Account creation request/response schemas
# - auth.py: Login and token refresh request schemas
#
# These models define the "contract" between API and clients.
# =============================================================================

from .auth import LoginRequest, RefreshRequest
from .signup import SignupRequest, SignupResponse, UserData, UserRole

__all__ = [
    "LoginRequest",
    "RefreshRequest",
    "SignupRequest",
    "SignupResponse",
    "UserData",
    "UserRole",
]
