# =============================================================================
# core/models/auth.py - Session Schemas
# =============================================================================
# Request bodies for the session endpoints:
# - LoginRequest: Body of POST /auth/login
# - RefreshRequest: Body of POST /auth/refresh
# =============================================================================

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Email and password sign-in."""

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)


class RefreshRequest(BaseModel):
    """Exchange a refresh token for a new session."""

    refresh_token: str = Field(..., min_length=1)
