# =============================================================================
# app/routers/auth.py - Account and Session Endpoints
# =============================================================================
# Thin entry points over Supabase Auth:
#   POST /auth/signup   - create an account and its records
#   POST /auth/login    - email/password sign-in
#   POST /auth/refresh  - exchange a refresh token
#   POST /auth/logout   - revoke the caller's session
#
# Failures propagate to the error classifier.
# =============================================================================

from fastapi import APIRouter, Header

from app.responses import create_success_response
from core.models.auth import LoginRequest, RefreshRequest
from core.models.signup import SignupRequest, SignupResponse
from core.services.auth_service import AuthService
from core.services.signup_service import SignupService

router = APIRouter()


@router.post("/signup", status_code=201)
async def signup(request: SignupRequest):
    """
    Create an account.

    Creates the Supabase Auth user plus its profile, MediaID and role
    records, then sends a verification email.

    Returns 201 with the created user.
    """
    user = SignupService.signup(request)

    return create_success_response(
        SignupResponse(user=user).model_dump(mode="json"),
        status_code=201,
        message="Account created successfully. Please check your email for verification.",
    )


@router.post("/login")
async def login(request: LoginRequest):
    """Sign in and return the user with a new session."""
    return create_success_response(AuthService.login(request), message="Login successful")


@router.post("/refresh")
async def refresh(request: RefreshRequest):
    """Return a fresh session for a refresh token."""
    return create_success_response(AuthService.refresh(request), message="Token refreshed successfully")


@router.post("/logout")
async def logout(authorization: str | None = Header(default=None)):
    """Revoke the session identified by the bearer token."""
    AuthService.logout(authorization)
    return create_success_response(None, message="Logout successful")
