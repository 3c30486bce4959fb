# =============================================================================
# core/services/auth_service.py - Session Management
# =============================================================================
# Forwards sign-in, token refresh and sign-out to Supabase Auth.
# Every provider rejection becomes an AUTHENTICATION ApiError (401).
# =============================================================================

import logging
from typing import Any

from app.exceptions import ApiError
from core.models.auth import LoginRequest, RefreshRequest
from lib.supabase_client import SupabaseClient

logger = logging.getLogger(__name__)


def _dump(model: Any) -> dict[str, Any] | None:
    return model.model_dump(mode="json") if model is not None else None


class AuthService:
    """Service for user sessions."""

    @staticmethod
    def login(request: LoginRequest) -> dict[str, Any]:
        """
        Sign in with email and password.

        Returns:
            {"user": ..., "session": ...}

        Raises:
            ApiError: AUTHENTICATION if the credentials are rejected
        """
        client = SupabaseClient.create_session_client()

        try:
            auth_response = client.auth.sign_in_with_password({
                "email": request.email,
                "password": request.password,
            })
        except Exception as e:
            logger.info(f"Login rejected for {request.email}: {e}")
            raise ApiError.authentication(str(e)) from e

        return {
            "user": _dump(auth_response.user),
            "session": _dump(auth_response.session),
        }

    @staticmethod
    def refresh(request: RefreshRequest) -> dict[str, Any]:
        """
        Exchange a refresh token for a new session.

        Raises:
            ApiError: AUTHENTICATION if the token is invalid or expired
        """
        client = SupabaseClient.create_session_client()

        try:
            auth_response = client.auth.refresh_session(request.refresh_token)
        except Exception as e:
            raise ApiError.authentication(str(e)) from e

        return {"session": _dump(auth_response.session)}

    @staticmethod
    def logout(authorization: str | None) -> None:
        """
        Revoke the session behind a bearer token.

        Args:
            authorization: Raw Authorization header value

        Raises:
            ApiError: AUTHENTICATION if the header is missing or the token is rejected
        """
        if not authorization:
            raise ApiError.authentication("No authorization header")

        scheme, _, token = authorization.partition(" ")
        jwt = token.strip() if scheme.lower() == "bearer" else authorization.strip()
        if not jwt:
            raise ApiError.authentication("No authorization header")

        try:
            SupabaseClient.get_client().auth.admin.sign_out(jwt)
        except Exception as e:
            raise ApiError.authentication(str(e)) from e
