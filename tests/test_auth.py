# =============================================================================
# tests/test_auth.py - Login, Refresh and Logout Tests
# =============================================================================
# This module contains tests for:
# - AuthService forwarding to Supabase Auth (mocked)
# - Provider rejections becoming 401 AUTHENTICATION_ERROR
# - The session endpoints through the pipeline
# =============================================================================

import pytest

from app.exceptions import ApiError, ErrorKind
from core.models.auth import LoginRequest, RefreshRequest
from core.services.auth_service import AuthService


# =============================================================================
# AuthService Tests
# =============================================================================

class TestAuthService:
    """Test session calls with a mocked Supabase client."""

    def test_login(self, mock_supabase):
        result = AuthService.login(LoginRequest(email="jamie@example.com", password="Sup3rSecret"))

        mock_supabase.auth.sign_in_with_password.assert_called_once_with({
            "email": "jamie@example.com",
            "password": "Sup3rSecret",
        })
        assert result["user"]["email"] == "jamie@example.com"
        assert result["session"]["access_token"] == "access-1"

    def test_login_without_session(self, mock_supabase):
        """Unconfirmed users can get a user but no session."""
        mock_supabase.auth.sign_in_with_password.return_value.session = None

        result = AuthService.login(LoginRequest(email="jamie@example.com", password="Sup3rSecret"))

        assert result["session"] is None

    def test_login_rejected(self, mock_supabase):
        mock_supabase.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")

        with pytest.raises(ApiError) as exc_info:
            AuthService.login(LoginRequest(email="jamie@example.com", password="wrong"))

        assert exc_info.value.kind == ErrorKind.AUTHENTICATION
        assert exc_info.value.message == "Invalid login credentials"

    def test_refresh(self, mock_supabase):
        result = AuthService.refresh(RefreshRequest(refresh_token="refresh-0"))

        mock_supabase.auth.refresh_session.assert_called_once_with("refresh-0")
        assert result == {"session": {"access_token": "access-1", "refresh_token": "refresh-1", "expires_in": 3600}}

    def test_logout_strips_bearer(self, mock_supabase):
        AuthService.logout("Bearer user-jwt")

        mock_supabase.auth.admin.sign_out.assert_called_once_with("user-jwt")

    @pytest.mark.parametrize("header", [None, "", "Bearer   "])
    def test_logout_without_token(self, mock_supabase, header):
        with pytest.raises(ApiError) as exc_info:
            AuthService.logout(header)

        assert exc_info.value.kind == ErrorKind.AUTHENTICATION
        assert exc_info.value.message == "No authorization header"
        mock_supabase.auth.admin.sign_out.assert_not_called()


# =============================================================================
# HTTP Tests
# =============================================================================

class TestSessionEndpoints:
    """Test the session endpoints through the pipeline."""

    def test_login(self, make_client, mock_supabase):
        _, client = make_client()

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "jamie@example.com", "password": "Sup3rSecret"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Login successful"
        assert body["data"]["session"]["refresh_token"] == "refresh-1"

    def test_login_rejected(self, make_client, mock_supabase):
        mock_supabase.auth.sign_in_with_password.side_effect = RuntimeError("Invalid login credentials")
        _, client = make_client()

        response = client.post(
            "/api/v1/auth/login",
            json={"email": "jamie@example.com", "password": "wrong"},
        )

        assert response.status_code == 401
        assert response.json()["error"] == "Invalid login credentials"
        assert response.json()["code"] == "AUTHENTICATION_ERROR"

    def test_refresh_rejected(self, make_client, mock_supabase):
        mock_supabase.auth.refresh_session.side_effect = RuntimeError("Invalid Refresh Token: Already Used")
        _, client = make_client()

        response = client.post("/api/v1/auth/refresh", json={"refresh_token": "refresh-0"})

        assert response.status_code == 401
        assert response.json()["code"] == "AUTHENTICATION_ERROR"

    def test_refresh_requires_token(self, make_client, mock_supabase):
        _, client = make_client()

        response = client.post("/api/v1/auth/refresh", json={})

        assert response.status_code == 422
        assert response.json()["code"] == "VALIDATION_ERROR"

    def test_logout(self, make_client, mock_supabase):
        _, client = make_client()

        response = client.post("/api/v1/auth/logout", headers={"Authorization": "Bearer user-jwt"})

        assert response.status_code == 200
        assert response.json()["message"] == "Logout successful"
        mock_supabase.auth.admin.sign_out.assert_called_once_with("user-jwt")

    def test_logout_without_header(self, make_client, mock_supabase):
        _, client = make_client()

        response = client.post("/api/v1/auth/logout")

        assert response.status_code == 401
        assert response.json()["error"] == "No authorization header"
