# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .auth_service import AuthService
from .signup_service import SignupService

__all__ = [
    "AuthService",
    "SignupService",
]
