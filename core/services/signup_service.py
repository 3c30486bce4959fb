# =============================================================================
# core/services/signup_service.py - Account Creation
# =============================================================================
# Forwards a signup to Supabase:
# 1. Create the auth user (email unconfirmed, profile as user metadata)
# 2. Insert the profiles row
# 3. Insert the media_ids row with default privacy settings
# 4. Insert the role row (artists / brands)
# 5. Request an email verification link (best effort)
# =============================================================================

import logging
from typing import Any

from app.exceptions import ApiError
from core.models.signup import SignupRequest, UserRole
from lib.supabase_client import SupabaseClient
from lib.validation import validate_email, validate_password

logger = logging.getLogger(__name__)


DEFAULT_PRIVACY_SETTINGS = {
    "data_sharing": True,
    "location_access": False,
    "audio_capture": False,
    "anonymous_logging": True,
    "marketing_communications": False,
}


class SignupService:
    """Service for creating accounts and their backend records."""

    @staticmethod
    def validate(request: SignupRequest) -> None:
        """
        Check email shape and password strength.

        Raises:
            ApiError: VALIDATION with every problem listed in details
        """
        errors = []
        if not validate_email(request.email):
            errors.append("Invalid email address")
        errors.extend(validate_password(request.password))

        if errors:
            raise ApiError.validation("Validation failed", details={"validation_errors": errors})

    @staticmethod
    def signup(request: SignupRequest) -> dict[str, Any]:
        """
        Create the account and all records that belong to it.

        Args:
            request: Validated signup body

        Returns:
            The created auth user as a dict

        Raises:
            ApiError: VALIDATION if the email or password is rejected,
                locally or by Supabase Auth
            SupabaseClientError: If writing a backend record fails
        """
        SignupService.validate(request)

        client = SupabaseClient.get_client()
        user_data = request.user_data

        try:
            auth_response = client.auth.admin.create_user({
                "email": request.email,
                "password": request.password,
                "email_confirm": False,
                "user_metadata": user_data.model_dump(mode="json"),
            })
        except Exception as e:
            # Auth rejects the request itself (duplicate email, weak password)
            logger.info(f"Signup rejected for {request.email}: {e}")
            raise ApiError.validation(str(e)) from e

        user = auth_response.user
        user_id = str(user.id)

        SupabaseClient.insert("profiles", {
            "id": user_id,
            "display_name": user_data.display_name,
            "role": user_data.role.value,
            "email_verified": False,
            "onboarding_completed": False,
        })

        SupabaseClient.insert("media_ids", {
            "user_uuid": user_id,
            "interests": [],
            "genre_preferences": [],
            "content_flags": {},
            "privacy_settings": dict(DEFAULT_PRIVACY_SETTINGS),
        })

        if user_data.role == UserRole.ARTIST:
            SupabaseClient.insert("artists", {
                "user_id": user_id,
                "artist_name": user_data.display_name,
                "verification_status": "pending",
            })
        elif user_data.role == UserRole.BRAND:
            SupabaseClient.insert("brands", {
                "user_id": user_id,
                "brand_name": user_data.display_name,
                "contact_email": request.email,
            })

        try:
            client.auth.admin.generate_link({
                "type": "signup",
                "email": request.email,
                "password": request.password,
            })
        except Exception as e:
            logger.warning(f"Email verification link failed for user {user_id}: {e}")

        logger.info(f"Created {user_data.role.value} account: {user_id}")
        return user.model_dump(mode="json")
