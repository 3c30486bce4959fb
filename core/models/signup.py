# =============================================================================
# core/models/signup.py - Signup Schemas
# =============================================================================
# These models define the API contract for account creation:
# - UserRole: Enum of account types
# - UserData: Profile fields supplied at signup
# - SignupRequest: Body of POST /auth/signup
# - SignupResponse: Data returned after the account is created
# =============================================================================

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class UserRole(str, Enum):
    """
    Account type chosen at signup.

    - fan: Listener account
    - artist: Gets an artists row, pending verification
    - brand: Gets a brands row with a contact email
    """
    FAN = "fan"
    ARTIST = "artist"
    BRAND = "brand"


class UserData(BaseModel):
    """Profile fields stored as user metadata and in the profiles table."""

    display_name: str = Field(
        ...,
        min_length=1,
        max_length=100,
        description="Public display name (also used as artist/brand name)"
    )

    role: UserRole = Field(
        default=UserRole.FAN,
        description="Account type"
    )


class SignupRequest(BaseModel):
    """
    Schema for creating a new account.

    Example:
        {
            "email": "fan@example.com",
            "password": "Sup3rSecret",
            "user_data": {"display_name": "Jamie", "role": "fan"}
        }
    """

    email: str = Field(..., min_length=3, max_length=320)
    password: str = Field(..., min_length=1, max_length=128)
    user_data: UserData


class SignupResponse(BaseModel):
    """The created Supabase Auth user."""
    user: dict[str, Any]
