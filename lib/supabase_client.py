# =============================================================================
# lib/supabase_client.py - Supabase Client Wrapper
# =============================================================================
# This module provides a singleton Supabase client for the thin entry points
# (signup and sessions). The middleware core never touches it.
#
# Usage:
#   from lib.supabase_client import SupabaseClient
#   client = SupabaseClient.get_client()
#   client.table("profiles").select("id").limit(1).execute()
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

from supabase import Client, ClientOptions, create_client

from app.config import settings

# Set up logging for this module
logger = logging.getLogger(__name__)


class SupabaseClientError(Exception):
    """
    Error during Supabase operations.

    Carries a code, a suggestion for fixing the problem and debugging
    details. Not an ApiError: the API classifies it by its message.
    """

    def __init__(
        self,
        message: str,
        code: str = "SUPABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class SupabaseClient:
    """
    Holder for the shared Supabase client.

    One client instance is shared across the application. Uses the
    service_role key, which bypasses Row Level Security.
    """

    _instance: Client | None = None

    @classmethod
    def get_client(cls) -> Client:
        """
        Get or create the singleton Supabase client.

        Returns:
            Client: Supabase client instance

        Raises:
            SupabaseClientError: If client creation fails
        """
        if cls._instance is None:
            try:
                cls._instance = create_client(
                    settings.SUPABASE_URL,
                    settings.SUPABASE_SERVICE_KEY
                )
                logger.info("Supabase client initialized successfully")
            except Exception as e:
                raise SupabaseClientError(
                    message=f"Failed to create Supabase client: {e}",
                    code="CLIENT_INIT_FAILED",
                    suggestion="Check SUPABASE_URL and SUPABASE_SERVICE_KEY in your .env file"
                ) from e
        return cls._instance

    @staticmethod
    def create_session_client() -> Client:
        """
        Create a throwaway client for a single sign-in or refresh.

        Signing in stores the user's session on the client it was made
        with, so it must never be the shared service-role client.
        """
        return create_client(
            settings.SUPABASE_URL,
            settings.SUPABASE_SERVICE_KEY,
            options=ClientOptions(persist_session=False, auto_refresh_token=False),
        )

    @classmethod
    def insert(cls, table: str, data: dict[str, Any]) -> list[dict[str, Any]]:
        """
        Insert one row into `table`.

        Returns:
            The inserted rows as returned by PostgREST

        Raises:
            SupabaseClientError: If the insert fails
        """
        client = cls.get_client()

        try:
            response = client.table(table).insert(data).execute()
            logger.debug(f"Inserted row into {table}")
            return response.data or []
        except Exception as e:
            raise SupabaseClientError(
                message=f"Failed to insert into {table}: {e}",
                code="INSERT_FAILED",
                suggestion=f"Check that the {table} table exists and the row satisfies its constraints",
                details={"table": table},
            ) from e
