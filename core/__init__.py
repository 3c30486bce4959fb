# =============================================================================
# core/ - Business Logic Package
# =============================================================================
# This package contains the thin business layer behind the entry points:
# - models/: Pydantic schemas for request validation
# - services/: Forwarding of requests to Supabase
#
# The HTTP middleware core (CORS, rate limiting, error handling) lives in
# app/ and lib/; nothing here depends on it except raising ApiError.
# =============================================================================
