# =============================================================================
# tests/test_exceptions.py - Error Taxonomy & Classifier Tests
# =============================================================================
# This module contains tests for:
# - ApiError kinds, codes and constructors
# - classify_exception precedence (structured > validation > HTTP > message rules > 500)
# - error_response bodies and logging
# =============================================================================

import json
import logging
from unittest.mock import patch

import pytest
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.exceptions import (
    MESSAGE_RULES,
    ApiError,
    ErrorKind,
    classify_exception,
    error_response,
)
from lib.supabase_client import SupabaseClientError


def _body(response) -> dict:
    return json.loads(response.body)


# =============================================================================
# ApiError Tests
# =============================================================================

class TestApiError:
    """Test the tagged ApiError and its constructors."""

    @pytest.mark.parametrize(
        "error, status, code",
        [
            (ApiError.validation("bad input"), 422, "VALIDATION_ERROR"),
            (ApiError.authentication(), 401, "AUTHENTICATION_ERROR"),
            (ApiError.authorization(), 403, "AUTHORIZATION_ERROR"),
            (ApiError.not_found("Track"), 404, "NOT_FOUND"),
            (ApiError.rate_limit(), 429, "RATE_LIMIT_ERROR"),
            (ApiError.internal(), 500, "INTERNAL_ERROR"),
        ],
    )
    def test_kind_status_and_code(self, error, status, code):
        """Every kind classifies to its fixed status/code pair."""
        result = classify_exception(error)

        assert result.status_code == status
        assert result.code == code
        assert error.status_code == status

    def test_default_messages(self):
        """Constructors supply the default messages."""
        assert ApiError.authentication().message == "Authentication required"
        assert ApiError.authorization().message == "Insufficient permissions"
        assert ApiError.rate_limit().message == "Rate limit exceeded"
        assert ApiError.not_found("Artist").message == "Artist not found"

    def test_details_are_kept(self):
        """Validation details pass through classification verbatim."""
        error = ApiError.validation("Validation failed", details={"field": "email"})

        result = classify_exception(error)

        assert result.message == "Validation failed"
        assert result.details == {"field": "email"}

    def test_custom_code(self):
        """An explicit code overrides the kind's default."""
        error = ApiError("Quota used up", ErrorKind.RATE_LIMIT, code="QUOTA_EXCEEDED")

        assert error.code == "QUOTA_EXCEEDED"
        assert error.status_code == 429

    def test_is_immutable(self):
        """Public fields cannot be reassigned."""
        error = ApiError.not_found("Track")

        with pytest.raises(AttributeError):
            error.kind = ErrorKind.INTERNAL
        with pytest.raises(AttributeError):
            error.message = "changed"


# =============================================================================
# Classification Tests
# =============================================================================

class TestClassifyException:
    """Test the classification order for untyped failures."""

    def test_not_found_substring(self):
        """'not found' maps to 404 and keeps the original message."""
        result = classify_exception(RuntimeError("Playlist 42 not found"))

        assert result.kind == ErrorKind.NOT_FOUND
        assert result.status_code == 404
        assert result.message == "Playlist 42 not found"

    def test_jwt_substring(self):
        """'JWT' maps to 401 with a fixed message."""
        result = classify_exception(Exception("JWT expired"))

        assert result.status_code == 401
        assert result.message == "Invalid or expired token"
        assert result.code == "AUTHENTICATION_ERROR"

    def test_permission_substring(self):
        """'permission' maps to 403."""
        result = classify_exception(Exception("permission denied for table profiles"))

        assert result.status_code == 403
        assert result.message == "Insufficient permissions"

    def test_rules_are_ordered(self):
        """The first matching rule wins."""
        result = classify_exception(Exception("JWT subject not found"))

        assert result.status_code == 401
        assert [rule.needle for rule in MESSAGE_RULES] == ["JWT", "permission", "not found"]

    def test_structured_error_beats_message_rules(self):
        """An ApiError is never reclassified by its message."""
        error = ApiError.validation("Referenced genre not found")

        result = classify_exception(error)

        assert result.status_code == 422

    def test_matching_is_case_sensitive(self):
        """'Not Found' does not match the 'not found' rule."""
        result = classify_exception(Exception("Not Found"))

        assert result.status_code == 500

    def test_unknown_failure_is_internal(self):
        """No recognized substring yields 500 with message and type."""
        result = classify_exception(ValueError("division exploded"))

        assert result.kind == ErrorKind.INTERNAL
        assert result.status_code == 500
        assert result.message == "Internal server error"
        assert result.details == {
            "original_error": "division exploded",
            "type": "ValueError",
        }

    def test_pydantic_validation_error(self):
        """Pydantic failures are structured validation errors."""

        class Payload(BaseModel):
            count: int

        with pytest.raises(ValidationError) as exc_info:
            Payload(count="many")

        result = classify_exception(exc_info.value)

        assert result.status_code == 422
        assert result.code == "VALIDATION_ERROR"
        assert result.details[0]["field"] == "count"

    @pytest.mark.parametrize(
        "status, kind",
        [
            (401, ErrorKind.AUTHENTICATION),
            (403, ErrorKind.AUTHORIZATION),
            (404, ErrorKind.NOT_FOUND),
            (422, ErrorKind.VALIDATION),
            (429, ErrorKind.RATE_LIMIT),
        ],
    )
    def test_http_exception_maps_to_kind(self, status, kind):
        result = classify_exception(StarletteHTTPException(status_code=status, detail="nope"))

        assert result.kind == kind
        assert result.status_code == status
        assert result.code == kind.code
        assert result.message == "nope"

    def test_http_exception_keeps_unmapped_status(self):
        exc = StarletteHTTPException(status_code=405, headers={"Allow": "POST"})

        result = classify_exception(exc)

        assert result.status_code == 405
        assert result.code == "METHOD_NOT_ALLOWED"
        assert result.message == "Method Not Allowed"
        assert result.headers == {"Allow": "POST"}

    def test_message_attribute_preferred_over_str(self):
        """Decorated __str__ text (codes, hints) never reaches the client."""
        exc = SupabaseClientError(
            "Failed to insert into profiles: row not found",
            code="INSERT_FAILED",
            suggestion="Check the table",
        )

        result = classify_exception(exc)

        assert result.status_code == 404
        assert result.message == "Failed to insert into profiles: row not found"


# =============================================================================
# error_response Tests
# =============================================================================

class TestErrorResponse:
    """Test response bodies and the logging side effect."""

    def test_api_error_body(self):
        """Body carries error, code and details."""
        response = error_response(ApiError.validation("Validation failed", details=["email"]))
        body = _body(response)

        assert response.status_code == 422
        assert body["success"] is False
        assert body["error"] == "Validation failed"
        assert body["code"] == "VALIDATION_ERROR"
        assert body["details"] == ["email"]
        assert "timestamp" in body

    def test_internal_body_has_no_stack_trace(self):
        """500 bodies include the original message but no traceback."""
        try:
            raise KeyError("missing")
        except KeyError as exc:
            response = error_response(exc)

        body = _body(response)
        assert response.status_code == 500
        assert "missing" in body["details"]["original_error"]
        assert body["details"]["type"] == "KeyError"
        assert "Traceback" not in response.body.decode()

    def test_failure_is_logged(self, caplog):
        """One ERROR record per handled failure."""
        with caplog.at_level(logging.ERROR, logger="app.exceptions"):
            error_response(RuntimeError("Track not found"))

        records = [r for r in caplog.records if r.name == "app.exceptions"]
        assert len(records) == 1
        assert records[0].error_name == "RuntimeError"
        assert records[0].error_kind == "not_found"
        assert "Track not found" in records[0].getMessage()

    def test_logging_failure_does_not_break_response(self):
        """A failing logger still yields the response."""
        with patch("app.exceptions.logger.error", side_effect=RuntimeError("disk full")):
            response = error_response(ApiError.authorization())

        assert response.status_code == 403
