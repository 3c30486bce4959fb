# =============================================================================
# app/exceptions.py - Error Taxonomy & Classifier
# =============================================================================
# Centralized exception handling for the API.
#
# Every failure raised while handling a request ends up here and is turned
# into exactly one JSON response:
#
#   1. ApiError (any kind)            -> its own status / code / details
#   2. Framework validation errors    -> 422 VALIDATION_ERROR
#   3. Framework HTTP errors          -> kind by status (404, 405, ...)
#   4. Plain exceptions               -> ordered substring rules on the message
#   5. Anything else                  -> 500 with the original message and type
#
# Rate-limit and CORS rejections are produced directly by the middleware and
# never pass through this module.
# =============================================================================

import logging
from dataclasses import dataclass
from enum import Enum
from http import HTTPStatus
from typing import Any

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.responses import create_error_response, utc_timestamp

logger = logging.getLogger(__name__)


# =============================================================================
# Error Kinds
# =============================================================================

class ErrorKind(str, Enum):
    """
    Closed set of API error kinds.

    Each kind carries a fixed HTTP status and a stable machine-readable code
    that clients can branch on.
    """
    VALIDATION = "validation"
    AUTHENTICATION = "authentication"
    AUTHORIZATION = "authorization"
    NOT_FOUND = "not_found"
    RATE_LIMIT = "rate_limit"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return _STATUS_CODES[self]

    @property
    def code(self) -> str:
        return _ERROR_CODES[self]


_STATUS_CODES = {
    ErrorKind.VALIDATION: 422,
    ErrorKind.AUTHENTICATION: 401,
    ErrorKind.AUTHORIZATION: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.RATE_LIMIT: 429,
    ErrorKind.INTERNAL: 500,
}

_ERROR_CODES = {
    ErrorKind.VALIDATION: "VALIDATION_ERROR",
    ErrorKind.AUTHENTICATION: "AUTHENTICATION_ERROR",
    ErrorKind.AUTHORIZATION: "AUTHORIZATION_ERROR",
    ErrorKind.NOT_FOUND: "NOT_FOUND",
    ErrorKind.RATE_LIMIT: "RATE_LIMIT_ERROR",
    ErrorKind.INTERNAL: "INTERNAL_ERROR",
}

_KINDS_BY_STATUS = {status: kind for kind, status in _STATUS_CODES.items()}


# =============================================================================
# ApiError
# =============================================================================

class ApiError(Exception):
    """
    Structured API failure.

    A single exception type tagged with an ErrorKind. Use the per-kind
    constructors instead of passing a kind by hand:

        raise ApiError.validation("Validation failed", details=errors)
        raise ApiError.not_found("Profile")   # "Profile not found"

    Fields are read-only once the error is constructed.
    """

    def __init__(
        self,
        message: str,
        kind: ErrorKind = ErrorKind.INTERNAL,
        code: str | None = None,
        details: Any = None,
    ):
        super().__init__(message)
        self._message = message
        self._kind = kind
        self._code = code or kind.code
        self._details = details

    @property
    def message(self) -> str:
        return self._message

    @property
    def kind(self) -> ErrorKind:
        return self._kind

    @property
    def code(self) -> str:
        return self._code

    @property
    def details(self) -> Any:
        return self._details

    @property
    def status_code(self) -> int:
        return self._kind.status_code

    def __repr__(self) -> str:
        return f"ApiError(kind={self._kind.name}, code={self._code!r}, message={self._message!r})"

    # -------------------------------------------------------------------------
    # Per-kind constructors
    # -------------------------------------------------------------------------

    @classmethod
    def validation(cls, message: str, details: Any = None) -> "ApiError":
        return cls(message, ErrorKind.VALIDATION, details=details)

    @classmethod
    def authentication(cls, message: str = "Authentication required") -> "ApiError":
        return cls(message, ErrorKind.AUTHENTICATION)

    @classmethod
    def authorization(cls, message: str = "Insufficient permissions") -> "ApiError":
        return cls(message, ErrorKind.AUTHORIZATION)

    @classmethod
    def not_found(cls, resource: str) -> "ApiError":
        return cls(f"{resource} not found", ErrorKind.NOT_FOUND)

    @classmethod
    def rate_limit(cls, message: str = "Rate limit exceeded") -> "ApiError":
        return cls(message, ErrorKind.RATE_LIMIT)

    @classmethod
    def internal(cls, message: str = "Internal server error", details: Any = None) -> "ApiError":
        return cls(message, ErrorKind.INTERNAL, details=details)


# =============================================================================
# Classification
# =============================================================================

@dataclass(frozen=True)
class ErrorClassification:
    """Result of classifying a failure: everything needed to build a response."""
    kind: ErrorKind
    message: str
    code: str | None = None
    details: Any = None
    # Set when the status differs from the kind's own (e.g. 405)
    status: int | None = None
    headers: dict[str, str] | None = None

    @property
    def status_code(self) -> int:
        return self.status or self.kind.status_code


@dataclass(frozen=True)
class MessageRule:
    """Map an untyped failure to a kind when its message contains `needle`."""
    needle: str
    kind: ErrorKind
    # Replacement message; None keeps the original one
    message: str | None = None


# Evaluated in order, first match wins. Only used when the failure carries no
# structured kind. Case-sensitive.
MESSAGE_RULES: tuple[MessageRule, ...] = (
    MessageRule("JWT", ErrorKind.AUTHENTICATION, "Invalid or expired token"),
    MessageRule("permission", ErrorKind.AUTHORIZATION, "Insufficient permissions"),
    MessageRule("not found", ErrorKind.NOT_FOUND),
)


def _validation_details(exc: RequestValidationError | ValidationError) -> list[dict[str, str]]:
    """Flatten framework validation errors into field/message pairs."""
    return [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": str(error.get("msg", "")),
            "type": str(error.get("type", "")),
        }
        for error in exc.errors()
    ]


def _message_of(exc: BaseException) -> str:
    # Prefer the plain message over a decorated __str__ (codes, suggestions)
    message = getattr(exc, "message", None)
    if isinstance(message, str):
        return message
    try:
        return str(exc)
    except Exception:
        return repr(type(exc))


def _status_code_name(status: int) -> str:
    try:
        return HTTPStatus(status).name
    except ValueError:
        return "HTTP_ERROR"


def _classify_http_exception(exc: StarletteHTTPException) -> ErrorClassification:
    """
    Classify a framework HTTP error (unknown route, wrong method, or an
    HTTPException raised by a handler).

    Statuses with a matching kind use that kind's code. Any other status is
    kept as-is and coded by its HTTP name, e.g. METHOD_NOT_ALLOWED.
    """
    if isinstance(exc.detail, str):
        message, details = exc.detail, None
    else:
        message, details = f"HTTP {exc.status_code}", exc.detail

    kind = _KINDS_BY_STATUS.get(exc.status_code)
    if kind is not None:
        return ErrorClassification(
            kind=kind,
            message=message,
            code=kind.code,
            details=details,
            headers=exc.headers,
        )

    return ErrorClassification(
        kind=ErrorKind.INTERNAL if exc.status_code >= 500 else ErrorKind.VALIDATION,
        message=message,
        code=_status_code_name(exc.status_code),
        details=details,
        status=exc.status_code,
        headers=exc.headers,
    )


def classify_exception(exc: BaseException) -> ErrorClassification:
    """
    Classify any failure into an ErrorClassification.

    Total: every input produces a classification and nothing is raised.

    Args:
        exc: The failure raised while handling a request

    Returns:
        ErrorClassification with kind, message, code and details
    """
    if isinstance(exc, ApiError):
        return ErrorClassification(
            kind=exc.kind,
            message=exc.message,
            code=exc.code,
            details=exc.details,
        )

    if isinstance(exc, (RequestValidationError, ValidationError)):
        return ErrorClassification(
            kind=ErrorKind.VALIDATION,
            message="Validation failed",
            code=ErrorKind.VALIDATION.code,
            details=_validation_details(exc),
        )

    if isinstance(exc, StarletteHTTPException):
        return _classify_http_exception(exc)

    message = _message_of(exc)

    for rule in MESSAGE_RULES:
        if rule.needle in message:
            return ErrorClassification(
                kind=rule.kind,
                message=rule.message or message,
                code=rule.kind.code,
            )

    return ErrorClassification(
        kind=ErrorKind.INTERNAL,
        message="Internal server error",
        code=ErrorKind.INTERNAL.code,
        details={
            "original_error": message,
            "type": type(exc).__name__,
        },
    )


def log_exception(exc: BaseException, classification: ErrorClassification) -> None:
    """
    Write one structured log record for a handled failure.

    Never raises: a broken handler or formatter must not cost the client
    its error response.
    """
    try:
        logger.error(
            f"API error: {type(exc).__name__}: {_message_of(exc)}",
            extra={
                "error_name": type(exc).__name__,
                "error_kind": classification.kind.value,
                "error_timestamp": utc_timestamp(),
            },
            exc_info=(type(exc), exc, exc.__traceback__),
        )
    except Exception:  # logging must never fail the response
        pass


def error_response(exc: BaseException) -> JSONResponse:
    """
    Convert any failure into the uniform error response.

    Body: {"success": false, "error": ..., "code": ..., "details": ..., "timestamp": ...}
    Stack traces never appear in the body; they only go to the log.
    """
    classification = classify_exception(exc)
    log_exception(exc, classification)
    return create_error_response(
        classification.message,
        status_code=classification.status_code,
        code=classification.code,
        details=classification.details,
        headers=classification.headers,
    )


# =============================================================================
# Exception Handlers
# =============================================================================

async def api_error_handler(
    request: Request,
    exc: ApiError
) -> JSONResponse:
    """Convert ApiError to its JSON response."""
    return error_response(exc)


async def validation_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    """
    Handle request validation errors.

    Returns 422 VALIDATION_ERROR with one entry per invalid field.
    """
    return error_response(exc)


async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    """
    Handle framework HTTP errors.

    Unknown routes, disallowed methods and HTTPExceptions raised by handlers
    get the same error body as every other failure.
    """
    return error_response(exc)
