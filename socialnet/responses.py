"""
SocialNet API error taxonomy and exception handlers.
Every error leaves the API as {"ok": false, "message", "error_code", "timestamp"}.
"""
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logging_config import api_logger


# ============================================================
# ERROR TYPES
# ============================================================

class ApiException(HTTPException):
    """Custom API exception with error codes"""

    default_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_code = "INTERNAL_ERROR"
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict] = None,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        headers: Optional[Dict[str, str]] = None,
    ):
        self.error_code = error_code or self.default_code
        self.details = details
        super().__init__(
            status_code=status_code or self.default_status,
            detail=message or self.default_message,
            headers=headers,
        )


class ValidationError(ApiException):
    """Malformed identifier or missing/invalid field."""
    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "VALIDATION_ERROR"
    default_message = "Invalid request"


class AuthenticationError(ApiException):
    """Bad credentials or a missing, expired or invalid token."""
    default_status = status.HTTP_401_UNAUTHORIZED
    default_code = "UNAUTHORIZED"
    default_message = "Authentication required"


class AuthorizationError(ApiException):
    """Caller is authenticated but lacks rights on the target resource."""
    default_status = status.HTTP_403_FORBIDDEN
    default_code = "FORBIDDEN"
    default_message = "Access denied"


class NotFoundError(ApiException):
    default_status = status.HTTP_404_NOT_FOUND
    default_code = "NOT_FOUND"
    default_message = "Resource not found"


class ConflictError(ApiException):
    """Duplicate email/username, duplicate follow and similar state clashes."""
    default_status = status.HTTP_400_BAD_REQUEST
    default_code = "CONFLICT"
    default_message = "Resource conflict"


class InternalError(ApiException):
    """Storage or hashing failure. Details stay in the server log."""


# ============================================================
# VALIDATION HELPERS
# ============================================================

def parse_id(value: Any, resource: str = "ID") -> str:
    """Validate an identifier before it is used for any lookup."""
    try:
        return str(uuid.UUID(str(value)))
    except (ValueError, TypeError, AttributeError):
        raise ValidationError("Invalid ID format", {"field": resource, "value": str(value)})


# ============================================================
# EXCEPTION HANDLERS
# ============================================================

def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def error_body(message: str, error_code: str, details: Any = None) -> Dict[str, Any]:
    body = {
        "ok": False,
        "message": message,
        "error_code": error_code,
        "timestamp": _timestamp(),
    }
    if details is not None:
        body["details"] = details
    return body


async def api_exception_handler(request: Request, exc: ApiException) -> JSONResponse:
    """Render a raised ApiException."""
    log = api_logger.error if exc.status_code >= 500 else api_logger.warning
    log(
        f"API Error: {exc.detail}",
        status_code=exc.status_code,
        error_code=exc.error_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(exc.detail, exc.error_code, exc.details),
        headers=exc.headers,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework errors (unknown route, wrong method) in the same shape."""
    api_logger.warning(
        f"HTTP Error: {exc.detail}",
        status_code=exc.status_code,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail), f"HTTP_{exc.status_code}"),
        headers=getattr(exc, "headers", None),
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Request body/query validation failures are client errors (400)."""
    errors = jsonable_encoder(exc.errors())
    api_logger.info(
        "Request validation failed",
        path=request.url.path,
        fields=[".".join(str(p) for p in err.get("loc", [])) for err in errors],
    )
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content=error_body("Invalid request", "VALIDATION_ERROR", errors),
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Last resort: log the traceback, return a generic 500."""
    api_logger.error(
        f"Unexpected error: {exc}",
        error=exc,
        path=request.url.path,
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=error_body("An unexpected error occurred", "INTERNAL_ERROR"),
    )


def register_exception_handlers(app) -> None:
    app.add_exception_handler(ApiException, api_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
