"""
Error taxonomy and exception handlers.

- Defines a small hierarchy of ApiError exceptions raised by the services layer.
- Maps errors to a consistent JSON shape for clients.
- Registers FastAPI exception handlers.

Taxonomy:
- NotFoundError            referenced entity absent (404)
- InvalidAssignmentError   grantee exclusivity violated or no grantee supplied (422)
- ForbiddenError           actor lacks authority for the grant/revoke/message (403)
- ConflictError            uniqueness or 1:1 lead constraint violated (409)
- IntegrityViolationError  member/lead found without a tenant binding (500, generic body)
- AuthError                no or unknown principal identity on the request (401)
"""

from __future__ import annotations

from typing import Any, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field, ValidationError

__all__ = [
    "ApiError",
    "NotFoundError",
    "ConflictError",
    "InvalidAssignmentError",
    "ForbiddenError",
    "IntegrityViolationError",
    "AuthError",
    "ErrorBody",
    "ErrorResponse",
    "register_exception_handlers",
]


# -------------------------------
# Error response models
# -------------------------------

class ErrorBody(BaseModel):
    code: str = Field(..., description="Stable machine-readable error code")
    message: str = Field(..., description="Human-readable error message")
    details: dict = Field(default_factory=dict, description="Optional structured details")


class ErrorResponse(BaseModel):
    error: ErrorBody
    request_id: Optional[str] = Field(default=None, description="Client-supplied correlation/request id")


# -------------------------------
# Exception types
# -------------------------------

class ApiError(Exception):
    """
    Base API error with HTTP status and machine code.
    """
    status_code: int = 400
    code: str = "bad_request"

    def __init__(self, message: str, *, details: Optional[dict] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}


class NotFoundError(ApiError):
    status_code = 404
    code = "not_found"


class ConflictError(ApiError):
    status_code = 409
    code = "conflict"


class InvalidAssignmentError(ApiError):
    status_code = 422
    code = "invalid_assignment"


class ForbiddenError(ApiError):
    status_code = 403
    code = "forbidden"


class IntegrityViolationError(ApiError):
    """
    A member or tenant-lead principal has no tenant binding.

    The message is kept for logs; clients only ever see a generic body.
    """
    status_code = 500
    code = "integrity_violation"
    public_message = "Account data needs repair; contact an administrator"


class AuthError(ApiError):
    status_code = 401
    code = "unauthorized"


# -------------------------------
# Handlers
# -------------------------------

def _make_json_response(request: Request, exc: ApiError) -> JSONResponse:
    # Accept common correlation headers
    req_id = request.headers.get("x-request-id") or request.headers.get("x-correlation-id")

    if isinstance(exc, IntegrityViolationError):
        body = ErrorResponse(
            error=ErrorBody(code=exc.code, message=exc.public_message),
            request_id=req_id,
        )
    else:
        body = ErrorResponse(
            error=ErrorBody(code=exc.code, message=exc.message, details=exc.details or {}),
            request_id=req_id,
        )
    return JSONResponse(status_code=exc.status_code, content=body.model_dump())


async def api_error_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    FastAPI expects handlers typed as (Request, Exception) -> Response.

    - ApiError: mapped directly.
    - Request/Pydantic validation errors: mapped to 422 validation_error with details.
    - Other exceptions: mapped to 500 server_error.
    """
    if isinstance(exc, ApiError):
        return _make_json_response(request, exc)

    if isinstance(exc, (RequestValidationError, ValidationError)):
        details: dict[str, Any] = {"errors": _jsonable_errors(exc.errors())}
        err = ApiError("Validation error", details=details)
        err.status_code = 422
        err.code = "validation_error"
        return _make_json_response(request, err)

    return await unhandled_error_handler(request, exc)


def _jsonable_errors(errors: Any) -> list:
    # Pydantic error entries may carry exception instances under "ctx"
    out = []
    for e in errors or []:
        item = dict(e)
        if "ctx" in item:
            item["ctx"] = {k: str(v) for k, v in (item["ctx"] or {}).items()}
        out.append(item)
    return out


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    generic = ApiError("Internal server error")
    generic.status_code = 500
    generic.code = "server_error"
    return _make_json_response(request, generic)


def register_exception_handlers(app: FastAPI) -> None:
    """
    Register exception handlers on the FastAPI app.
    """
    app.add_exception_handler(ApiError, api_error_handler)
    app.add_exception_handler(RequestValidationError, api_error_handler)
    app.add_exception_handler(ValidationError, api_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
