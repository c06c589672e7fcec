"""Canonical response envelope for all pitchlab endpoints.

Standardized structure:
{
  "success": true | false,
  "data": {...},              # success only
  "error": "string",          # failure only
  "code": "string",           # failure only, machine-readable
  "details": {}               # failure only, optional
}
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from starlette.exceptions import HTTPException as StarletteHTTPException

from pitchlab.common.errors import PitchLabError

logger = logging.getLogger(__name__)


class ApiEnvelope(BaseModel):
    """Top-level envelope returned by every pitchlab endpoint."""
    success: bool
    data: Optional[Any] = None
    error: Optional[str] = None
    code: Optional[str] = None
    details: Optional[Dict[str, Any]] = None

    def to_json(self) -> Dict[str, Any]:
        return self.model_dump(exclude_none=True)


def success_envelope(data: Any) -> Dict[str, Any]:
    return ApiEnvelope(success=True, data=data).to_json()


def build_error_envelope(
    code: str,
    message: str,
    details: Optional[Dict[str, Any]] = None,
) -> ApiEnvelope:
    """Construct a failure ApiEnvelope (without raising)."""
    return ApiEnvelope(success=False, error=message, code=code, details=details or None)


def error_response(
    code: str,
    message: str,
    status_code: int = 400,
    details: Optional[Dict[str, Any]] = None,
) -> HTTPException:
    """Construct and raise a standardized error response.

    Args:
        code: Machine-readable error code (e.g., "session.not_found")
        message: Human-readable error message
        status_code: HTTP status code (default 400)
        details: Additional context dict

    Returns:
        HTTPException with canonical envelope body
    """
    envelope = build_error_envelope(code=code, message=message, details=details)
    raise HTTPException(status_code=status_code, detail=envelope.to_json())


# --- Error Handling ---

async def _pitchlab_exception_handler(request: Request, exc: PitchLabError):
    envelope = build_error_envelope(code=exc.code, message=exc.message, details=exc.details)
    return JSONResponse(content=envelope.to_json(), status_code=exc.http_status)


async def _http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Normalize existing envelopes if possible
    detail = exc.detail
    if isinstance(detail, dict) and "success" in detail:
        return JSONResponse(content=detail, status_code=exc.status_code)

    envelope = build_error_envelope(
        code="http.exception",
        message=str(detail) if detail else "HTTP exception",
    )
    return JSONResponse(content=envelope.to_json(), status_code=exc.status_code)


async def _validation_exception_handler(request: Request, exc: RequestValidationError):
    envelope = build_error_envelope(
        code="validation.error",
        message="Validation failed",
        details={"errors": [err.get("msg", "invalid") for err in exc.errors()]},
    )
    return JSONResponse(content=envelope.to_json(), status_code=400)


async def _generic_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    envelope = build_error_envelope(code="internal.error", message="Internal server error")
    return JSONResponse(content=envelope.to_json(), status_code=500)


def register_error_handlers(target_app: FastAPI) -> None:
    target_app.add_exception_handler(PitchLabError, _pitchlab_exception_handler)
    target_app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    target_app.add_exception_handler(RequestValidationError, _validation_exception_handler)
    target_app.add_exception_handler(Exception, _generic_exception_handler)
