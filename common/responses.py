"""
Standard error envelopes and OpenAPI error examples for the reporting API.
"""

import json
from typing import Any, Dict, List, Optional
from datetime import date, datetime, timezone
from uuid import UUID
from pydantic import BaseModel
from fastapi import status
from fastapi.responses import JSONResponse

from common.logging import request_id_var


class ErrorDetail(BaseModel):
    """Detailed error information."""
    code: str
    message: str
    context: Optional[Dict[str, Any]] = None


class ErrorResponse(BaseModel):
    """Error envelope returned by every failing endpoint."""
    success: bool = False
    error: ErrorDetail
    request_id: Optional[str] = None
    timestamp: str


class ValidationErrorResponse(BaseModel):
    """Validation error response format."""
    success: bool = False
    error: ErrorDetail
    validation_errors: List[Dict[str, Any]]
    request_id: Optional[str] = None
    timestamp: str


def _ensure_jsonable(value: Any) -> Any:
    """Recursively convert common non-JSON-serializable types to JSON-safe values.

    Handles dicts, lists/tuples/sets, dates, UUID, and Pydantic models.
    Fallback converts unknown objects to str().
    """
    if value is None or isinstance(value, (str, int, float, bool)):
        return value

    if isinstance(value, BaseModel):
        return _ensure_jsonable(value.model_dump(exclude_none=True))

    if isinstance(value, (datetime, date)):
        return value.isoformat()

    if isinstance(value, UUID):
        return str(value)

    if isinstance(value, dict):
        return {k: _ensure_jsonable(v) for k, v in value.items()}

    if isinstance(value, (list, tuple, set, frozenset)):
        return [_ensure_jsonable(v) for v in value]

    try:
        json.dumps(value)
        return value
    except (TypeError, ValueError):
        return str(value)


def create_error_response(
    error_code: str,
    message: str,
    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
    context: Optional[Dict[str, Any]] = None
) -> JSONResponse:
    """Create an error API response."""
    error_detail = ErrorDetail(
        code=error_code,
        message=message,
        context=_ensure_jsonable(context) if context else None
    )

    response_data = ErrorResponse(
        error=error_detail,
        request_id=request_id_var.get(),
        timestamp=datetime.now(timezone.utc).isoformat()
    )

    content = _ensure_jsonable(response_data.model_dump(exclude_none=True))
    return JSONResponse(content=content, status_code=status_code)


def create_validation_error_response(
    validation_errors: List[Dict[str, Any]],
    message: str = "Validation failed"
) -> JSONResponse:
    """Create a validation error response."""
    error_detail = ErrorDetail(
        code="VALIDATION_ERROR",
        message=message
    )

    response_data = ValidationErrorResponse(
        error=error_detail,
        validation_errors=_ensure_jsonable(validation_errors),
        request_id=request_id_var.get(),
        timestamp=datetime.now(timezone.utc).isoformat()
    )

    content = _ensure_jsonable(response_data.model_dump(exclude_none=True))
    return JSONResponse(content=content, status_code=status.HTTP_422_UNPROCESSABLE_ENTITY)


def _error_example(code: str, message: str) -> Dict[str, Any]:
    return {
        "application/json": {
            "example": {
                "success": False,
                "error": {"code": code, "message": message},
                "request_id": "550e8400-e29b-41d4-a716-446655440000",
                "timestamp": "2024-01-01T10:00:00Z"
            }
        }
    }


# Common response templates for route declarations
COMMON_RESPONSES = {
    "bad_request": {
        400: {
            "description": "Export guard failed",
            "content": _error_example("EMPTY_COLUMN_SELECTION", "No columns selected for report 'leaves'.")
        }
    },
    "forbidden": {
        403: {
            "description": "Access denied",
            "content": _error_example("ACCESS_DENIED", "Access denied")
        }
    },
    "not_found": {
        404: {
            "description": "Resource not found",
            "content": _error_example("RESOURCE_NOT_FOUND", "Report with ID 'payroll' not found")
        }
    },
    "service_unavailable": {
        503: {
            "description": "Report data unavailable",
            "content": _error_example("DATA_UNAVAILABLE", "Report data is currently unavailable. Please try the export again.")
        }
    },
}
