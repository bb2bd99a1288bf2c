"""
Centralized exception classes for the reporting application.
Provides a hierarchy of custom exceptions with proper error codes and messages.
"""

from typing import Optional, Dict, Any
from fastapi import HTTPException, status


class BaseReportingException(HTTPException):
    """Base exception class for all reporting application errors."""

    def __init__(
        self,
        detail: str,
        status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR,
        headers: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(status_code=status_code, detail=detail, headers=headers)
        self.error_code = error_code or self.__class__.__name__
        self.context = context or {}


# Authentication & Authorization Exceptions
class AuthenticationException(BaseReportingException):
    """Authentication-related errors."""

    def __init__(
        self,
        detail: str = "Authentication failed",
        error_code: str = "AUTH_FAILED",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_401_UNAUTHORIZED,
            error_code=error_code,
            context=context
        )


class AuthorizationException(BaseReportingException):
    """Authorization-related errors."""

    def __init__(
        self,
        detail: str = "Access denied",
        error_code: str = "ACCESS_DENIED",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_403_FORBIDDEN,
            error_code=error_code,
            context=context
        )


# Validation Exceptions
class ValidationException(BaseReportingException):
    """Data validation errors."""

    def __init__(
        self,
        detail: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            error_code="VALIDATION_ERROR",
            context=context or {"field": field, "value": value}
        )


# Resource Exceptions
class ResourceNotFoundException(BaseReportingException):
    """A report, compliance type or other resource does not exist."""

    def __init__(
        self,
        resource_type: str,
        resource_id: str,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=f"{resource_type} with ID '{resource_id}' not found",
            status_code=status.HTTP_404_NOT_FOUND,
            error_code="RESOURCE_NOT_FOUND",
            context=context or {"resource_type": resource_type, "resource_id": resource_id}
        )


# Business Logic Exceptions
class BusinessLogicException(BaseReportingException):
    """Business logic errors."""

    def __init__(
        self,
        detail: str,
        error_code: str = "BUSINESS_LOGIC_ERROR",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_400_BAD_REQUEST,
            error_code=error_code,
            context=context
        )


class NoReportSelectedException(BusinessLogicException):
    """Export attempted without an active report definition."""

    def __init__(self, context: Optional[Dict[str, Any]] = None):
        super().__init__(
            detail="No report selected. Please select a report type before exporting.",
            error_code="NO_REPORT_SELECTED",
            context=context
        )


class EmptyColumnSelectionException(BusinessLogicException):
    """Export attempted with every column deselected."""

    def __init__(
        self,
        report_id: str,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=f"No columns selected for report '{report_id}'. Select at least one column to export.",
            error_code="EMPTY_COLUMN_SELECTION",
            context=context or {"report_id": report_id}
        )


# External Service Exceptions
class ExternalServiceException(BaseReportingException):
    """External service errors."""

    def __init__(
        self,
        detail: str,
        service_name: str,
        error_code: str = "EXTERNAL_SERVICE_ERROR",
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=detail,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            error_code=error_code,
            context=context or {"service_name": service_name}
        )


class DatabaseException(ExternalServiceException):
    """Database-related errors."""

    def __init__(
        self,
        detail: str,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=detail,
            service_name="database",
            error_code="DATABASE_ERROR",
            context=context or {"operation": operation}
        )


class SupabaseException(ExternalServiceException):
    """Supabase errors."""

    def __init__(
        self,
        detail: str,
        table: Optional[str] = None,
        operation: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail=detail,
            service_name="supabase",
            error_code="SUPABASE_ERROR",
            context=context or {"table": table, "operation": operation}
        )


class DataUnavailableException(ExternalServiceException):
    """A report query failed; the export is aborted without partial data."""

    def __init__(
        self,
        report_id: str,
        table: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            detail="Report data is currently unavailable. Please try the export again.",
            service_name="supabase",
            error_code="DATA_UNAVAILABLE",
            context=context or {"report_id": report_id, "table": table}
        )


# Data quality conditions
class MalformedDateValue(ValueError):
    """A source value does not look like a calendar date (YYYY-MM-DD...)."""

    def __init__(self, value: Any):
        super().__init__(f"Malformed date value: {value!r}")
        self.value = value
