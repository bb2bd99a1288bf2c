"""
Middleware for error handling, logging, and request tracking.
"""
import time

from fastapi import FastAPI, Request, Response, HTTPException
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp
from pydantic import ValidationError

from common.exceptions import BaseReportingException
from common.logging import RequestContextLogger, get_logger, log_api_request, log_error
from common.responses import (
    create_error_response,
    create_validation_error_response,
)


class RequestTrackingMiddleware(BaseHTTPMiddleware):
    """Middleware for tracking requests with correlation IDs and logging."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.logger = get_logger("middleware")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Bind a request id to the logging context and echo it back."""
        incoming_id = request.headers.get("x-request-id")
        with RequestContextLogger(request_id=incoming_id) as ctx:
            start_time = time.time()
            response = await call_next(request)
            duration_ms = (time.time() - start_time) * 1000
            response.headers["X-Request-ID"] = ctx.request_id
            log_api_request(
                method=request.method,
                path=str(request.url.path),
                status_code=response.status_code,
                duration_ms=duration_ms,
                ip_address=request.client.host if request.client else None,
                user_agent=request.headers.get("user-agent"),
            )
            return response


class ErrorHandlingMiddleware(BaseHTTPMiddleware):
    """Middleware for centralized error handling and response formatting."""

    def __init__(self, app: ASGIApp):
        super().__init__(app)
        self.logger = get_logger("error_handler")

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        """Wrap downstream processing with consistent error handling."""
        try:
            return await call_next(request)
        except BaseReportingException as e:
            return self._handle_reporting_exception(e, request)
        except HTTPException as e:
            return self._handle_http_exception(e, request)
        except ValidationError as e:
            return self._handle_validation_error(e, request)
        except Exception as e:
            return self._handle_unexpected_error(e, request)

    def _handle_reporting_exception(self, error: BaseReportingException, request: Request) -> JSONResponse:
        """Handle custom reporting exceptions."""
        self.logger.error(
            f"Reporting exception: {error.error_code}",
            extra={
                "error_code": error.error_code,
                "status_code": error.status_code,
                "context": error.context,
                "path": str(request.url.path),
                "method": request.method
            }
        )

        response = create_error_response(
            error_code=error.error_code,
            message=error.detail,
            status_code=error.status_code,
            context=error.context
        )

        if error.headers:
            for key, value in error.headers.items():
                response.headers[key] = value

        return response

    def _handle_http_exception(self, error: HTTPException, request: Request) -> JSONResponse:
        """Handle FastAPI HTTP exceptions."""
        self.logger.warning(
            f"HTTP exception: {error.status_code}",
            extra={
                "status_code": error.status_code,
                "detail": error.detail,
                "path": str(request.url.path),
                "method": request.method
            }
        )

        error_code_map = {
            400: "BAD_REQUEST",
            401: "AUTHENTICATION_REQUIRED",
            403: "ACCESS_DENIED",
            404: "RESOURCE_NOT_FOUND",
            405: "METHOD_NOT_ALLOWED",
            429: "RATE_LIMIT_EXCEEDED",
            500: "INTERNAL_SERVER_ERROR",
            503: "SERVICE_UNAVAILABLE",
        }

        response = create_error_response(
            error_code=error_code_map.get(error.status_code, "HTTP_ERROR"),
            message=str(error.detail),
            status_code=error.status_code
        )

        if error.headers:
            for key, value in error.headers.items():
                response.headers[key] = value

        return response

    def _handle_validation_error(self, error: ValidationError, request: Request) -> JSONResponse:
        """Handle Pydantic validation errors."""
        self.logger.warning(
            "Validation error occurred",
            extra={
                "error_count": error.error_count(),
                "path": str(request.url.path),
                "method": request.method
            }
        )

        validation_errors = []
        for err in error.errors():
            validation_errors.append({
                "field": ".".join(str(x) for x in err["loc"]),
                "message": err["msg"],
                "type": err["type"],
                "value": err.get("input")
            })

        return create_validation_error_response(
            validation_errors=validation_errors,
            message="Request validation failed"
        )

    def _handle_unexpected_error(self, error: Exception, request: Request) -> JSONResponse:
        """Handle unexpected errors."""
        log_error(error, context={
            "path": str(request.url.path),
            "method": request.method
        })

        # Don't expose internal error details
        return create_error_response(
            error_code="INTERNAL_SERVER_ERROR",
            message="An unexpected error occurred",
            status_code=500
        )


def setup_middleware(app: FastAPI) -> None:
    # Starlette runs the last-added middleware first
    app.add_middleware(ErrorHandlingMiddleware)
    app.add_middleware(RequestTrackingMiddleware)
