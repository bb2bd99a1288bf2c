from fastapi import FastAPI, Request
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from config.config import settings, tags_metadata
from config.cors import configure_cors

# Enhanced error handling imports
from common.logging import setup_logging, get_logger
from common.middleware import setup_middleware
from common.exceptions import BaseReportingException
from common.responses import create_error_response

# Setup enhanced logging
setup_logging(
    level=settings.log_level,
    format_type=settings.log_format
)

limiter = Limiter(
    key_func=get_remote_address,
    headers_enabled=True,
    default_limits=["200/minute"],
    storage_uri=settings.rate_limit_storage_uri,
    enabled=settings.rate_limit_enabled,
)

logger = get_logger("main")

app = FastAPI(
    title="HR Reporting API",
    version="1.0.0",
    description="Report catalog, column selection and CSV export for HR data stored in Supabase",
    openapi_tags=tags_metadata,
)
app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
app.add_middleware(SlowAPIMiddleware)

setup_middleware(app)
configure_cors(app)

@app.get("/",
    summary="Root endpoint",
    description="Simple health check and API info"
)
async def root():
    """Root endpoint for basic health check."""
    return {
        "message": "HR Reporting API",
        "version": "1.0.0",
        "status": "healthy",
        "docs": "/docs",
        "redoc": "/redoc"
    }


@app.exception_handler(BaseReportingException)
async def reporting_exception_handler(request: Request, exc: BaseReportingException):
    logger.error(f"Reporting exception: {exc.error_code}", extra={
        "error_code": exc.error_code,
        "context": exc.context,
        "path": str(request.url.path),
        "method": request.method
    })
    return create_error_response(
        error_code=exc.error_code,
        message=exc.detail,
        status_code=exc.status_code,
        context=exc.context
    )

# Import routers
from api.reports import router as reports_router
from api.health import router as health_router

# Include all routers with v1 prefix
app.include_router(reports_router, prefix="/v1")
app.include_router(health_router, prefix="/v1")

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
