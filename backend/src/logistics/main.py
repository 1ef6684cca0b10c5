"""FastAPI application entry point."""
from contextlib import asynccontextmanager
from datetime import datetime
from typing import AsyncGenerator, Optional
import traceback
import uuid

import structlog
from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_client import make_asgi_app
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from logistics.config import settings
from logistics.exceptions import DataSourceError
from logistics.middleware.logging import LoggingMiddleware, setup_logging
from logistics.middleware.metrics import MetricsMiddleware
from logistics.schemas.error import REMEDIATION_HINTS, ErrorCode, ErrorDetail, ErrorResponse

# Setup structured logging
setup_logging()
logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager for startup and shutdown events."""
    # Startup
    logger.info("application_starting", env=settings.app_env)
    yield
    # Shutdown
    logger.info("application_shutting_down")


# Create FastAPI application
app = FastAPI(
    title="Logistics Marketplace Analytics",
    description="Period snapshots of marketplace activity, bookings, payments and users",
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json",
    lifespan=lifespan,
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Add metrics and request logging middleware (logging is outermost)
app.add_middleware(MetricsMiddleware)
app.add_middleware(LoggingMiddleware)

# Mount Prometheus metrics endpoint
metrics_app = make_asgi_app()
app.mount("/metrics", metrics_app)


def _request_id(request: Request) -> str:
    return request.headers.get("x-request-id", f"req_{uuid.uuid4().hex[:12]}")


def _error_response(
    request_id: str,
    status_code: int,
    error: str,
    message: str,
    code: str,
    detail_message: Optional[str] = None,
    headers: Optional[dict] = None,
) -> JSONResponse:
    body = ErrorResponse(
        error=error,
        message=message,
        details=[ErrorDetail(code=code, message=detail_message or message)],
        remediation=REMEDIATION_HINTS.get(code),
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(mode="json"),
        headers=headers,
    )


# Status code -> (error type, error code) for errors raised by routes
HTTP_ERRORS = {
    status.HTTP_400_BAD_REQUEST: ("BadRequest", ErrorCode.BAD_REQUEST),
    status.HTTP_401_UNAUTHORIZED: ("AuthenticationError", ErrorCode.AUTHENTICATION_REQUIRED),
    status.HTTP_403_FORBIDDEN: ("AuthorizationError", ErrorCode.INSUFFICIENT_PERMISSIONS),
    status.HTTP_404_NOT_FOUND: ("NotFound", ErrorCode.SNAPSHOT_NOT_FOUND),
    status.HTTP_409_CONFLICT: ("DuplicateSnapshot", ErrorCode.DUPLICATE_SNAPSHOT),
}


# Exception handlers with structured error responses
@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """
    Wrap route-level HTTP errors in the error envelope.

    The route's detail string becomes the top-level message.
    """
    error, code = HTTP_ERRORS.get(exc.status_code, ("HTTPError", ErrorCode.INTERNAL_ERROR))
    request_id = _request_id(request)

    logger.info(
        "http_error",
        path=request.url.path,
        method=request.method,
        request_id=request_id,
        status_code=exc.status_code,
        detail=exc.detail,
    )

    return _error_response(
        request_id,
        exc.status_code,
        error,
        str(exc.detail),
        code,
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """
    Handle Pydantic validation errors with structured response.

    Returns 422 with detailed field-level validation errors (for example an
    out-of-range metric value on update).
    """
    request_id = _request_id(request)

    details = [
        ErrorDetail(
            code=ErrorCode.VALIDATION_ERROR,
            message=error["msg"],
            field=".".join(str(loc) for loc in error["loc"]),
            value=error.get("input"),
        )
        for error in exc.errors()
    ]

    logger.warning(
        "validation_error",
        path=request.url.path,
        method=request.method,
        request_id=request_id,
        error_count=len(details),
    )

    body = ErrorResponse(
        error="ValidationError",
        message="Request validation failed",
        details=details,
        remediation=REMEDIATION_HINTS.get(ErrorCode.VALIDATION_ERROR),
        request_id=request_id,
    )
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=body.model_dump(mode="json"),
    )


@app.exception_handler(DataSourceError)
async def data_source_exception_handler(request: Request, exc: DataSourceError) -> JSONResponse:
    """
    Handle failed metric queries during aggregation.

    Returns 500; no snapshot was written.
    """
    request_id = _request_id(request)

    logger.error(
        "data_source_error",
        path=request.url.path,
        method=request.method,
        request_id=request_id,
        collection=exc.collection,
        error_message=str(exc),
    )

    return _error_response(
        request_id,
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        "DataSourceError",
        "Error processing analytics data",
        ErrorCode.DATA_SOURCE_ERROR,
        detail_message=str(exc) if settings.app_env != "production" else None,
    )


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """
    Handle database errors.

    Returns 503 Service Unavailable for database connection issues.
    """
    request_id = _request_id(request)

    logger.error(
        "database_error",
        path=request.url.path,
        method=request.method,
        request_id=request_id,
        error_type=type(exc).__name__,
        error_message=str(exc),
    )

    # Don't expose internal database details in production
    error_message = "Database temporarily unavailable" if settings.app_env == "production" else str(exc)

    return _error_response(
        request_id,
        status.HTTP_503_SERVICE_UNAVAILABLE,
        "DatabaseError",
        "A database error occurred",
        ErrorCode.DATABASE_ERROR,
        detail_message=error_message,
        headers={"Retry-After": "30"},
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Handle all other uncaught exceptions.

    Logs full stack trace for debugging but returns safe error message to client.
    """
    request_id = _request_id(request)

    logger.exception(
        "unhandled_exception",
        path=request.url.path,
        method=request.method,
        request_id=request_id,
        exception_type=type(exc).__name__,
        exception_message=str(exc),
        stack_trace=traceback.format_exc(),
    )

    body = ErrorResponse(
        error="InternalServerError",
        message="An unexpected error occurred",
        details=[
            ErrorDetail(
                code=ErrorCode.INTERNAL_ERROR,
                message=str(exc) if settings.debug else "Internal server error",
            )
        ],
        remediation="Please contact support with the request ID",
        request_id=request_id,
        timestamp=datetime.utcnow(),
    )
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content=body.model_dump(mode="json"),
    )


# Root endpoint
@app.get("/", tags=["Root"])
async def root() -> dict[str, str]:
    """Root endpoint with API information."""
    return {
        "service": "Logistics Marketplace Analytics",
        "version": "0.1.0",
        "status": "operational",
        "docs": "/docs",
    }


# Include routers
from logistics.api.v1 import analytics, health  # noqa: E402

app.include_router(health.router, tags=["Health"])
app.include_router(analytics.router, prefix="/api/admin")
