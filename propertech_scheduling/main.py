"""
Propertech Scheduling API - Main Application
FastAPI application with CORS, error handling, middleware, and logging
"""
from contextlib import asynccontextmanager
from datetime import datetime, timezone
import logging
import traceback

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse

from propertech_scheduling.api.routes import bookings_router, scheduled_maintenance_router
from propertech_scheduling.core.config import get_cors_origins, is_testing, settings
from propertech_scheduling.core.exceptions import SchedulingError
from propertech_scheduling.database import close_db_connection, init_db, test_connection


# Configure logging
logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def jsonable_errors(exc: RequestValidationError):
    # pydantic puts the raw exception object in ctx for some validators
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        errors.append(error)
    return errors


# ==================== STARTUP & SHUTDOWN ====================


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("=" * 70)
    logger.info(f"Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info("=" * 70)

    if is_testing():
        logger.info("[STARTUP] Testing mode - skipping database initialization")
    else:
        if test_connection():
            logger.info("[OK] Database connection successful!")
            init_db()
        else:
            logger.warning("[WARN] Database connection failed - continuing in degraded mode")

    logger.info("[OK] Application startup complete!")
    yield

    logger.info("Shutting down application...")
    close_db_connection()
    logger.info("Application shutdown complete")


# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description=settings.PROJECT_DESCRIPTION,
    docs_url="/api/docs",
    redoc_url="/api/redoc",
    openapi_url="/api/openapi.json",
    lifespan=lifespan,
)


# ==================== MIDDLEWARE ====================


# Compression: GZip responses
app.add_middleware(GZipMiddleware, minimum_size=1000)

# CORS: Cross-Origin Resource Sharing
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS", "HEAD"],
    allow_headers=["*"],
    expose_headers=["Content-Length", "X-Total-Count"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    if request.url.path == "/health":
        return await call_next(request)

    start_time = datetime.now(timezone.utc)
    client = request.client.host if request.client else "-"
    logger.info(f">> {request.method} {request.url.path} - {client}")

    response = await call_next(request)
    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    logger.info(f"<< {request.method} {request.url.path} - {response.status_code} ({duration:.2f}s)")
    return response


# ==================== ROUTERS ====================


app.include_router(bookings_router, prefix=f"{settings.API_PREFIX}/bookings")
app.include_router(scheduled_maintenance_router, prefix=f"{settings.API_PREFIX}/scheduled-maintenance")


# ==================== ERROR HANDLERS ====================


@app.exception_handler(SchedulingError)
async def scheduling_exception_handler(request: Request, exc: SchedulingError):
    """Render typed scheduling failures with their HTTP status"""
    if exc.status_code >= 500:
        logger.error(f"[ERROR] {request.method} {request.url.path} - {exc.kind}: {exc.detail}")
    else:
        logger.info(f"[REJECTED] {request.method} {request.url.path} - {exc.kind}: {exc.detail}")
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "success": False,
            "error": exc.kind,
            "detail": exc.detail,
        }
    )


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed response"""
    logger.warning(f"Validation error on {request.url}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "error": "ValidationError",
            "detail": "Validation error",
            "errors": jsonable_errors(exc),
        }
    )


@app.exception_handler(Exception)
async def general_exception_handler(request: Request, exc: Exception):
    """Handle all unhandled exceptions"""
    logger.error(f"Unhandled exception: {exc}\n{traceback.format_exc()}")

    # Don't expose internal errors in production
    error_message = str(exc) if settings.DEBUG else "Internal server error"

    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={
            "success": False,
            "error": "InternalError",
            "detail": error_message,
            "timestamp": _timestamp(),
        }
    )


# ==================== HEALTH & STATUS ENDPOINTS ====================


@app.get("/", tags=["System"])
async def root():
    """Root endpoint - API information"""
    return {
        "success": True,
        "message": "Welcome to Propertech Scheduling API",
        "app_name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "docs": "/api/docs",
        "status": "operational",
        "environment": "production" if not settings.DEBUG else "development",
    }


@app.get("/health", tags=["System"])
async def health_check():
    """Health check endpoint for monitoring"""
    connection_ok = test_connection()
    return {
        "success": True,
        "status": "healthy" if connection_ok else "degraded",
        "database": "connected" if connection_ok else "disconnected",
        "timestamp": _timestamp(),
    }
