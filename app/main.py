"""
StudentNest API - Main Application
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

from app.api.routes import (
    auth_router,
    properties_router,
    allocations_router,
    notifications_router,
    reviews_router,
    users_router,
)
from app.core.config import settings
from app.database import test_connection, init_db, close_db_connection


# Configure logging
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown hooks"""
    logger.info("=" * 70)
    logger.info(f"[STARTUP] Starting {settings.PROJECT_NAME} v{settings.VERSION}")
    logger.info(f"[STARTUP] Environment: {'Development' if settings.DEBUG else 'Production'}")

    if not settings.TESTING:
        # NON-BLOCKING: the API still starts in degraded mode without a database
        if test_connection():
            logger.info("[STARTUP] Database connection successful")
        else:
            logger.warning("[STARTUP] Database connection failed - continuing in degraded mode")

        if init_db():
            logger.info("[STARTUP] Database initialization complete")
        else:
            logger.warning("[STARTUP] Database init returned False - tables may not exist")

    logger.info("[STARTUP] Application startup complete")
    logger.info("=" * 70)
    yield
    logger.info("[SHUTDOWN] Shutting down application...")
    close_db_connection()
    logger.info("[SHUTDOWN] Application shutdown complete")


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
allowed_origins = list(settings.ALLOWED_ORIGINS)
if settings.FRONTEND_URL and settings.FRONTEND_URL not in allowed_origins:
    allowed_origins.append(settings.FRONTEND_URL)

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE", "PATCH", "OPTIONS"],
    allow_headers=["*"],
    max_age=3600,
)


# ==================== ROUTERS ====================


app.include_router(auth_router, prefix=f"{settings.API_PREFIX}/auth", tags=["Authentication"])
app.include_router(properties_router, prefix=f"{settings.API_PREFIX}/properties", tags=["Properties"])
app.include_router(allocations_router, prefix=f"{settings.API_PREFIX}/allocations", tags=["Allocations"])
app.include_router(notifications_router, prefix=f"{settings.API_PREFIX}/notifications", tags=["Notifications"])
app.include_router(reviews_router, prefix=f"{settings.API_PREFIX}/reviews", tags=["Reviews"])
app.include_router(users_router, prefix=f"{settings.API_PREFIX}/users", tags=["Users"])


# ==================== ERROR HANDLERS ====================


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Handle validation errors with detailed response"""
    logger.warning(f"Validation error on {request.url}: {exc}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={
            "success": False,
            "detail": "Validation error",
            "errors": exc.errors()
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
            "detail": error_message,
            "timestamp": _now()
        }
    )


# ==================== HEALTH & STATUS ENDPOINTS ====================


@app.get("/", tags=["System"])
async def root():
    """Root endpoint - API information"""
    return {
        "success": True,
        "message": f"Welcome to {settings.PROJECT_NAME}",
        "version": settings.VERSION,
        "docs": "/api/docs",
        "status": "operational",
        "environment": "development" if settings.DEBUG else "production"
    }


@app.get("/health", tags=["System"])
def health_check():
    """Health check endpoint for monitoring"""
    connection_ok = test_connection()
    return {
        "success": True,
        "status": "healthy" if connection_ok else "degraded",
        "database": "connected" if connection_ok else "disconnected",
        "timestamp": _now(),
    }


@app.get("/status", tags=["System"])
async def status_check():
    """Detailed status check"""
    return {
        "success": True,
        "status": "operational",
        "timestamp": _now(),
        "service": {
            "name": settings.PROJECT_NAME,
            "version": settings.VERSION,
            "environment": "development" if settings.DEBUG else "production",
            "debug": settings.DEBUG
        },
        "allocation_policy": {
            "max_rooms_per_occupant_shared": settings.MAX_ROOMS_PER_OCCUPANT_SHARED,
            "max_rooms_per_occupant_private": settings.MAX_ROOMS_PER_OCCUPANT_PRIVATE,
            "fair_distribution": settings.FAIR_DISTRIBUTION_ENABLED,
        }
    }


@app.get("/api/version", tags=["System"])
async def get_version():
    """Get API version information"""
    return {
        "success": True,
        "api_version": settings.VERSION,
        "app_name": settings.PROJECT_NAME,
    }


# ==================== REQUEST LOGGING ====================


@app.middleware("http")
async def log_requests(request: Request, call_next):
    """Log all incoming requests"""
    # Skip logging for health checks
    if request.url.path in ["/health", "/status"]:
        return await call_next(request)

    start_time = datetime.now(timezone.utc)
    client = request.client.host if request.client else "-"
    logger.info(f">> {request.method} {request.url.path} - {client}")

    try:
        response = await call_next(request)
        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.info(f"<< {request.method} {request.url.path} - {response.status_code} ({duration:.2f}s)")
        return response
    except Exception as e:
        duration = (datetime.now(timezone.utc) - start_time).total_seconds()
        logger.error(f"[ERROR] {request.method} {request.url.path} - Error: {e} ({duration:.2f}s)")
        raise
