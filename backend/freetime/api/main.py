"""
Free-Time Service - FastAPI Application Setup

Main FastAPI application that provides:
- Personal free-time calculation from recurring and one-off commitments
- Common availability and ranked meeting suggestions for groups
- Conflict and occurrence inspection for a person's schedule
- Health monitoring and configuration introspection
"""

import asyncio
import logging
from contextlib import asynccontextmanager
import uvicorn
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ..utils.config import config
from ..utils.helpers import create_error_response
from ..engine.availability import AvailabilityEngine, AvailabilitySettings
from ..engine.errors import FreeTimeError
from ..services.availability_cache import AvailabilityCache
from .availability_routes import availability_router

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.api.log_level),
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

SERVICE_NAME = "Free-Time Availability Service"
SERVICE_VERSION = "1.0.0"

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    logger.info(f"Starting {SERVICE_NAME}...")

    app.state.engine = AvailabilityEngine(AvailabilitySettings.from_config(config.engine))
    if config.cache.enabled:
        app.state.cache = AvailabilityCache(
            ttl_seconds=config.cache.ttl_seconds,
            max_entries=config.cache.max_entries
        )
    else:
        app.state.cache = None
        logger.info("Availability cache disabled")

    logger.info(f"{SERVICE_NAME} started successfully")
    try:
        yield
    finally:
        logger.info(f"Shutting down {SERVICE_NAME}...")
        if app.state.cache is not None:
            app.state.cache.clear()
        logger.info("Shutdown complete")

def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application

    Returns:
        FastAPI: Configured application instance
    """
    app = FastAPI(
        title=SERVICE_NAME,
        description="Free-time computation and common-availability engine",
        version=SERVICE_VERSION,
        docs_url="/docs" if config.api.debug else None,
        redoc_url="/redoc" if config.api.debug else None,
        lifespan=lifespan
    )

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "DELETE"],
        allow_headers=["*"],
    )

    # Add custom middleware for request logging
    @app.middleware("http")
    async def log_requests(request, call_next):
        start_time = asyncio.get_running_loop().time()
        response = await call_next(request)
        process_time = asyncio.get_running_loop().time() - start_time

        logger.info(
            f"{request.method} {request.url.path} "
            f"completed in {process_time:.3f}s with status {response.status_code}"
        )
        return response

    app.include_router(availability_router)

    return app

# Create the app instance
app = create_app()

# Root endpoint
@app.get("/")
async def root():
    """Root endpoint with basic service information"""
    return {
        "service": SERVICE_NAME,
        "version": SERVICE_VERSION,
        "status": "operational",
        "capabilities": [
            "free_time_calculation",
            "common_availability",
            "meeting_suggestions",
            "conflict_detection",
            "schedule_statistics"
        ],
        "endpoints": {
            "availability": "/api/availability",
            "health": "/health",
            "config": "/config"
        }
    }

# Health check endpoint
@app.get("/health")
async def health_check():
    """
    Health check endpoint for monitoring and load balancing

    Returns:
        Dict: Health status of the engine and cache
    """
    engine = getattr(app.state, "engine", None)
    cache = getattr(app.state, "cache", None)

    health_status = {
        "status": "healthy" if engine is not None else "degraded",
        "timestamp": asyncio.get_running_loop().time(),
        "services": {
            "engine": "healthy" if engine is not None else "not_initialized",
            "cache": "disabled" if cache is None else "healthy"
        }
    }
    if cache is not None:
        health_status["cache"] = cache.stats()

    if engine is None:
        return JSONResponse(status_code=503, content=health_status)
    return health_status

# Configuration endpoint
@app.get("/config")
async def get_configuration():
    """
    Get engine defaults (non-sensitive)

    Returns:
        Dict: Effective configuration
    """
    engine = config.engine
    return {
        "engine": {
            "working_hours": {
                "start": engine.working_hours_start.strftime("%H:%M"),
                "end": engine.working_hours_end.strftime("%H:%M")
            },
            "min_duration_minutes": engine.min_duration_minutes,
            "max_suggestions": engine.max_suggestions,
            "max_meeting_length_minutes": engine.max_meeting_length_minutes,
            "preferred_band": {
                "start": engine.preferred_band_start.strftime("%H:%M"),
                "end": engine.preferred_band_end.strftime("%H:%M")
            },
            "ranking_weights": list(config.ranking_weights()),
            "monthly_mode": engine.monthly_mode,
            "reference_timezone": engine.reference_timezone
        },
        "cache": {
            "enabled": config.cache.enabled,
            "ttl_seconds": config.cache.ttl_seconds
        },
        "environment": "production" if config.is_production() else "development"
    }

# Error handlers
@app.exception_handler(FreeTimeError)
async def free_time_exception_handler(request, exc):
    """Translate engine failures into 400 responses"""
    logger.warning(f"Rejected {request.url.path}: {exc.code} {exc.message}")
    return JSONResponse(
        status_code=400,
        content=create_error_response(
            exc.message,
            exc.code,
            {"path": str(request.url.path)}
        )
    )

@app.exception_handler(HTTPException)
async def http_exception_handler(request, exc):
    """Handle HTTP exceptions with consistent format"""
    return JSONResponse(
        status_code=exc.status_code,
        content={
            "error": exc.detail,
            "status_code": exc.status_code,
            "path": str(request.url.path)
        }
    )

@app.exception_handler(Exception)
async def general_exception_handler(request, exc):
    """Handle general exceptions"""
    logger.error(f"Unhandled exception: {str(exc)}")
    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "details": str(exc) if config.api.debug else "An unexpected error occurred"
        }
    )

# Start the server
def start_server():
    """Start the FastAPI server with uvicorn"""
    uvicorn.run(
        "freetime.api.main:app",
        host=config.api.host,
        port=config.api.port,
        reload=config.api.debug,
        log_config=config.get_log_config(),
        access_log=True
    )

if __name__ == "__main__":
    start_server()
