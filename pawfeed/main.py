"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from pawfeed.api.v1.router import api_router
from pawfeed.core.config import settings
from pawfeed.core.errors import PawFeedError
from pawfeed.core.logging import get_logger

logger = get_logger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Feeding schedules and per-meal portion recalculation for PawFeed feeders.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json")

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.exception_handler(PawFeedError)
async def pawfeed_error_handler(request: Request, exc: PawFeedError):
    logger.warning("%s %s failed: %s", request.method, request.url.path, exc.detail)
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message, "retryable": exc.status_code == 503})


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "message": "PawFeed API",
        "version": settings.VERSION,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "pawfeed-api",
        "version": settings.VERSION
    }
