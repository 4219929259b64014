"""
FastAPI application factory.

Creates and configures the FastAPI application instance.
"""

import logging

from fastapi import FastAPI

from app.core.cache import TTLCache
from app.core.config import settings
from app.api.v1.router import api_router

logging.basicConfig(level=settings.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Gap detection, schedule optimization, workload, waitlist and shared-package ledger for coaches.",
    docs_url="/docs",
    redoc_url="/redoc",
    openapi_url="/openapi.json")

# Owned by the app, injected into services per request
app.state.preference_cache = TTLCache(maxsize=settings.PREFERENCE_CACHE_MAXSIZE,
                                      ttl=settings.PREFERENCE_CACHE_TTL_SECONDS)

# Include API router
app.include_router(api_router, prefix="/api/v1")


@app.get("/")
async def root():
    """Root endpoint - health check."""
    return {
        "message": "Coach Calendar Intelligence API",
        "version": settings.VERSION,
        "status": "healthy"
    }


@app.get("/health")
async def health_check():
    """Health check endpoint for monitoring."""
    return {
        "status": "healthy",
        "service": "coach-calendar-api",
        "version": settings.VERSION
    }
