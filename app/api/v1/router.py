"""
API v1 router.

Aggregates all v1 endpoints.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import bookings, calendar, jobs, no_shows, notifications, optimization, packages, waitlist

api_router = APIRouter()

# Include endpoint routers
api_router.include_router(
    calendar.router, prefix="/calendar", tags=["Calendar"]
)
api_router.include_router(
    optimization.router, prefix="/optimization", tags=["Optimization"]
)
api_router.include_router(
    waitlist.router, prefix="/waitlist", tags=["Waitlist"]
)
api_router.include_router(
    packages.router, prefix="/packages", tags=["Packages"]
)
api_router.include_router(
    bookings.router, prefix="/bookings", tags=["Bookings"]
)
api_router.include_router(
    no_shows.router, prefix="/no-shows", tags=["No-shows"]
)
api_router.include_router(
    notifications.router, prefix="/notifications", tags=["Notifications"]
)
api_router.include_router(
    jobs.router, prefix="/jobs", tags=["Jobs"]
)
