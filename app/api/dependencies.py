"""
Shared API dependencies.

Reusable FastAPI dependencies for application-owned resources.
"""

from fastapi import Depends, Request
from sqlmodel import Session

from app.core.cache import TTLCache
from app.db.session import get_db
from app.services.optimization_service import OptimizationService


def get_preference_cache(request: Request) -> TTLCache:
    """The preference cache created at startup (see ``app.main``)."""
    return request.app.state.preference_cache


def get_optimization_service(db: Session = Depends(get_db),
                             cache: TTLCache = Depends(get_preference_cache), ) -> OptimizationService:
    return OptimizationService(db, cache=cache)
