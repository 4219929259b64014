"""
Database session management.

Provides the SQLModel engine, the FastAPI session dependency and the
``atomic`` unit of work used by every multi-row write path.
"""

from contextlib import contextmanager
from typing import Generator, Iterator

from sqlmodel import Session, create_engine

from app.core.config import settings

DATABASE_URL: str = settings.DATABASE_URL

if DATABASE_URL.startswith("sqlite"):
    engine = create_engine(DATABASE_URL, echo=settings.DEBUG, connect_args={"check_same_thread": False})
else:
    engine = create_engine(
        DATABASE_URL,
        echo=settings.DEBUG,  # Log SQL queries in debug mode
        pool_pre_ping=True,   # Verify connections before using
        pool_size=5,          # Connection pool size
        max_overflow=10       # Max connections beyond pool_size
    )


def get_db() -> Generator[Session, None, None]:
    """
    Dependency for FastAPI endpoints to get database session.

    Yields:
        SQLModel Session instance
    """
    with Session(engine) as session:
        yield session


@contextmanager
def atomic(session: Session) -> Iterator[Session]:
    """Commit everything staged inside the block, or nothing.

    Repositories only stage (add + flush) inside the block; the single
    commit at exit makes the unit of work all-or-nothing.
    """
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
