"""
Database initialization.

Creates all tables directly from the SQLModel metadata (local runs and
throwaway databases; production schemas go through Alembic).
"""

import logging

from sqlmodel import SQLModel

from app.db.session import engine

log = logging.getLogger(__name__)


def init_db(bind=None, drop_first: bool = False) -> list[str]:
    """
    Initialize database schema.

    - Registers every model on ``SQLModel.metadata``
    - Optionally drops the engine tables (``drop_first``)
    - Creates the missing tables

    Returns the names of the tables known to the metadata.
    """

    # Import all models so SQLModel.metadata has them
    import app.db.base  # noqa: F401

    bind = bind or engine
    if drop_first:
        log.warning("[db] dropping %d tables", len(SQLModel.metadata.tables))
        SQLModel.metadata.drop_all(bind)

    SQLModel.metadata.create_all(bind)
    tables = sorted(SQLModel.metadata.tables)
    log.info("[db] tables ready: %s", ", ".join(tables))
    return tables
