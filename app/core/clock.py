"""
UTC wall clock shared by models and services.

Timestamps are stored as naive UTC; every default and every
``now or ...`` fallback goes through :func:`utcnow`.
"""

import datetime


def utcnow() -> datetime.datetime:
    """Current UTC time without tzinfo."""
    return datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
