"""Shared fixtures.

The settings object is created on first import of ``app``; point it at
an in-memory SQLite database before anything imports it.
"""

import os

os.environ["DATABASE_URL_OVERRIDE"] = "sqlite://"

import datetime

import pytest
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, SQLModel, create_engine

import app.db.base  # noqa: F401
from app.models.booking import AvailabilityWindow, Booking, BookingStatus

MONDAY = datetime.date(2026, 10, 19)


def t(value: str) -> datetime.time:
    """'09:30' -> time(9, 30)."""
    hour, minute = value.split(":")
    return datetime.time(int(hour), int(minute))


@pytest.fixture
def engine():
    engine = create_engine("sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def session(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture
def add_window(session):
    def _add(coach_id: int, date: datetime.date, start: str, end: str) -> AvailabilityWindow:
        window = AvailabilityWindow(coach_id=coach_id, date=date, start_time=t(start), end_time=t(end))
        session.add(window)
        session.commit()
        session.refresh(window)
        return window

    return _add


@pytest.fixture
def add_booking(session):
    def _add(coach_id: int, client_id: int, date: datetime.date, start: str, end: str,
             status: BookingStatus = BookingStatus.scheduled, package_id=None) -> Booking:
        booking = Booking(coach_id=coach_id, client_id=client_id, date=date, start_time=t(start), end_time=t(end),
                          status=status, package_id=package_id)
        session.add(booking)
        session.commit()
        session.refresh(booking)
        return booking

    return _add
