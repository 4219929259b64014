"""Optimization suggestion repository."""

import datetime
from typing import Optional

from sqlalchemy import update
from sqlmodel import Session, col, select

from app.models.suggestion import OptimizationSuggestion, SuggestionStatus


class SuggestionRepository:
    """Repository for OptimizationSuggestion database operations."""

    def __init__(self, session: Session):
        self.session = session

    def stage(self, entry: OptimizationSuggestion) -> OptimizationSuggestion:
        self.session.add(entry)
        self.session.flush()
        return entry

    def get_by_id(self, entry_id: int) -> Optional[OptimizationSuggestion]:
        return self.session.get(OptimizationSuggestion, entry_id)

    def get_pending_by_coach(self, coach_id: int, now: datetime.datetime) -> list[OptimizationSuggestion]:
        statement = (select(OptimizationSuggestion).where(
            OptimizationSuggestion.coach_id == coach_id,
            OptimizationSuggestion.status == SuggestionStatus.pending,
            OptimizationSuggestion.expires_at > now,
        ).order_by(col(OptimizationSuggestion.benefit_score).desc(), OptimizationSuggestion.id))
        return list(self.session.exec(statement).all())

    def get_pending_sources(self, coach_id: int) -> tuple[set[int], set[int]]:
        """Booking ids and waitlist entry ids that already have a pending suggestion."""
        statement = select(OptimizationSuggestion.source_booking_id, OptimizationSuggestion.waitlist_entry_id).where(
            OptimizationSuggestion.coach_id == coach_id,
            OptimizationSuggestion.status == SuggestionStatus.pending,
        )
        bookings: set[int] = set()
        entries: set[int] = set()
        for booking_id, entry_id in self.session.exec(statement).all():
            if booking_id is not None:
                bookings.add(booking_id)
            if entry_id is not None:
                entries.add(entry_id)
        return bookings, entries

    def expire_pending_before(self, now: datetime.datetime) -> int:
        statement = (update(OptimizationSuggestion)
                     .where(col(OptimizationSuggestion.status) == SuggestionStatus.pending,
                            col(OptimizationSuggestion.expires_at) <= now)
                     .values(status=SuggestionStatus.expired)
                     .execution_options(synchronize_session=False))
        result = self.session.execute(statement)
        self.session.commit()
        return result.rowcount or 0

    def update(self, entry: OptimizationSuggestion) -> OptimizationSuggestion:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry
