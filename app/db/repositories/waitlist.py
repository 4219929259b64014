"""Waitlist entry repository."""

import datetime
from typing import Optional

from sqlmodel import Session, col, select

from app.models.waitlist import WaitlistEntry, WaitlistStatus


class WaitlistRepository:
    """Repository for WaitlistEntry database operations."""

    def __init__(self, session: Session):
        self.session = session

    def create(self, entry: WaitlistEntry) -> WaitlistEntry:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry

    def stage(self, entry: WaitlistEntry) -> WaitlistEntry:
        self.session.add(entry)
        self.session.flush()
        return entry

    def get_by_id(self, entry_id: int) -> Optional[WaitlistEntry]:
        return self.session.get(WaitlistEntry, entry_id)

    def get_by_coach(self, coach_id: int, status: Optional[WaitlistStatus] = None) -> list[WaitlistEntry]:
        statement = select(WaitlistEntry).where(WaitlistEntry.coach_id == coach_id)
        if status is not None:
            statement = statement.where(WaitlistEntry.status == status)
        return list(self.session.exec(statement.order_by(WaitlistEntry.created_at)).all())

    def get_open_for_client(self, coach_id: int, client_id: int) -> Optional[WaitlistEntry]:
        """Active or notified entry of the client, if any."""
        statement = select(WaitlistEntry).where(
            WaitlistEntry.coach_id == coach_id,
            WaitlistEntry.client_id == client_id,
            col(WaitlistEntry.status).in_((WaitlistStatus.active, WaitlistStatus.notified)),
        )
        return self.session.exec(statement).first()

    def get_offers_past_deadline(self, now: datetime.datetime) -> list[WaitlistEntry]:
        statement = select(WaitlistEntry).where(
            WaitlistEntry.status == WaitlistStatus.notified,
            WaitlistEntry.response_deadline < now,
        )
        return list(self.session.exec(statement).all())

    def update(self, entry: WaitlistEntry) -> WaitlistEntry:
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        return entry
