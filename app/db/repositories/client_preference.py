"""Client preference repository."""

from typing import Optional

from sqlmodel import Session, col, select

from app.models.client_preference import ClientPreference


class ClientPreferenceRepository:
    """Repository for ClientPreference database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get(self, coach_id: int, client_id: int) -> Optional[ClientPreference]:
        statement = select(ClientPreference).where(
            ClientPreference.coach_id == coach_id,
            ClientPreference.client_id == client_id,
        )
        return self.session.exec(statement).first()

    def get_for_clients(self, coach_id: int, client_ids: list[int]) -> dict[int, ClientPreference]:
        if not client_ids:
            return {}
        statement = select(ClientPreference).where(
            ClientPreference.coach_id == coach_id,
            col(ClientPreference.client_id).in_(client_ids),
        )
        return {p.client_id: p for p in self.session.exec(statement).all()}

    def upsert(self, preference: ClientPreference) -> ClientPreference:
        existing = self.get(preference.coach_id, preference.client_id)
        if existing:
            existing.preferred_days = list(preference.preferred_days)
            existing.preferred_time_start = preference.preferred_time_start
            existing.preferred_time_end = preference.preferred_time_end
            preference = existing
        self.session.add(preference)
        self.session.commit()
        self.session.refresh(preference)
        return preference
