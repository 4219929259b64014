"""No-show alert repository."""

from typing import Optional

from sqlmodel import Session, col, select

from app.models.no_show_alert import NoShowAlert


class NoShowAlertRepository:
    """Repository for NoShowAlert database operations."""

    def __init__(self, session: Session):
        self.session = session

    def get_by_id(self, alert_id: int) -> Optional[NoShowAlert]:
        return self.session.get(NoShowAlert, alert_id)

    def get_for_client(self, coach_id: int, client_id: int) -> Optional[NoShowAlert]:
        statement = select(NoShowAlert).where(
            NoShowAlert.coach_id == coach_id,
            NoShowAlert.client_id == client_id,
        )
        return self.session.exec(statement).first()

    def get_pending_by_coach(self, coach_id: int) -> list[NoShowAlert]:
        statement = (select(NoShowAlert).where(NoShowAlert.coach_id == coach_id,
                                               col(NoShowAlert.acknowledged_at).is_(None), )
                     .order_by(col(NoShowAlert.no_show_rate).desc(), NoShowAlert.id))
        return list(self.session.exec(statement).all())

    def stage(self, alert: NoShowAlert) -> NoShowAlert:
        self.session.add(alert)
        self.session.flush()
        return alert

    def update(self, alert: NoShowAlert) -> NoShowAlert:
        self.session.add(alert)
        self.session.commit()
        self.session.refresh(alert)
        return alert
