# src/infrastructure/repositories/event_repository.py

from datetime import datetime

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select

from src.infrastructure.db.models import Event


class EventRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_with_registrations(self, event_id: str) -> Event | None:
        """
        Loads the event and every registration row in the current transaction.
        """
        stmt = (
            select(Event)
            .where(Event.id == event_id)
            .options(selectinload(Event.registrations))
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def exists(self, event_id: str) -> bool:
        stmt = select(Event.id).where(Event.id == event_id)
        return self.db.execute(stmt).first() is not None

    def list_upcoming(self, now: datetime) -> list[Event]:
        stmt = (
            select(Event)
            .where(Event.event_date >= now)
            .options(selectinload(Event.registrations))
            .order_by(Event.event_date)
        )
        return list(self.db.execute(stmt).scalars().all())

    def add(self, event: Event) -> Event:
        self.db.add(event)
        return event
