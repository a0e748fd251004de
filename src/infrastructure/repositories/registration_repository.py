# src/infrastructure/repositories/registration_repository.py

from datetime import datetime, timezone

from sqlalchemy.orm import Session, selectinload
from sqlalchemy import select

from src.domain.state_machine import PaymentStatus, RegistrationStatus
from src.infrastructure.db.models import EventRegistration


class RegistrationRepository:

    def __init__(self, db: Session):
        self.db = db

    def find_active(self, event_id: str, customer_id: str) -> EventRegistration | None:
        stmt = (
            select(EventRegistration)
            .where(EventRegistration.event_id == event_id)
            .where(EventRegistration.customer_id == customer_id)
            .where(EventRegistration.status != RegistrationStatus.CANCELLED)
        )
        return self.db.execute(stmt).scalars().first()

    def create_registration(
        self,
        event_id: str,
        customer_id: str,
        payment_status: PaymentStatus,
    ) -> EventRegistration:
        registration = EventRegistration(
            event_id=event_id,
            customer_id=customer_id,
            registered_at=datetime.now(timezone.utc),
            status=RegistrationStatus.REGISTERED,
            payment_status=payment_status,
        )
        self.db.add(registration)
        return registration

    def list_for_event(self, event_id: str) -> list[EventRegistration]:
        stmt = (
            select(EventRegistration)
            .where(EventRegistration.event_id == event_id)
            .options(selectinload(EventRegistration.customer))
            .order_by(EventRegistration.registered_at)
        )
        return list(self.db.execute(stmt).scalars().all())

    def update_status(
        self,
        registration: EventRegistration,
        new_status: RegistrationStatus,
    ) -> None:

        registration.status = new_status
