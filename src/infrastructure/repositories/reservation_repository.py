# src/infrastructure/repositories/reservation_repository.py

from datetime import date, time

from sqlalchemy.orm import Session
from sqlalchemy import select

from src.domain.enums import ReservationStatus
from src.infrastructure.db.models import CafeTable, Reservation


# Reservations in these states no longer hold their table.
RELEASED_STATUSES = (ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW)


class ReservationRepository:

    def __init__(self, db: Session):
        self.db = db

    def get_by_id(self, reservation_id: str) -> Reservation | None:
        stmt = select(Reservation).where(Reservation.id == reservation_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def get_table(self, table_id: str) -> CafeTable | None:
        stmt = select(CafeTable).where(CafeTable.id == table_id)
        return self.db.execute(stmt).scalar_one_or_none()

    def list_active_tables(self, min_capacity: int) -> list[CafeTable]:
        stmt = (
            select(CafeTable)
            .where(CafeTable.is_active.is_(True))
            .where(CafeTable.seating_capacity >= min_capacity)
            .order_by(CafeTable.table_number)
        )
        return list(self.db.execute(stmt).scalars().all())

    def list_holding_reservations(self, reservation_date: date) -> list[Reservation]:
        stmt = (
            select(Reservation)
            .where(Reservation.reservation_date == reservation_date)
            .where(Reservation.status.not_in(RELEASED_STATUSES))
        )
        return list(self.db.execute(stmt).scalars().all())

    def has_overlap(
        self,
        table_id: str,
        reservation_date: date,
        start_time: time,
        end_time: time,
        exclude_id: str | None = None,
    ) -> bool:
        stmt = (
            select(Reservation.id)
            .where(Reservation.table_id == table_id)
            .where(Reservation.reservation_date == reservation_date)
            .where(Reservation.status.not_in(RELEASED_STATUSES))
            .where(Reservation.start_time < end_time)
            .where(Reservation.end_time > start_time)
        )
        if exclude_id:
            stmt = stmt.where(Reservation.id != exclude_id)
        return self.db.execute(stmt).first() is not None

    def list_for_customer(self, customer_id: str) -> list[Reservation]:
        stmt = (
            select(Reservation)
            .where(Reservation.customer_id == customer_id)
            .order_by(Reservation.reservation_date.desc(), Reservation.start_time.desc())
        )
        return list(self.db.execute(stmt).scalars().all())

    def add(self, reservation: Reservation) -> Reservation:
        self.db.add(reservation)
        return reservation
