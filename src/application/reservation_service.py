import logging
from dataclasses import dataclass
from datetime import date, datetime, time
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy.orm import Session

from src.domain.enums import ReservationStatus
from src.domain.exceptions import (
    CustomerNotFoundError,
    ReservationNotFoundError,
    ReservationRuleError,
    TableNotFoundError,
    TableUnavailableError,
)
from src.domain.reservation_validator import ReservationValidator
from src.domain.state_machine import ReservationStateMachine
from src.infrastructure.db.models import CafeTable, Reservation
from src.infrastructure.repositories.customer_repository import CustomerRepository
from src.infrastructure.repositories.reservation_repository import ReservationRepository


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AvailableTable:
    table: CafeTable
    total_price: Decimal


def _overlaps(start_a: time, end_a: time, start_b: time, end_b: time) -> bool:
    return start_a < end_b and start_b < end_a


def _hours_between(start_time: time, end_time: time) -> Decimal:
    delta = datetime.combine(date.min, end_time) - datetime.combine(date.min, start_time)
    return Decimal(int(delta.total_seconds())) / Decimal(3600)


class ReservationService:
    """Table reservations checked against the venue's booking rules."""

    def __init__(self, db: Session):
        self.db = db
        self.reservation_repository = ReservationRepository(db)
        self.customer_repository = CustomerRepository(db)

    def create_reservation(
        self,
        customer_id: str,
        table_id: str,
        reservation_date: date,
        start_time: time,
        end_time: time,
        party_size: int,
        special_requests: str | None = None,
    ) -> Reservation:
        if not self.customer_repository.exists(customer_id):
            raise CustomerNotFoundError(customer_id)

        table = self.reservation_repository.get_table(table_id)
        if not table:
            raise TableNotFoundError(table_id)

        reservation = Reservation(
            customer_id=customer_id,
            table_id=table.id,
            reservation_date=reservation_date,
            start_time=start_time,
            end_time=end_time,
            party_size=party_size,
            status=ReservationStatus.CONFIRMED,
            special_requests=special_requests,
        )

        is_valid, reason = ReservationValidator.validate_reservation(reservation, table)
        if not is_valid:
            raise ReservationRuleError(reason)

        if self.reservation_repository.has_overlap(table.id, reservation_date, start_time, end_time):
            raise TableUnavailableError(
                f"Table {table.table_number} is already reserved for the requested time"
            )

        self.reservation_repository.add(reservation)
        self.db.flush()

        logger.info(
            "Reservation confirmed. reservation_id=%s table=%s date=%s %s-%s",
            reservation.id,
            table.table_number,
            reservation_date.isoformat(),
            start_time.strftime("%H:%M"),
            end_time.strftime("%H:%M"),
        )
        return reservation

    def get_reservation(self, reservation_id: str) -> Reservation:
        reservation = self.reservation_repository.get_by_id(reservation_id)
        if not reservation:
            raise ReservationNotFoundError(reservation_id)
        return reservation

    def list_for_customer(self, customer_id: str) -> list[Reservation]:
        return self.reservation_repository.list_for_customer(customer_id)

    def update_reservation(
        self,
        reservation_id: str,
        table_id: str | None = None,
        reservation_date: date | None = None,
        start_time: time | None = None,
        end_time: time | None = None,
        party_size: int | None = None,
        special_requests: str | None = None,
    ) -> Reservation:
        """
        Applies the given fields on top of the stored reservation and runs
        the full rule set again. The reservation itself never counts as a
        clash with its own slot.
        """
        reservation = self.get_reservation(reservation_id)
        if ReservationStateMachine.is_terminal(reservation.status):
            raise ReservationRuleError(
                f"Cannot modify a reservation that is {reservation.status.value.lower()}"
            )

        table = self.reservation_repository.get_table(table_id or reservation.table_id)
        if not table:
            raise TableNotFoundError(table_id or reservation.table_id)

        candidate = Reservation(
            reservation_date=reservation_date or reservation.reservation_date,
            start_time=start_time or reservation.start_time,
            end_time=end_time or reservation.end_time,
            party_size=party_size if party_size is not None else reservation.party_size,
        )
        is_valid, reason = ReservationValidator.validate_reservation(candidate, table)
        if not is_valid:
            raise ReservationRuleError(reason)

        clash = self.reservation_repository.has_overlap(
            table.id,
            candidate.reservation_date,
            candidate.start_time,
            candidate.end_time,
            exclude_id=reservation.id,
        )
        if clash:
            raise TableUnavailableError(
                f"Table {table.table_number} is already reserved for the requested time"
            )

        reservation.table_id = table.id
        reservation.reservation_date = candidate.reservation_date
        reservation.start_time = candidate.start_time
        reservation.end_time = candidate.end_time
        reservation.party_size = candidate.party_size
        if special_requests is not None:
            reservation.special_requests = special_requests
        self.db.flush()

        logger.info("Reservation updated. reservation_id=%s table=%s", reservation.id, table.table_number)
        return reservation

    def cancel_reservation(self, reservation_id: str) -> Reservation:
        reservation = self.get_reservation(reservation_id)

        ReservationStateMachine.validate_transition(reservation.status, ReservationStatus.CANCELLED)
        reservation.status = ReservationStatus.CANCELLED
        self.db.flush()

        logger.info("Reservation cancelled. reservation_id=%s", reservation.id)
        return reservation

    def check_in(self, reservation_id: str) -> Reservation:
        reservation = self.get_reservation(reservation_id)

        if reservation.status == ReservationStatus.CANCELLED:
            raise ReservationRuleError("Cannot check in cancelled reservation")
        if reservation.status == ReservationStatus.CHECKED_IN:
            raise ReservationRuleError("Reservation is already checked in")

        ReservationStateMachine.validate_transition(reservation.status, ReservationStatus.CHECKED_IN)
        reservation.status = ReservationStatus.CHECKED_IN

        customer = self.customer_repository.get_by_id(reservation.customer_id)
        customer.total_visits += 1
        self.db.flush()

        logger.info(
            "Reservation checked in. reservation_id=%s customer_id=%s total_visits=%s",
            reservation.id,
            customer.id,
            customer.total_visits,
        )
        return reservation

    def find_available_tables(
        self,
        reservation_date: date,
        start_time: time,
        end_time: time,
        party_size: int,
    ) -> list[AvailableTable]:
        """
        Active tables that seat the party and are free for the whole slot,
        cheapest first.
        """
        if not ReservationValidator.validate_future_date(reservation_date):
            raise ReservationRuleError("Reservation date must be today or in the future")
        if start_time >= end_time:
            raise ReservationRuleError("Start time must be before end time")
        if party_size < 1:
            raise ReservationRuleError("Party size must be at least 1")

        tables = self.reservation_repository.list_active_tables(min_capacity=party_size)
        holding = self.reservation_repository.list_holding_reservations(reservation_date)
        hours = _hours_between(start_time, end_time)

        available = []
        for table in tables:
            clash = any(
                reservation.table_id == table.id
                and _overlaps(start_time, end_time, reservation.start_time, reservation.end_time)
                for reservation in holding
            )
            if clash:
                continue
            price = (table.hourly_rate * hours).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
            available.append(AvailableTable(table=table, total_price=price))

        return sorted(available, key=lambda item: item.total_price)
