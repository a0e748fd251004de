# src/domain/reservation_validator.py

from datetime import date, datetime, time
from typing import Optional, Tuple


MIN_PARTY_SIZE = 1
MAX_PARTY_SIZE = 20
BUSINESS_HOURS_START = time(10, 0)
BUSINESS_HOURS_END = time(22, 0)


def _as_date(value: date | datetime) -> date:
    if isinstance(value, datetime):
        return value.date()
    return value


class ReservationValidator:
    """
    Static booking rules for a single reservation.
    No I/O and no shared state; every check is a pure function of its inputs.
    """

    @classmethod
    def validate_party_size(cls, party_size: int) -> bool:
        return MIN_PARTY_SIZE <= party_size <= MAX_PARTY_SIZE

    @classmethod
    def validate_future_date(
        cls,
        reservation_date: date | datetime,
        reference_date: date | datetime | None = None,
    ) -> bool:
        """
        Same-day reservations are allowed.
        """
        check_date = _as_date(reference_date) if reference_date is not None else date.today()
        return _as_date(reservation_date) >= check_date

    @classmethod
    def validate_time_range(cls, start_time: time, end_time: time) -> bool:
        """
        Start must come before end, and both must fall inside
        business hours. The boundaries themselves are allowed.
        """
        if start_time >= end_time:
            return False

        return start_time >= BUSINESS_HOURS_START and end_time <= BUSINESS_HOURS_END

    @classmethod
    def validate_table_capacity(cls, table, party_size: int) -> bool:
        if table is None:
            raise ValueError("table is required")

        return table.seating_capacity >= party_size

    @classmethod
    def validate_reservation(
        cls,
        reservation,
        table=None,
        *,
        reference_date: date | None = None,
    ) -> Tuple[bool, Optional[str]]:
        """
        Runs every rule in order and returns the first failing reason.

        Order: party size -> future date -> business hours -> table capacity.
        The table check is skipped when no table is supplied.
        """
        if reservation is None:
            raise ValueError("reservation is required")

        if not cls.validate_party_size(reservation.party_size):
            return False, f"Party size must be between {MIN_PARTY_SIZE} and {MAX_PARTY_SIZE}"

        if not cls.validate_future_date(reservation.reservation_date, reference_date):
            return False, "Reservation date must be today or in the future"

        if not cls.validate_time_range(reservation.start_time, reservation.end_time):
            return False, (
                "Reservation must be within business hours "
                f"({BUSINESS_HOURS_START:%H:%M} - {BUSINESS_HOURS_END:%H:%M})"
            )

        if table is not None and not cls.validate_table_capacity(table, reservation.party_size):
            return False, (
                f"Table capacity ({table.seating_capacity}) is insufficient "
                f"for party size ({reservation.party_size})"
            )

        return True, None
