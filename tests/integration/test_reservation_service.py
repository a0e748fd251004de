from datetime import date, time, timedelta
from decimal import Decimal

import pytest

from src.application.reservation_service import ReservationService
from src.domain.enums import ReservationStatus
from src.domain.exceptions import (
    CustomerNotFoundError,
    InvalidStateTransitionError,
    ReservationNotFoundError,
    ReservationRuleError,
    TableNotFoundError,
    TableUnavailableError,
)
from src.infrastructure.db.models import Reservation


TOMORROW = date.today() + timedelta(days=1)


def _book(service, customer, table, start, end, party_size=2):
    return service.create_reservation(
        customer_id=customer.id,
        table_id=table.id,
        reservation_date=TOMORROW,
        start_time=start,
        end_time=end,
        party_size=party_size,
    )


def test_create_reservation_confirms(db, make_customer, make_table):
    reservation = _book(ReservationService(db), make_customer(), make_table(), time(18, 0), time(20, 0))

    assert reservation.status == ReservationStatus.CONFIRMED
    assert reservation.id is not None


def test_overlapping_slot_is_rejected(db, make_customer, make_table):
    service = ReservationService(db)
    customer = make_customer()
    table = make_table()
    _book(service, customer, table, time(18, 0), time(20, 0))

    with pytest.raises(TableUnavailableError):
        _book(service, customer, table, time(19, 0), time(21, 0))

    # back-to-back slots share only the boundary
    _book(service, customer, table, time(20, 0), time(22, 0))


def test_cancelled_reservation_releases_table(db, make_customer, make_table):
    service = ReservationService(db)
    customer = make_customer()
    table = make_table()
    first = _book(service, customer, table, time(12, 0), time(14, 0))

    service.cancel_reservation(first.id)
    second = _book(service, customer, table, time(12, 0), time(14, 0))

    assert second.status == ReservationStatus.CONFIRMED


def test_rule_violations_carry_reason(db, make_customer, make_table):
    service = ReservationService(db)
    customer = make_customer()
    small = make_table(seating_capacity=2)
    regular = make_table()

    with pytest.raises(ReservationRuleError) as exc_info:
        _book(service, customer, small, time(18, 0), time(20, 0), party_size=5)
    assert str(exc_info.value) == "Table capacity (2) is insufficient for party size (5)"

    with pytest.raises(ReservationRuleError):
        _book(service, customer, regular, time(8, 0), time(9, 0))


def test_missing_customer_or_table(db, make_customer, make_table):
    service = ReservationService(db)
    customer = make_customer()
    table = make_table()

    with pytest.raises(CustomerNotFoundError):
        service.create_reservation("missing", table.id, TOMORROW, time(12, 0), time(13, 0), 2)

    with pytest.raises(TableNotFoundError):
        service.create_reservation(customer.id, "missing", TOMORROW, time(12, 0), time(13, 0), 2)


def test_available_tables_cheapest_first(db, make_customer, make_table):
    service = ReservationService(db)
    small = make_table(seating_capacity=2, hourly_rate=Decimal("5.00"))
    large = make_table(seating_capacity=6, hourly_rate=Decimal("12.00"))
    medium = make_table(seating_capacity=4, hourly_rate=Decimal("8.00"))
    booked = make_table(seating_capacity=4, hourly_rate=Decimal("7.00"))
    _book(service, make_customer(), booked, time(17, 0), time(19, 0))

    available = service.find_available_tables(TOMORROW, time(18, 0), time(20, 0), party_size=3)

    assert [item.table.id for item in available] == [medium.id, large.id]
    assert available[0].total_price == Decimal("16.00")
    assert small.id not in {item.table.id for item in available}


def test_availability_rejects_bad_window(db):
    service = ReservationService(db)

    with pytest.raises(ReservationRuleError):
        service.find_available_tables(date.today() - timedelta(days=1), time(12, 0), time(13, 0), 2)

    with pytest.raises(ReservationRuleError):
        service.find_available_tables(TOMORROW, time(14, 0), time(13, 0), 2)


@pytest.mark.parametrize(
    "status",
    [ReservationStatus.COMPLETED, ReservationStatus.NO_SHOW, ReservationStatus.CANCELLED],
)
def test_closed_reservation_cannot_be_cancelled(db, make_customer, make_table, make_reservation, status):
    reservation = make_reservation(make_customer(), make_table(), status=status)

    with pytest.raises(InvalidStateTransitionError):
        ReservationService(db).cancel_reservation(reservation.id)

    assert db.get(Reservation, reservation.id).status == status


def test_update_moves_slot_and_keeps_own_overlap(db, make_customer, make_table):
    service = ReservationService(db)
    customer = make_customer()
    table = make_table(seating_capacity=4)
    other_table = make_table(seating_capacity=6)
    reservation = _book(service, customer, table, time(18, 0), time(20, 0))
    reservation.special_requests = "Near the window"

    # overlaps only itself
    updated = service.update_reservation(reservation.id, start_time=time(19, 0), end_time=time(21, 0))
    assert (updated.start_time, updated.end_time) == (time(19, 0), time(21, 0))
    assert updated.special_requests == "Near the window"

    updated = service.update_reservation(
        reservation.id,
        table_id=other_table.id,
        party_size=6,
        special_requests="Birthday",
    )
    assert updated.table_id == other_table.id
    assert updated.party_size == 6
    assert updated.special_requests == "Birthday"


def test_update_is_revalidated(db, make_customer, make_table):
    service = ReservationService(db)
    customer = make_customer()
    table = make_table(seating_capacity=4)
    first = _book(service, customer, table, time(12, 0), time(14, 0))
    second = _book(service, customer, table, time(16, 0), time(18, 0))

    with pytest.raises(TableUnavailableError):
        service.update_reservation(second.id, start_time=time(13, 0))

    with pytest.raises(ReservationRuleError) as exc_info:
        service.update_reservation(first.id, party_size=5)
    assert str(exc_info.value) == "Table capacity (4) is insufficient for party size (5)"

    with pytest.raises(TableNotFoundError):
        service.update_reservation(first.id, table_id="missing")

    with pytest.raises(ReservationNotFoundError):
        service.update_reservation("missing", party_size=2)


def test_check_in_counts_a_visit(db, make_customer, make_table, make_reservation):
    customer = make_customer()
    table = make_table()
    confirmed = make_reservation(customer, table)
    cancelled = make_reservation(customer, table, status=ReservationStatus.CANCELLED, days_ahead=2)
    finished = make_reservation(customer, table, status=ReservationStatus.COMPLETED, days_ahead=3)
    service = ReservationService(db)

    checked_in = service.check_in(confirmed.id)

    assert checked_in.status == ReservationStatus.CHECKED_IN
    assert service.customer_repository.get_by_id(customer.id).total_visits == 1

    with pytest.raises(ReservationRuleError, match="already checked in"):
        service.check_in(confirmed.id)

    with pytest.raises(ReservationRuleError, match="cancelled"):
        service.check_in(cancelled.id)

    with pytest.raises(InvalidStateTransitionError):
        service.check_in(finished.id)


def test_customer_reservations_newest_first(db, make_customer, make_table, make_reservation):
    customer = make_customer()
    table = make_table()
    later = make_reservation(customer, table, days_ahead=5)
    early_evening = make_reservation(customer, table, start_time=time(12, 0), end_time=time(13, 0))
    late_evening = make_reservation(customer, table, start_time=time(19, 0), end_time=time(21, 0))
    make_reservation(make_customer(), table, days_ahead=4)

    reservations = ReservationService(db).list_for_customer(customer.id)

    assert [item.id for item in reservations] == [later.id, late_evening.id, early_evening.id]
