# tests/unit/test_state_machine.py

import pytest

from src.domain.enums import ReservationStatus
from src.domain.state_machine import (
    OrderStateMachine,
    OrderStatus,
    RegistrationStateMachine,
    RegistrationStatus,
    ReservationStateMachine,
)
from src.domain.exceptions import InvalidStateTransitionError


# ---------------------
# REGISTRATIONS
# ---------------------

def test_registration_can_be_attended_or_cancelled():
    assert RegistrationStateMachine.can_transition(
        RegistrationStatus.REGISTERED,
        RegistrationStatus.ATTENDED,
    )

    assert RegistrationStateMachine.can_transition(
        RegistrationStatus.REGISTERED,
        RegistrationStatus.CANCELLED,
    )


def test_cancelled_registration_is_terminal():
    # Re-registering creates a new row instead of reviving the old one.
    assert RegistrationStateMachine.is_terminal(RegistrationStatus.CANCELLED)

    with pytest.raises(InvalidStateTransitionError):
        RegistrationStateMachine.validate_transition(
            RegistrationStatus.CANCELLED,
            RegistrationStatus.REGISTERED,
        )


def test_attended_registration_cannot_be_cancelled():
    with pytest.raises(InvalidStateTransitionError):
        RegistrationStateMachine.validate_transition(
            RegistrationStatus.ATTENDED,
            RegistrationStatus.CANCELLED,
        )


# ---------------------
# ORDERS
# ---------------------

def test_order_happy_path():
    assert OrderStateMachine.can_transition(OrderStatus.DRAFT, OrderStatus.SUBMITTED)
    assert OrderStateMachine.can_transition(OrderStatus.SUBMITTED, OrderStatus.COMPLETED)


def test_order_cannot_skip_submission():
    with pytest.raises(InvalidStateTransitionError):
        OrderStateMachine.validate_transition(
            OrderStatus.DRAFT,
            OrderStatus.COMPLETED,
        )


def test_completed_order_is_terminal():
    assert OrderStateMachine.is_terminal(OrderStatus.COMPLETED)
    assert OrderStateMachine.get_allowed_transitions(OrderStatus.DRAFT) == {
        OrderStatus.SUBMITTED,
        OrderStatus.CANCELLED,
    }

    with pytest.raises(InvalidStateTransitionError):
        OrderStateMachine.validate_transition(
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
        )


def test_invalid_type_guard():
    with pytest.raises(TypeError):
        OrderStateMachine.validate_transition(
            "DRAFT",  # invalid type
            OrderStatus.SUBMITTED,
        )

    with pytest.raises(TypeError):
        RegistrationStateMachine.can_transition(
            OrderStatus.DRAFT,  # wrong enum
            RegistrationStatus.CANCELLED,
        )


# ---------------------
# RESERVATIONS
# ---------------------

@pytest.mark.parametrize(
    "status",
    [ReservationStatus.COMPLETED, ReservationStatus.CANCELLED, ReservationStatus.NO_SHOW],
)
def test_closed_reservation_cannot_be_cancelled(status):
    assert ReservationStateMachine.is_terminal(status)

    with pytest.raises(InvalidStateTransitionError):
        ReservationStateMachine.validate_transition(status, ReservationStatus.CANCELLED)


def test_reservation_check_in_path():
    assert ReservationStateMachine.can_transition(
        ReservationStatus.CONFIRMED,
        ReservationStatus.CHECKED_IN,
    )
    assert ReservationStateMachine.get_allowed_transitions(ReservationStatus.CHECKED_IN) == {
        ReservationStatus.COMPLETED,
    }


def test_reservation_machine_rejects_foreign_status():
    with pytest.raises(TypeError):
        ReservationStateMachine.can_transition(OrderStatus.DRAFT, ReservationStatus.CANCELLED)
