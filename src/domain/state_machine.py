# src/domain/state_machine.py

from enum import Enum
from typing import Dict, Set

from src.domain.enums import ReservationStatus
from src.domain.exceptions import InvalidStateTransitionError


class RegistrationStatus(str, Enum):
    REGISTERED = "REGISTERED"
    ATTENDED = "ATTENDED"
    CANCELLED = "CANCELLED"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    REFUNDED = "REFUNDED"


class OrderStatus(str, Enum):
    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class _LifecycleStateMachine:
    """
    Shared transition checks. Subclasses define the status enum
    and the legal transition table.
    """

    _STATUS_TYPE: type[Enum]
    _ALLOWED_TRANSITIONS: Dict[Enum, Set[Enum]] = {}

    @classmethod
    def can_transition(cls, from_status, to_status) -> bool:
        """
        Returns True if transition is allowed.
        """
        cls._ensure_valid_status(from_status)
        cls._ensure_valid_status(to_status)

        return to_status in cls._ALLOWED_TRANSITIONS.get(from_status, set())

    @classmethod
    def validate_transition(cls, from_status, to_status) -> None:
        """
        Raises InvalidStateTransitionError if transition is illegal.
        """
        if not cls.can_transition(from_status, to_status):
            raise InvalidStateTransitionError(
                from_state=from_status.value,
                to_state=to_status.value,
            )

    @classmethod
    def is_terminal(cls, status) -> bool:
        """
        Returns True if the state is terminal (no further transitions allowed).
        """
        cls._ensure_valid_status(status)
        return len(cls._ALLOWED_TRANSITIONS.get(status, set())) == 0

    @classmethod
    def get_allowed_transitions(cls, status) -> Set[Enum]:
        cls._ensure_valid_status(status)
        return cls._ALLOWED_TRANSITIONS.get(status, set())

    @classmethod
    def _ensure_valid_status(cls, status) -> None:
        if not isinstance(status, cls._STATUS_TYPE):
            raise TypeError(
                f"Expected {cls._STATUS_TYPE.__name__}, got {type(status)}"
            )


class RegistrationStateMachine(_LifecycleStateMachine):
    """
    Lifecycle of a single registration row.

    Re-registering after a cancellation creates a new row,
    so CANCELLED is terminal here.
    """

    _STATUS_TYPE = RegistrationStatus
    _ALLOWED_TRANSITIONS: Dict[RegistrationStatus, Set[RegistrationStatus]] = {
        RegistrationStatus.REGISTERED: {
            RegistrationStatus.ATTENDED,
            RegistrationStatus.CANCELLED,
        },
        RegistrationStatus.ATTENDED: set(),
        RegistrationStatus.CANCELLED: set(),
    }


class OrderStateMachine(_LifecycleStateMachine):
    """
    Central lifecycle controller for order transitions.
    """

    _STATUS_TYPE = OrderStatus
    _ALLOWED_TRANSITIONS: Dict[OrderStatus, Set[OrderStatus]] = {
        OrderStatus.DRAFT: {
            OrderStatus.SUBMITTED,
            OrderStatus.CANCELLED,
        },
        OrderStatus.SUBMITTED: {
            OrderStatus.COMPLETED,
            OrderStatus.CANCELLED,
        },
        OrderStatus.COMPLETED: set(),
        OrderStatus.CANCELLED: set(),
    }


class ReservationStateMachine(_LifecycleStateMachine):
    """
    Reservation lifecycle. COMPLETED, CANCELLED and NO_SHOW are final;
    a guest who has checked in can only complete the visit.
    """

    _STATUS_TYPE = ReservationStatus
    _ALLOWED_TRANSITIONS: Dict[ReservationStatus, Set[ReservationStatus]] = {
        ReservationStatus.PENDING: {
            ReservationStatus.CONFIRMED,
            ReservationStatus.CHECKED_IN,
            ReservationStatus.CANCELLED,
        },
        ReservationStatus.CONFIRMED: {
            ReservationStatus.CHECKED_IN,
            ReservationStatus.CANCELLED,
            ReservationStatus.NO_SHOW,
        },
        ReservationStatus.CHECKED_IN: {
            ReservationStatus.COMPLETED,
        },
        ReservationStatus.COMPLETED: set(),
        ReservationStatus.CANCELLED: set(),
        ReservationStatus.NO_SHOW: set(),
    }
