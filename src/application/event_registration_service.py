import logging

from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.orm import sessionmaker

from src.domain.exceptions import (
    AlreadyRegisteredError,
    CustomerNotFoundError,
    EventFullError,
    EventNotFoundError,
    RegistrationNotFoundError,
)
from src.domain.state_machine import PaymentStatus, RegistrationStateMachine, RegistrationStatus
from src.infrastructure.db.models import EventRegistration
from src.infrastructure.db.session import SERIALIZABLE, SessionLocal, get_db_session
from src.infrastructure.repositories.customer_repository import CustomerRepository
from src.infrastructure.repositories.event_repository import EventRepository
from src.infrastructure.repositories.registration_repository import RegistrationRepository


logger = logging.getLogger(__name__)

PG_UNIQUE_VIOLATION = "23505"


def _is_unique_violation(exc: DBAPIError) -> bool:
    if not isinstance(exc, IntegrityError):
        return False
    if getattr(exc.orig, "pgcode", None) == PG_UNIQUE_VIOLATION:
        return True
    return "unique" in str(exc.orig).lower()


class EventRegistrationService:
    """
    Capacity-checked event registration.

    Every registration attempt against an event runs in a SERIALIZABLE
    transaction, so the capacity check and the insert are ordered against
    all other attempts. A uniqueness violation raised by the store is the
    same outcome as the duplicate pre-check; any other store failure is
    rolled back and re-raised. Nothing is retried here.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal):
        self.session_factory = session_factory

    def register(self, event_id: str, customer_id: str) -> EventRegistration:
        with get_db_session(self.session_factory) as db:
            if not CustomerRepository(db).exists(customer_id):
                raise CustomerNotFoundError(customer_id)

        try:
            with get_db_session(self.session_factory, isolation_level=SERIALIZABLE) as db:
                registration = self._register_in_transaction(db, event_id, customer_id)
        except DBAPIError as exc:
            if not _is_unique_violation(exc):
                logger.exception(
                    "Registration failed with store error. event_id=%s customer_id=%s",
                    event_id,
                    customer_id,
                )
                raise
            logger.warning(
                "Duplicate registration rejected by store. event_id=%s customer_id=%s",
                event_id,
                customer_id,
            )
            raise AlreadyRegisteredError() from exc

        logger.info(
            "Customer registered for event. event_id=%s customer_id=%s registration_id=%s",
            event_id,
            customer_id,
            registration.id,
        )
        return registration

    def cancel(self, event_id: str, customer_id: str) -> EventRegistration:
        """
        Cancels the customer's active registration. The freed slot goes
        to whichever registration attempt commits next; there is no waitlist.
        """
        with get_db_session(self.session_factory) as db:
            repository = RegistrationRepository(db)
            registration = repository.find_active(event_id, customer_id)
            if not registration:
                raise RegistrationNotFoundError(f"{event_id}:{customer_id}")

            RegistrationStateMachine.validate_transition(
                registration.status,
                RegistrationStatus.CANCELLED,
            )
            repository.update_status(registration, RegistrationStatus.CANCELLED)

        logger.info(
            "Registration cancelled. event_id=%s customer_id=%s registration_id=%s",
            event_id,
            customer_id,
            registration.id,
        )
        return registration

    def list_participants(self, event_id: str) -> list[EventRegistration]:
        with get_db_session(self.session_factory) as db:
            if not EventRepository(db).exists(event_id):
                raise EventNotFoundError(event_id)
            return RegistrationRepository(db).list_for_event(event_id)

    def _register_in_transaction(self, db, event_id: str, customer_id: str) -> EventRegistration:
        event = EventRepository(db).get_with_registrations(event_id)
        if not event:
            raise EventNotFoundError(event_id)

        already_registered = any(
            registration.customer_id == customer_id
            and registration.status != RegistrationStatus.CANCELLED
            for registration in event.registrations
        )
        if already_registered:
            raise AlreadyRegisteredError()

        if event.current_participants >= event.max_participants:
            raise EventFullError()

        customer = CustomerRepository(db).get_by_id(customer_id)
        if not customer:
            raise CustomerNotFoundError(customer_id)

        payment_status = PaymentStatus.PENDING if event.ticket_price > 0 else PaymentStatus.PAID
        registration = RegistrationRepository(db).create_registration(
            event_id=event.id,
            customer_id=customer.id,
            payment_status=payment_status,
        )
        # Loaded here so the caller can read it after the session closes.
        registration.customer = customer
        db.flush()
        return registration
