

class CafeEngineError(Exception):
    """
    Base exception for all domain-level errors
    inside the Board Game Cafe engine.
    """


class InvalidStateTransitionError(CafeEngineError):
    """
    Raised when an illegal lifecycle transition is attempted.
    """

    def __init__(self, from_state: str, to_state: str):
        self.from_state = from_state
        self.to_state = to_state

        message = (
            f"Illegal state transition attempted: "
            f"{from_state} -> {to_state}"
        )
        super().__init__(message)


# ---------------------
# NOT FOUND
# ---------------------

class NotFoundError(CafeEngineError):
    """Raised when a referenced entity does not exist in the store."""

    entity = "Entity"

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        super().__init__(f"{self.entity} not found")


class CustomerNotFoundError(NotFoundError):
    entity = "Customer"


class EventNotFoundError(NotFoundError):
    entity = "Event"


class RegistrationNotFoundError(NotFoundError):
    entity = "Registration"


class OrderNotFoundError(NotFoundError):
    entity = "Order"


class OrderItemNotFoundError(NotFoundError):
    entity = "Order item"


class MenuItemNotFoundError(NotFoundError):
    entity = "Menu item"


class ReservationNotFoundError(NotFoundError):
    entity = "Reservation"


class TableNotFoundError(NotFoundError):
    entity = "Table"


class GameNotFoundError(NotFoundError):
    entity = "Game"


class GameSessionNotFoundError(NotFoundError):
    entity = "Game session"


# ---------------------
# CONFLICTS
# ---------------------

class ConflictError(CafeEngineError):
    """
    Business rule violated by the current state of the store.
    Terminal for the request; the caller decides whether to retry.
    """

    title = "Conflict"


class AlreadyRegisteredError(ConflictError):
    title = "Already registered"

    def __init__(self):
        super().__init__("Customer is already registered for this event")


class EventFullError(ConflictError):
    title = "Event full"

    def __init__(self):
        super().__init__("This event has reached maximum capacity")


class TableUnavailableError(ConflictError):
    title = "Table unavailable"


class DuplicateGameError(ConflictError):
    title = "Duplicate game"


class GameInUseError(ConflictError):
    title = "Game in use"


class GameUnavailableError(ConflictError):
    title = "Game unavailable"


class DuplicateMenuItemError(ConflictError):
    title = "Duplicate menu item"


# ---------------------
# INVALID REQUESTS
# ---------------------

class InvalidOrderOperationError(CafeEngineError):
    """Raised when an order operation is not allowed for the order as it stands."""


class ReservationRuleError(CafeEngineError):
    """Raised when a reservation breaks one of the venue's booking rules."""


class GameRuleError(CafeEngineError):
    """Raised when game catalog data is inconsistent, e.g. more copies in use than owned."""
