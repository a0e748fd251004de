from datetime import date, datetime, time, timezone
from decimal import Decimal

from fastapi import APIRouter, Depends, HTTPException, Query, Response, status
from sqlalchemy.orm import Session

from src.infrastructure.db.session import SessionLocal
from src.application.customer_service import CustomerService
from src.application.event_registration_service import EventRegistrationService
from src.application.game_service import GameService
from src.application.menu_service import MenuService
from src.application.order_service import OrderService
from src.application.reservation_service import ReservationService
from src.api.schemas.schemas import (
    AddOrderItemRequest,
    AvailableTableResponse,
    CustomerProfileResponse,
    CustomerProfileUpdate,
    EventCreate,
    EventRegistrationRequest,
    EventRegistrationResponse,
    EventResponse,
    GameCheckoutRequest,
    GameCreate,
    GameResponse,
    GameReturnRequest,
    GameSessionResponse,
    GameUpdate,
    LoyaltyPointsResponse,
    LoyaltyTransactionResponse,
    MenuCategoryResponse,
    MenuItemCreate,
    MenuItemResponse,
    OrderCreate,
    OrderItemResponse,
    OrderResponse,
    PayOrderRequest,
    ReservationCheckRequest,
    ReservationCheckResponse,
    ReservationCreate,
    ReservationResponse,
    ReservationUpdate,
    SubmitOrderRequest,
    VisitStatsResponse,
)
from src.domain.exceptions import (
    ConflictError,
    GameRuleError,
    InvalidOrderOperationError,
    InvalidStateTransitionError,
    NotFoundError,
    ReservationRuleError,
)
from src.domain.enums import GameCategory, MenuCategory
from src.domain.order_calculator import tier_progress
from src.domain.reservation_validator import ReservationValidator
from src.infrastructure.db.models import (
    Customer,
    Event,
    EventRegistration,
    Game,
    GameSession,
    MenuItem,
    Order,
    Reservation,
)
from src.infrastructure.repositories.customer_repository import CustomerRepository
from src.infrastructure.repositories.event_repository import EventRepository
from src.infrastructure.repositories.game_repository import GameFilter
from src.infrastructure.repositories.menu_repository import MenuFilter
from src.infrastructure.repositories.reservation_repository import ReservationRepository


router = APIRouter()


def get_db():
    db = SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


def get_registration_service() -> EventRegistrationService:
    return EventRegistrationService(SessionLocal)


def _not_found(exc: NotFoundError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail=str(exc),
    )


def _event_response(event: Event) -> EventResponse:
    return EventResponse(
        id=event.id,
        title=event.title,
        description=event.description,
        event_type=event.event_type.value,
        event_date=event.event_date.isoformat(),
        duration_minutes=event.duration_minutes,
        max_participants=event.max_participants,
        current_participants=event.current_participants,
        ticket_price=event.ticket_price,
    )


def _registration_response(
    registration: EventRegistration,
    with_customer: bool = False,
) -> EventRegistrationResponse:
    customer = registration.customer if with_customer else None
    return EventRegistrationResponse(
        id=registration.id,
        event_id=registration.event_id,
        customer_id=registration.customer_id,
        customer_name=customer.full_name if customer else None,
        customer_email=customer.email if customer else None,
        registered_at=registration.registered_at.isoformat(),
        status=registration.status.value,
        payment_status=registration.payment_status.value,
    )


def _order_response(order: Order) -> OrderResponse:
    return OrderResponse(
        id=order.id,
        customer_id=order.customer_id,
        reservation_id=order.reservation_id,
        status=order.status.value,
        subtotal=order.subtotal,
        discount_amount=order.discount_amount,
        tax_amount=order.tax_amount,
        total_amount=order.total_amount,
        loyalty_points_redeemed=order.loyalty_points_redeemed,
        payment_method=order.payment_method.value if order.payment_method else None,
        items=[
            OrderItemResponse(
                id=item.id,
                menu_item_id=item.menu_item_id,
                menu_item_name=item.menu_item.name,
                category=item.menu_item.category.value,
                quantity=item.quantity,
                unit_price=item.unit_price,
                special_instructions=item.special_instructions,
            )
            for item in order.items
        ],
    )


def _reservation_response(reservation: Reservation) -> ReservationResponse:
    return ReservationResponse(
        id=reservation.id,
        customer_id=reservation.customer_id,
        table_id=reservation.table_id,
        reservation_date=reservation.reservation_date,
        start_time=reservation.start_time,
        end_time=reservation.end_time,
        party_size=reservation.party_size,
        status=reservation.status.value,
        special_requests=reservation.special_requests,
    )


def _game_response(game: Game) -> GameResponse:
    return GameResponse(
        id=game.id,
        title=game.title,
        publisher=game.publisher,
        min_players=game.min_players,
        max_players=game.max_players,
        play_time_minutes=game.play_time_minutes,
        age_rating=game.age_rating,
        complexity=game.complexity,
        category=game.category.value,
        copies_owned=game.copies_owned,
        copies_in_use=game.copies_in_use,
        daily_rental_fee=game.daily_rental_fee,
        description=game.description,
        image_url=game.image_url,
        is_available=game.is_available,
    )


def _game_session_response(game_session: GameSession) -> GameSessionResponse:
    return GameSessionResponse(
        id=game_session.id,
        game_id=game_session.game_id,
        game_title=game_session.game.title,
        reservation_id=game_session.reservation_id,
        checked_out_at=game_session.checked_out_at.isoformat(),
        due_back_at=game_session.due_back_at.isoformat() if game_session.due_back_at else None,
        returned_at=game_session.returned_at.isoformat() if game_session.returned_at else None,
        condition=game_session.condition.value if game_session.condition else None,
        late_fee_applied=game_session.late_fee_applied,
    )


def _menu_item_response(item: MenuItem) -> MenuItemResponse:
    return MenuItemResponse(
        id=item.id,
        name=item.name,
        description=item.description,
        category=item.category.value,
        price=item.price,
        is_available=item.is_available,
        preparation_time_minutes=item.preparation_time_minutes,
        allergen_info=item.allergen_info,
        is_vegetarian=item.is_vegetarian,
        is_vegan=item.is_vegan,
        is_gluten_free=item.is_gluten_free,
    )


def _profile_response(customer: Customer) -> CustomerProfileResponse:
    return CustomerProfileResponse(
        id=customer.id,
        email=customer.email,
        first_name=customer.first_name,
        last_name=customer.last_name,
        phone=customer.phone,
        membership_tier=customer.membership_tier.value,
        loyalty_points=customer.loyalty_points,
        joined_at=customer.joined_at.isoformat(),
        total_visits=customer.total_visits,
    )


@router.get("/health")
def health():
    return {"message": "Board Game Cafe engine is running"}


# ---------------------
# EVENTS
# ---------------------

@router.get("/events", response_model=list[EventResponse])
def list_upcoming_events(db: Session = Depends(get_db)):
    events = EventRepository(db).list_upcoming(datetime.now(timezone.utc))
    return [_event_response(event) for event in events]


@router.post("/events", response_model=EventResponse, status_code=status.HTTP_201_CREATED)
def create_event(request: EventCreate, db: Session = Depends(get_db)):
    if request.event_date <= datetime.now(request.event_date.tzinfo):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Event date must be in the future",
        )

    event = EventRepository(db).add(
        Event(
            title=request.title,
            description=request.description,
            event_type=request.event_type,
            event_date=request.event_date,
            duration_minutes=request.duration_minutes,
            max_participants=request.max_participants,
            ticket_price=request.ticket_price,
        )
    )
    db.flush()
    event = EventRepository(db).get_with_registrations(event.id)
    return _event_response(event)


@router.get("/events/{event_id}", response_model=EventResponse)
def get_event(event_id: str, db: Session = Depends(get_db)):
    event = EventRepository(db).get_with_registrations(event_id)
    if not event:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Event not found",
        )
    return _event_response(event)


@router.post(
    "/events/{event_id}/register",
    response_model=EventRegistrationResponse,
    status_code=status.HTTP_201_CREATED,
)
def register_for_event(
    event_id: str,
    request: EventRegistrationRequest,
    service: EventRegistrationService = Depends(get_registration_service),
):
    try:
        registration = service.register(event_id=event_id, customer_id=request.customer_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=exc.title,
        ) from exc

    return _registration_response(registration, with_customer=True)


@router.delete("/events/{event_id}/register", status_code=status.HTTP_204_NO_CONTENT)
def cancel_event_registration(
    event_id: str,
    customer_id: str,
    service: EventRegistrationService = Depends(get_registration_service),
):
    try:
        service.cancel(event_id=event_id, customer_id=customer_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except InvalidStateTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/events/{event_id}/participants", response_model=list[EventRegistrationResponse])
def list_event_participants(
    event_id: str,
    service: EventRegistrationService = Depends(get_registration_service),
):
    try:
        registrations = service.list_participants(event_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc

    return [_registration_response(item, with_customer=True) for item in registrations]


# ---------------------
# ORDERS
# ---------------------

@router.post("/orders", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
def create_order(request: OrderCreate, db: Session = Depends(get_db)):
    try:
        order = OrderService(db).create_order(
            customer_id=request.customer_id,
            reservation_id=request.reservation_id,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _order_response(order)


@router.get("/orders/{order_id}", response_model=OrderResponse)
def get_order(order_id: str, db: Session = Depends(get_db)):
    try:
        order = OrderService(db).get_order(order_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _order_response(order)


@router.post("/orders/{order_id}/items", response_model=OrderResponse)
def add_order_item(
    order_id: str,
    request: AddOrderItemRequest,
    db: Session = Depends(get_db),
):
    try:
        order = OrderService(db).add_item(
            order_id=order_id,
            menu_item_id=request.menu_item_id,
            quantity=request.quantity,
            special_instructions=request.special_instructions,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except InvalidOrderOperationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _order_response(order)


@router.delete("/orders/{order_id}/items/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_order_item(order_id: str, item_id: str, db: Session = Depends(get_db)):
    try:
        OrderService(db).remove_item(order_id=order_id, item_id=item_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except InvalidOrderOperationError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post("/orders/{order_id}/submit", response_model=OrderResponse)
def submit_order(
    order_id: str,
    request: SubmitOrderRequest,
    db: Session = Depends(get_db),
):
    try:
        order = OrderService(db).submit_order(
            order_id=order_id,
            loyalty_points_to_redeem=request.loyalty_points_to_redeem,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except (InvalidOrderOperationError, InvalidStateTransitionError, ValueError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _order_response(order)


@router.post("/orders/{order_id}/pay", response_model=OrderResponse)
def pay_order(
    order_id: str,
    request: PayOrderRequest,
    db: Session = Depends(get_db),
):
    try:
        order = OrderService(db).pay_order(
            order_id=order_id,
            payment_method=request.payment_method,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except (InvalidOrderOperationError, InvalidStateTransitionError) as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _order_response(order)


@router.post("/orders/{order_id}/cancel", response_model=OrderResponse)
def cancel_order(order_id: str, db: Session = Depends(get_db)):
    try:
        order = OrderService(db).cancel_order(order_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except InvalidStateTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _order_response(order)


# ---------------------
# RESERVATIONS
# ---------------------

@router.get("/reservations/availability", response_model=list[AvailableTableResponse])
def get_table_availability(
    reservation_date: date,
    start_time: time,
    end_time: time,
    party_size: int,
    db: Session = Depends(get_db),
):
    try:
        available = ReservationService(db).find_available_tables(
            reservation_date=reservation_date,
            start_time=start_time,
            end_time=end_time,
            party_size=party_size,
        )
    except ReservationRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    return [
        AvailableTableResponse(
            id=item.table.id,
            table_number=item.table.table_number,
            seating_capacity=item.table.seating_capacity,
            is_window_seat=item.table.is_window_seat,
            hourly_rate=item.table.hourly_rate,
            total_price=item.total_price,
        )
        for item in available
    ]


@router.post("/reservations/validate", response_model=ReservationCheckResponse)
def validate_reservation(request: ReservationCheckRequest, db: Session = Depends(get_db)):
    table = None
    if request.table_id:
        table = ReservationRepository(db).get_table(request.table_id)
        if not table:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Table not found",
            )

    is_valid, reason = ReservationValidator.validate_reservation(request, table)
    return ReservationCheckResponse(is_valid=is_valid, reason=reason)


@router.post("/reservations", response_model=ReservationResponse, status_code=status.HTTP_201_CREATED)
def create_reservation(request: ReservationCreate, db: Session = Depends(get_db)):
    try:
        reservation = ReservationService(db).create_reservation(
            customer_id=request.customer_id,
            table_id=request.table_id,
            reservation_date=request.reservation_date,
            start_time=request.start_time,
            end_time=request.end_time,
            party_size=request.party_size,
            special_requests=request.special_requests,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ReservationRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _reservation_response(reservation)


@router.delete("/reservations/{reservation_id}", status_code=status.HTTP_204_NO_CONTENT)
def cancel_reservation(reservation_id: str, db: Session = Depends(get_db)):
    try:
        ReservationService(db).cancel_reservation(reservation_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except InvalidStateTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/reservations", response_model=list[ReservationResponse])
def list_reservations(customer_id: str, db: Session = Depends(get_db)):
    reservations = ReservationService(db).list_for_customer(customer_id)
    return [_reservation_response(reservation) for reservation in reservations]


@router.get("/reservations/{reservation_id}", response_model=ReservationResponse)
def get_reservation(reservation_id: str, db: Session = Depends(get_db)):
    try:
        reservation = ReservationService(db).get_reservation(reservation_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _reservation_response(reservation)


@router.put("/reservations/{reservation_id}", response_model=ReservationResponse)
def update_reservation(
    reservation_id: str,
    request: ReservationUpdate,
    db: Session = Depends(get_db),
):
    try:
        reservation = ReservationService(db).update_reservation(
            reservation_id,
            **request.model_dump(),
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ReservationRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _reservation_response(reservation)


@router.post("/reservations/{reservation_id}/check-in", response_model=ReservationResponse)
def check_in_reservation(reservation_id: str, db: Session = Depends(get_db)):
    try:
        reservation = ReservationService(db).check_in(reservation_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ReservationRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except InvalidStateTransitionError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _reservation_response(reservation)


@router.get(
    "/reservations/{reservation_id}/game-sessions",
    response_model=list[GameSessionResponse],
)
def list_game_sessions(reservation_id: str, db: Session = Depends(get_db)):
    try:
        sessions = GameService(db).list_sessions_for_reservation(reservation_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return [_game_session_response(item) for item in sessions]


@router.post(
    "/reservations/{reservation_id}/game-sessions",
    response_model=GameSessionResponse,
    status_code=status.HTTP_201_CREATED,
)
def check_out_game(
    reservation_id: str,
    request: GameCheckoutRequest,
    db: Session = Depends(get_db),
):
    try:
        game_session = GameService(db).check_out(
            game_id=request.game_id,
            reservation_id=reservation_id,
            due_back_at=request.due_back_at,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _game_session_response(game_session)


@router.post("/game-sessions/{session_id}/return", response_model=GameSessionResponse)
def return_game(
    session_id: str,
    request: GameReturnRequest,
    db: Session = Depends(get_db),
):
    try:
        game_session = GameService(db).return_game(
            session_id,
            condition=request.condition,
            returned_at=request.returned_at,
        )
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except GameRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    return _game_session_response(game_session)


# ---------------------
# GAMES
# ---------------------

@router.get("/games", response_model=list[GameResponse])
def list_games(
    category: GameCategory | None = None,
    player_count: int | None = Query(default=None, gt=0),
    min_player_count: int | None = Query(default=None, gt=0),
    max_player_count: int | None = Query(default=None, gt=0),
    available_only: bool = False,
    page: int = Query(default=1, ge=1),
    page_size: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
):
    filters = GameFilter(
        category=category,
        player_count=player_count,
        min_player_count=min_player_count,
        max_player_count=max_player_count,
        available_only=available_only,
    )
    games = GameService(db).list_games(filters, page=page, page_size=page_size)
    return [_game_response(game) for game in games]


@router.get("/games/{game_id}", response_model=GameResponse)
def get_game(game_id: str, db: Session = Depends(get_db)):
    try:
        game = GameService(db).get_game(game_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _game_response(game)


@router.post("/games", response_model=GameResponse, status_code=status.HTTP_201_CREATED)
def create_game(request: GameCreate, db: Session = Depends(get_db)):
    try:
        game = GameService(db).create_game(**request.model_dump())
    except GameRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _game_response(game)


@router.put("/games/{game_id}", response_model=GameResponse)
def update_game(game_id: str, request: GameUpdate, db: Session = Depends(get_db)):
    try:
        game = GameService(db).update_game(game_id, **request.model_dump())
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except GameRuleError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _game_response(game)


@router.delete("/games/{game_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_game(game_id: str, db: Session = Depends(get_db)):
    try:
        GameService(db).delete_game(game_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------
# MENU
# ---------------------

@router.get("/menu", response_model=list[MenuItemResponse])
def list_menu(
    category: MenuCategory | None = None,
    is_vegetarian: bool | None = None,
    is_vegan: bool | None = None,
    is_gluten_free: bool | None = None,
    available_only: bool = False,
    min_price: Decimal | None = Query(default=None, ge=0),
    max_price: Decimal | None = Query(default=None, ge=0),
    db: Session = Depends(get_db),
):
    filters = MenuFilter(
        category=category,
        is_vegetarian=is_vegetarian,
        is_vegan=is_vegan,
        is_gluten_free=is_gluten_free,
        available_only=available_only,
        min_price=min_price,
        max_price=max_price,
    )
    return [_menu_item_response(item) for item in MenuService(db).list_items(filters)]


@router.get("/menu/categories", response_model=list[MenuCategoryResponse])
def list_menu_categories():
    return [
        MenuCategoryResponse(value=category.value, name=category.value.title())
        for category in MenuCategory
    ]


@router.get("/menu/{menu_item_id}", response_model=MenuItemResponse)
def get_menu_item(menu_item_id: str, db: Session = Depends(get_db)):
    try:
        item = MenuService(db).get_item(menu_item_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _menu_item_response(item)


@router.post("/menu", response_model=MenuItemResponse, status_code=status.HTTP_201_CREATED)
def create_menu_item(request: MenuItemCreate, db: Session = Depends(get_db)):
    try:
        item = MenuService(db).create_item(**request.model_dump())
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _menu_item_response(item)


@router.put("/menu/{menu_item_id}", response_model=MenuItemResponse)
def update_menu_item(menu_item_id: str, request: MenuItemCreate, db: Session = Depends(get_db)):
    try:
        item = MenuService(db).update_item(menu_item_id, **request.model_dump())
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    except ConflictError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc
    return _menu_item_response(item)


@router.delete("/menu/{menu_item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_menu_item(menu_item_id: str, db: Session = Depends(get_db)):
    try:
        MenuService(db).retire_item(menu_item_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------
# CUSTOMERS
# ---------------------

@router.get("/customers/{customer_id}/loyalty", response_model=LoyaltyPointsResponse)
def get_loyalty_points(customer_id: str, db: Session = Depends(get_db)):
    customer = CustomerRepository(db).get_by_id(customer_id)
    if not customer:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )

    progress = tier_progress(customer.loyalty_points)
    return LoyaltyPointsResponse(
        customer_id=customer.id,
        current_balance=customer.loyalty_points,
        current_tier=progress.tier.value,
        discount_percentage=progress.discount_rate,
        current_tier_threshold=progress.threshold,
        next_tier=progress.next_tier.value if progress.next_tier else None,
        next_tier_threshold=progress.next_tier_threshold,
        points_to_next_tier=progress.points_to_next_tier,
    )


@router.get(
    "/customers/{customer_id}/loyalty/history",
    response_model=list[LoyaltyTransactionResponse],
)
def get_loyalty_history(customer_id: str, db: Session = Depends(get_db)):
    repository = CustomerRepository(db)
    if not repository.exists(customer_id):
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Customer not found",
        )

    return [
        LoyaltyTransactionResponse(
            id=entry.id,
            points_change=entry.points_change,
            transaction_type=entry.transaction_type.value,
            description=entry.description,
            transaction_date=entry.transaction_date.isoformat(),
            order_id=entry.order_id,
        )
        for entry in repository.list_loyalty_history(customer_id)
    ]


@router.get("/customers/{customer_id}/profile", response_model=CustomerProfileResponse)
def get_customer_profile(customer_id: str, db: Session = Depends(get_db)):
    try:
        customer = CustomerService(db).get_profile(customer_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _profile_response(customer)


@router.put("/customers/{customer_id}/profile", response_model=CustomerProfileResponse)
def update_customer_profile(
    customer_id: str,
    request: CustomerProfileUpdate,
    db: Session = Depends(get_db),
):
    try:
        customer = CustomerService(db).update_profile(customer_id, **request.model_dump())
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return _profile_response(customer)


@router.get("/customers/{customer_id}/visits", response_model=VisitStatsResponse)
def get_visit_stats(customer_id: str, db: Session = Depends(get_db)):
    try:
        stats = CustomerService(db).visit_stats(customer_id)
    except NotFoundError as exc:
        raise _not_found(exc) from exc
    return VisitStatsResponse(
        customer_id=stats.customer_id,
        total_visits=stats.total_visits,
        games_played=stats.games_played,
        total_spent=stats.total_spent,
        total_orders=stats.total_orders,
        average_order_value=stats.average_order_value,
    )
