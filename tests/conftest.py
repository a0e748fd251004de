import os
import tempfile

# Must be set before anything under src/ is imported: the engine is built at import time.
_DB_DIR = tempfile.mkdtemp(prefix="cafe-engine-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'cafe.db')}"
os.environ.setdefault("DB_CONNECT_MAX_RETRIES", "1")

from datetime import date, datetime, time, timedelta, timezone
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from src.domain.enums import GameCategory, MembershipTier, MenuCategory, ReservationStatus
from src.infrastructure.db.models import Base, CafeTable, Customer, Event, Game, MenuItem, Reservation
from src.infrastructure.db.session import SessionLocal, engine
from src.main import app


@pytest.fixture(autouse=True)
def fresh_schema():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def session_factory():
    return SessionLocal


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def _persist(instance):
    session = SessionLocal()
    try:
        session.add(instance)
        session.commit()
        return instance
    finally:
        session.close()


@pytest.fixture
def make_customer():
    counter = {"n": 0}

    def _make(tier: MembershipTier = MembershipTier.NONE, loyalty_points: int = 0) -> Customer:
        counter["n"] += 1
        return _persist(
            Customer(
                email=f"player{counter['n']}@example.com",
                first_name="Player",
                last_name=str(counter["n"]),
                membership_tier=tier,
                loyalty_points=loyalty_points,
            )
        )

    return _make


@pytest.fixture
def make_event():
    def _make(max_participants: int = 10, ticket_price: Decimal = Decimal("0")) -> Event:
        return _persist(
            Event(
                title="Catan Night",
                event_date=datetime.now(timezone.utc) + timedelta(days=7),
                duration_minutes=180,
                max_participants=max_participants,
                ticket_price=ticket_price,
            )
        )

    return _make


@pytest.fixture
def make_table():
    counter = {"n": 0}

    def _make(seating_capacity: int = 4, hourly_rate: Decimal = Decimal("8.00")) -> CafeTable:
        counter["n"] += 1
        return _persist(
            CafeTable(
                table_number=f"T{counter['n']}",
                seating_capacity=seating_capacity,
                hourly_rate=hourly_rate,
            )
        )

    return _make


@pytest.fixture
def make_menu_item():
    def _make(
        name: str = "Nachos",
        category: MenuCategory = MenuCategory.SNACKS,
        price: Decimal = Decimal("10.00"),
        is_available: bool = True,
        **extra,
    ) -> MenuItem:
        return _persist(
            MenuItem(name=name, category=category, price=price, is_available=is_available, **extra)
        )

    return _make


@pytest.fixture
def make_game():
    counter = {"n": 0}

    def _make(
        title: str | None = None,
        category: GameCategory = GameCategory.STRATEGY,
        min_players: int = 2,
        max_players: int = 4,
        copies_owned: int = 1,
        copies_in_use: int = 0,
    ) -> Game:
        counter["n"] += 1
        return _persist(
            Game(
                title=title or f"Game {counter['n']}",
                min_players=min_players,
                max_players=max_players,
                play_time_minutes=60,
                category=category,
                copies_owned=copies_owned,
                copies_in_use=copies_in_use,
            )
        )

    return _make


@pytest.fixture
def make_reservation():
    def _make(
        customer: Customer,
        table: CafeTable,
        status: ReservationStatus = ReservationStatus.CONFIRMED,
        days_ahead: int = 1,
        start_time: time = time(18, 0),
        end_time: time = time(20, 0),
    ) -> Reservation:
        return _persist(
            Reservation(
                customer_id=customer.id,
                table_id=table.id,
                reservation_date=date.today() + timedelta(days=days_ahead),
                start_time=start_time,
                end_time=end_time,
                party_size=2,
                status=status,
            )
        )

    return _make
