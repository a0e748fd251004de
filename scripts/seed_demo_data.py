from datetime import datetime, timedelta, timezone
from decimal import Decimal

from sqlalchemy import select

from src.domain.enums import EventType, GameCategory, MembershipTier, MenuCategory
from src.infrastructure.db.models import Base, CafeTable, Customer, Event, Game, MenuItem
from src.infrastructure.db.session import SessionLocal, engine


def _dt(days_from_now: int, hour: int, minute: int) -> datetime:
    now_utc = datetime.now(timezone.utc)
    target = now_utc + timedelta(days=days_from_now)
    return target.replace(hour=hour, minute=minute, second=0, microsecond=0)


def seed_tables(db) -> None:
    tables = [
        {"table_number": "T1", "seating_capacity": 2, "hourly_rate": Decimal("5.00"), "is_window_seat": True},
        {"table_number": "T2", "seating_capacity": 4, "hourly_rate": Decimal("8.00"), "is_window_seat": False},
        {"table_number": "T3", "seating_capacity": 6, "hourly_rate": Decimal("12.00"), "is_window_seat": False},
        {"table_number": "P1", "seating_capacity": 10, "hourly_rate": Decimal("20.00"), "is_window_seat": False},
    ]

    for item in tables:
        existing = db.execute(
            select(CafeTable).where(CafeTable.table_number == item["table_number"])
        ).scalar_one_or_none()
        if existing:
            existing.seating_capacity = item["seating_capacity"]
            existing.hourly_rate = item["hourly_rate"]
            existing.is_window_seat = item["is_window_seat"]
            existing.is_active = True
            continue
        db.add(CafeTable(**item))


def seed_menu(db) -> None:
    menu = [
        ("Flat White", MenuCategory.COFFEE, Decimal("3.80")),
        ("Chai Latte", MenuCategory.TEA, Decimal("3.50")),
        ("Nachos", MenuCategory.SNACKS, Decimal("7.50")),
        ("Meeple Burger", MenuCategory.MEALS, Decimal("14.00")),
        ("Brownie", MenuCategory.DESSERTS, Decimal("4.50")),
        ("Craft IPA", MenuCategory.ALCOHOL, Decimal("6.50")),
    ]

    for name, category, price in menu:
        existing = db.execute(
            select(MenuItem).where(MenuItem.name == name)
        ).scalar_one_or_none()
        if existing:
            existing.category = category
            existing.price = price
            existing.is_available = True
            continue
        db.add(MenuItem(name=name, category=category, price=price, is_available=True))


def seed_games(db) -> None:
    games = [
        ("Catan", GameCategory.STRATEGY, 3, 4, 90, 3),
        ("Codenames", GameCategory.PARTY, 4, 8, 20, 2),
        ("Ticket to Ride", GameCategory.FAMILY, 2, 5, 60, 2),
        ("Pandemic", GameCategory.COOPERATIVE, 2, 4, 45, 1),
        ("Azul", GameCategory.ABSTRACT, 2, 4, 40, 2),
    ]

    for title, category, min_players, max_players, minutes, copies in games:
        existing = db.execute(
            select(Game).where(Game.title == title)
        ).scalar_one_or_none()
        if existing:
            existing.copies_owned = max(copies, existing.copies_in_use)
            continue
        db.add(
            Game(
                title=title,
                category=category,
                min_players=min_players,
                max_players=max_players,
                play_time_minutes=minutes,
                copies_owned=copies,
                copies_in_use=0,
                daily_rental_fee=Decimal("3.00"),
            )
        )


def seed_customers(db) -> None:
    customers = [
        ("ada@example.com", "Ada", "Lovelace", MembershipTier.GOLD, 2400),
        ("alan@example.com", "Alan", "Turing", MembershipTier.SILVER, 650),
        ("grace@example.com", "Grace", "Hopper", MembershipTier.NONE, 0),
    ]

    for email, first_name, last_name, tier, points in customers:
        existing = db.execute(
            select(Customer).where(Customer.email == email)
        ).scalar_one_or_none()
        if existing:
            continue
        db.add(
            Customer(
                email=email,
                first_name=first_name,
                last_name=last_name,
                membership_tier=tier,
                loyalty_points=points,
            )
        )


def seed_events(db) -> None:
    event_defs = [
        {
            "title": "Catan Tournament",
            "event_type": EventType.TOURNAMENT,
            "event_date": _dt(days_from_now=7, hour=18, minute=0),
            "duration_minutes": 240,
            "max_participants": 16,
            "ticket_price": Decimal("10.00"),
        },
        {
            "title": "Friday Game Night",
            "event_type": EventType.GAME_NIGHT,
            "event_date": _dt(days_from_now=3, hour=19, minute=0),
            "duration_minutes": 180,
            "max_participants": 30,
            "ticket_price": Decimal("0"),
        },
    ]

    for item in event_defs:
        existing = db.execute(
            select(Event).where(Event.title == item["title"])
        ).scalar_one_or_none()
        if existing:
            existing.event_date = item["event_date"]
            existing.max_participants = item["max_participants"]
            existing.ticket_price = item["ticket_price"]
            continue
        db.add(Event(**item))


def main() -> None:
    Base.metadata.create_all(bind=engine)
    db = SessionLocal()
    try:
        seed_tables(db)
        seed_menu(db)
        seed_games(db)
        seed_customers(db)
        seed_events(db)
        db.commit()
        print("Seed complete: tables, menu, games, customers and upcoming events added.")
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    main()
