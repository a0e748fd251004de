# src/infrastructure/db/models.py

from sqlalchemy import (
    String,
    Integer,
    Boolean,
    Date,
    DateTime,
    Time,
    Numeric,
    Enum,
    Text,
    Index,
    CheckConstraint,
    ForeignKey,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship
from datetime import date, datetime, time
from decimal import Decimal
from uuid import uuid4

from src.infrastructure.db.session import Base
from src.domain.enums import (
    EventType,
    GameCategory,
    GameCondition,
    LoyaltyTransactionType,
    MembershipTier,
    MenuCategory,
    PaymentMethod,
    ReservationStatus,
)
from src.domain.state_machine import OrderStatus, PaymentStatus, RegistrationStatus


def _uuid() -> str:
    return str(uuid4())


class Customer(Base):
    __tablename__ = "customers"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    first_name: Mapped[str] = mapped_column(String(64), nullable=False)
    last_name: Mapped[str] = mapped_column(String(64), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32), nullable=True)
    membership_tier: Mapped[MembershipTier] = mapped_column(
        Enum(MembershipTier, name="membership_tier"),
        nullable=False,
        default=MembershipTier.NONE,
    )
    loyalty_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    total_visits: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    joined_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    __table_args__ = (
        CheckConstraint("loyalty_points >= 0", name="ck_customer_loyalty_points_nonnegative"),
    )

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


class Event(Base):
    """
    Capacity-limited ticketed event.

    current_participants is derived from the loaded registrations and is
    only authoritative inside the registration transaction.
    """

    __tablename__ = "events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    event_type: Mapped[EventType] = mapped_column(
        Enum(EventType, name="event_type"),
        nullable=False,
        default=EventType.GAME_NIGHT,
    )
    event_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=120)
    max_participants: Mapped[int] = mapped_column(Integer, nullable=False)
    ticket_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    registrations: Mapped[list["EventRegistration"]] = relationship(
        back_populates="event",
        order_by="EventRegistration.registered_at",
    )

    __table_args__ = (
        CheckConstraint("max_participants > 0", name="ck_event_max_participants_positive"),
        CheckConstraint("ticket_price >= 0", name="ck_event_ticket_price_nonnegative"),
    )

    @property
    def current_participants(self) -> int:
        return sum(
            1 for registration in self.registrations
            if registration.status != RegistrationStatus.CANCELLED
        )


class EventRegistration(Base):
    __tablename__ = "event_registrations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    event_id: Mapped[str] = mapped_column(String(36), ForeignKey("events.id"), nullable=False)
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), nullable=False)
    registered_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    status: Mapped[RegistrationStatus] = mapped_column(
        Enum(RegistrationStatus, name="registration_status"),
        nullable=False,
        default=RegistrationStatus.REGISTERED,
    )
    payment_status: Mapped[PaymentStatus] = mapped_column(
        Enum(PaymentStatus, name="payment_status"),
        nullable=False,
        default=PaymentStatus.PENDING,
    )

    event: Mapped[Event] = relationship(back_populates="registrations")
    customer: Mapped[Customer] = relationship()

    __table_args__ = (
        # At most one active registration per (event, customer).
        Index(
            "uq_event_registration_active",
            "event_id",
            "customer_id",
            unique=True,
            sqlite_where=text("status != 'CANCELLED'"),
            postgresql_where=text("status != 'CANCELLED'"),
        ),
        Index("ix_event_registration_event_registered_at", "event_id", "registered_at"),
    )


class CafeTable(Base):
    __tablename__ = "cafe_tables"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    table_number: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    seating_capacity: Mapped[int] = mapped_column(Integer, nullable=False)
    hourly_rate: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    is_window_seat: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)

    __table_args__ = (
        CheckConstraint("seating_capacity > 0", name="ck_table_capacity_positive"),
        CheckConstraint("hourly_rate >= 0", name="ck_table_hourly_rate_nonnegative"),
    )


class Reservation(Base):
    __tablename__ = "reservations"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), nullable=False)
    table_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("cafe_tables.id"), nullable=True)
    reservation_date: Mapped[date] = mapped_column(Date, nullable=False)
    start_time: Mapped[time] = mapped_column(Time, nullable=False)
    end_time: Mapped[time] = mapped_column(Time, nullable=False)
    party_size: Mapped[int] = mapped_column(Integer, nullable=False)
    status: Mapped[ReservationStatus] = mapped_column(
        Enum(ReservationStatus, name="reservation_status"),
        nullable=False,
        default=ReservationStatus.PENDING,
    )
    special_requests: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    customer: Mapped[Customer] = relationship()
    table: Mapped[CafeTable | None] = relationship()

    __table_args__ = (
        CheckConstraint("start_time < end_time", name="ck_reservation_time_order"),
        Index("ix_reservation_table_date_start", "table_id", "reservation_date", "start_time"),
    )


class MenuItem(Base):
    __tablename__ = "menu_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    category: Mapped[MenuCategory] = mapped_column(
        Enum(MenuCategory, name="menu_category"),
        nullable=False,
    )
    price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    is_available: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    preparation_time_minutes: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    allergen_info: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_vegetarian: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_vegan: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_gluten_free: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_menu_item_price_nonnegative"),
    )


class Order(Base):
    """
    Money fields are derived. OrderTotalCalculator rewrites all four
    together; nothing else should patch them.
    """

    __tablename__ = "orders"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), nullable=False)
    reservation_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("reservations.id"),
        nullable=True,
    )
    order_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )
    status: Mapped[OrderStatus] = mapped_column(
        Enum(OrderStatus, name="order_status"),
        nullable=False,
        default=OrderStatus.DRAFT,
    )
    subtotal: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    discount_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    tax_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    loyalty_points_redeemed: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    payment_method: Mapped[PaymentMethod | None] = mapped_column(
        Enum(PaymentMethod, name="payment_method"),
        nullable=True,
    )

    customer: Mapped[Customer] = relationship()
    items: Mapped[list["OrderItem"]] = relationship(
        back_populates="order",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint("total_amount >= 0", name="ck_order_total_nonnegative"),
        CheckConstraint("discount_amount >= 0", name="ck_order_discount_nonnegative"),
    )


class OrderItem(Base):
    __tablename__ = "order_items"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    order_id: Mapped[str] = mapped_column(String(36), ForeignKey("orders.id"), nullable=False)
    menu_item_id: Mapped[str] = mapped_column(String(36), ForeignKey("menu_items.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    special_instructions: Mapped[str | None] = mapped_column(Text, nullable=True)

    order: Mapped[Order] = relationship(back_populates="items")
    menu_item: Mapped[MenuItem] = relationship()

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_order_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_order_item_unit_price_nonnegative"),
    )


class LoyaltyPointsHistory(Base):
    __tablename__ = "loyalty_points_history"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    customer_id: Mapped[str] = mapped_column(String(36), ForeignKey("customers.id"), nullable=False)
    order_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("orders.id"), nullable=True)
    points_change: Mapped[int] = mapped_column(Integer, nullable=False)
    transaction_type: Mapped[LoyaltyTransactionType] = mapped_column(
        Enum(LoyaltyTransactionType, name="loyalty_transaction_type"),
        nullable=False,
    )
    description: Mapped[str] = mapped_column(String(255), nullable=False, default="")
    transaction_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)


class Game(Base):
    """
    A title in the lending library. copies_in_use moves only through
    GameService check-out and return.
    """

    __tablename__ = "games"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    title: Mapped[str] = mapped_column(String(128), nullable=False, unique=True)
    publisher: Mapped[str | None] = mapped_column(String(128), nullable=True)
    min_players: Mapped[int] = mapped_column(Integer, nullable=False)
    max_players: Mapped[int] = mapped_column(Integer, nullable=False)
    play_time_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    age_rating: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    complexity: Mapped[Decimal] = mapped_column(Numeric(3, 1), nullable=False, default=Decimal("1.0"))
    category: Mapped[GameCategory] = mapped_column(
        Enum(GameCategory, name="game_category"),
        nullable=False,
    )
    copies_owned: Mapped[int] = mapped_column(Integer, nullable=False, default=1)
    copies_in_use: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    daily_rental_fee: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False, default=Decimal("0"))
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)

    __table_args__ = (
        CheckConstraint("min_players > 0", name="ck_game_min_players_positive"),
        CheckConstraint("min_players <= max_players", name="ck_game_player_range"),
        CheckConstraint("copies_in_use >= 0", name="ck_game_copies_in_use_nonnegative"),
        CheckConstraint("copies_in_use <= copies_owned", name="ck_game_copies_in_use_le_owned"),
    )

    @property
    def is_available(self) -> bool:
        return self.copies_owned > self.copies_in_use


class GameSession(Base):
    __tablename__ = "game_sessions"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    game_id: Mapped[str] = mapped_column(String(36), ForeignKey("games.id"), nullable=False)
    reservation_id: Mapped[str] = mapped_column(String(36), ForeignKey("reservations.id"), nullable=False)
    checked_out_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    due_back_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    returned_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    condition: Mapped[GameCondition | None] = mapped_column(
        Enum(GameCondition, name="game_condition"),
        nullable=True,
    )
    late_fee_applied: Mapped[Decimal | None] = mapped_column(Numeric(10, 2), nullable=True)

    game: Mapped[Game] = relationship()
    reservation: Mapped[Reservation] = relationship()

    __table_args__ = (
        Index("ix_game_session_reservation", "reservation_id"),
    )
